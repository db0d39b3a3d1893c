"""Domain Types — verifies identity wrappers and enum values.

Tests:
    - NewType wrappers exist and are callable
    - Enums have expected members and serialize to string
"""

from app.core.domain_types import (
    ItemId, Operation, PublishMode, StatementAction, UserId,
)


def test_identity_types_wrap_str():
    assert UserId("u-1") == "u-1"
    assert ItemId("item-1") == "item-1"


def test_operations_match_tag_names():
    assert [op.value for op in Operation] == ["CreateUser", "AddItemToUser", "UserItems"]


def test_publish_mode_from_string():
    assert PublishMode("async") is PublishMode.ASYNC
    assert PublishMode.SYNC == "sync"


def test_statement_actions():
    assert {a.value for a in StatementAction} == {"insert", "query"}
