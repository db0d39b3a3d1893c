"""Tests for the error hierarchy — codes, statuses, and REST envelopes."""

from app.core.errors import (
    CacheError, ErrorCategory, ErrorContext, InputValidationError,
    PublishError, StoreError, StoreFailure, UserItemsError,
)


def test_store_error_status_follows_reason():
    assert StoreError("x", "CreateUser", StoreFailure.CONSTRAINT).http_status == 500
    assert StoreError("x", "CreateUser", StoreFailure.UNAVAILABLE).http_status == 503
    assert StoreError("x", "UserItems", StoreFailure.DEADLINE_EXCEEDED).http_status == 504


def test_store_error_code_and_category():
    err = StoreError("deadline exceeded", "user_items", StoreFailure.DEADLINE_EXCEEDED)
    assert err.code == "STORE_DEADLINE_EXCEEDED"
    assert err.category is ErrorCategory.TIMEOUT
    assert err.message == "Store user_items failed: deadline exceeded"


def test_store_error_defaults_to_unknown():
    err = StoreError("boom", "AddItemToUser")
    assert err.reason is StoreFailure.UNKNOWN
    assert err.category is ErrorCategory.DATABASE


def test_validation_error_envelope_lists_details():
    violations = [{"field": "user_id", "message": "too long", "type": "string_too_long"}]
    err = InputValidationError(violations, ErrorContext(user_id="u"))

    body = err.to_response()["error"]
    assert body["code"] == "VALIDATION_ERROR"
    assert body["category"] == "validation"
    assert body["details"] == violations
    assert body["context"]["user_id"] == "u"


def test_all_errors_share_base():
    for err in (
        CacheError("down", "get"),
        PublishError("down", "reads"),
        StoreError("down", "UserItems"),
        InputValidationError([{"field": "f", "message": "m", "type": "t"}]),
    ):
        assert isinstance(err, UserItemsError)
        assert "timestamp" in err.to_response()["error"]
