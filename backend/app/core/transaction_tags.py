"""Transaction Tags — opaque labels attached to store transactions and statements.

Invariants:
    - Tags have no effect on transaction semantics; they exist for log/trace correlation
    - Format is comma separated key=value pairs: func=<Operation>,env=<env>[,action=<action>]
    - Rendered SQL comments never contain a comment terminator

Design Decisions:
    - Statement tags travel as a leading SQL comment (sqlcommenter style) so they show
      up in the database's own query logs without driver support
"""

from app.core.domain_types import Operation, StatementAction


def transaction_tag(operation: Operation, env: str) -> str:
    return f"func={operation.value},env={env}"


def request_tag(operation: Operation, env: str, action: StatementAction) -> str:
    return f"{transaction_tag(operation, env)},action={action.value}"


def sql_comment(tag: str) -> str:
    """Render a tag as an inline SQL comment."""
    safe = tag.replace("*/", "* /").replace("/*", "/ *")
    return f"/* {safe} */"

