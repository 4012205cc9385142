import pytest

from qforge.errors import ExitCode, InvalidIdentifier
from qforge.sanitize import is_valid_identifier, sanitize, sanitize_aggregate, sanitize_qualified


def test_plain_identifier_accepted():
    assert sanitize("created_at") == "created_at"
    assert sanitize("Col9") == "Col9"


@pytest.mark.parametrize(
    "name",
    ["id; DROP TABLE users", "first name", "name'--", "users.id", "", "a-b", "\"id\"", "id\n", "\nid"],
)
def test_injection_shaped_names_rejected(name):
    with pytest.raises(InvalidIdentifier, match="Invalid"):
        sanitize(name)


def test_non_string_rejected():
    assert not is_valid_identifier(None)
    assert not is_valid_identifier(5)
    with pytest.raises(InvalidIdentifier):
        sanitize(5)


def test_error_carries_structured_problem():
    with pytest.raises(InvalidIdentifier) as exc:
        sanitize("x y", context="sort field")
    err = exc.value
    assert err.exit_code == ExitCode.INVALID_INPUT
    assert err.problem.code == "QFORGE_INVALID_IDENTIFIER"
    assert err.problem.details == {"name": "x y", "context": "sort field"}
    assert "sort field" in str(err)


def test_qualified_names():
    assert sanitize_qualified("users.id") == "users.id"
    assert sanitize_qualified("public.users") == "public.users"
    for bad in ["users..id", ".id", "id.", "users.id;", "u.id OR 1=1"]:
        with pytest.raises(InvalidIdentifier):
            sanitize_qualified(bad)


def test_aggregate_expressions():
    assert sanitize_aggregate("COUNT(*)") == "COUNT(*)"
    assert sanitize_aggregate("sum(orders.total)") == "sum(orders.total)"
    assert sanitize_aggregate("status") == "status"
    with pytest.raises(InvalidIdentifier):
        sanitize_aggregate("COUNT(*) OR 1=1")
    with pytest.raises(InvalidIdentifier):
        sanitize_aggregate("COUNT(a, b)")


def test_trailing_newline_rejected_everywhere():
    assert not is_valid_identifier("id\n")
    with pytest.raises(InvalidIdentifier):
        sanitize_qualified("users.id\n")
    with pytest.raises(InvalidIdentifier):
        sanitize_aggregate("COUNT(*)\n")
