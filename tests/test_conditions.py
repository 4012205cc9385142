import pytest

from qforge.conditions import (
    Contains,
    Gte,
    In,
    IsNotNull,
    IsNull,
    Lt,
    conditions_from_filters,
    make_condition,
    make_raw,
    parse_filters,
    render_condition,
    render_conditions,
    to_comparators,
)
from qforge.errors import InvalidCondition, InvalidIdentifier
from qforge.params import NamedParameters, PositionalParameters
from qforge.types import Dialect, FieldCondition, Operator

SQL = Dialect.RELATIONAL
GRAPH = Dialect.GRAPH


def _render(field, op, value, dialect=SQL):
    store = PositionalParameters() if dialect is SQL else NamedParameters()
    text = render_condition(make_condition(field, op, value, dialect), store)
    return text, store.values


def test_scalar_comparison_consumes_one_placeholder():
    assert _render("age", ">=", 18) == ("age >= $1", [18])
    assert _render("name", "like", "A%") == ("name LIKE $1", ["A%"])


def test_not_equal_is_normalized():
    assert _render("status", "!=", "x") == ("status <> $1", ["x"])


def test_null_checks_take_no_placeholder():
    assert _render("deleted_at", "=", None) == ("deleted_at IS NULL", [])
    assert _render("deleted_at", "<>", None) == ("deleted_at IS NOT NULL", [])
    assert _render("deleted_at", "is not", None) == ("deleted_at IS NOT NULL", [])


def test_null_with_ordering_operator_fails():
    with pytest.raises(InvalidCondition, match="NULL"):
        make_condition("age", ">", None, SQL)


def test_is_with_value_fails():
    with pytest.raises(InvalidCondition, match="only accepts NULL"):
        make_condition("age", "IS", 3, SQL)


def test_in_one_placeholder_per_element_in_order():
    assert _render("id", "IN", [3, 1, 2]) == ("id IN ($1, $2, $3)", [3, 1, 2])
    assert _render("id", "not in", (7,)) == ("id NOT IN ($1)", [7])


def test_empty_in_renders_nothing_and_binds_nothing():
    assert _render("id", "IN", []) == (None, [])
    assert _render("id", "NOT IN", []) == (None, [])


def test_in_requires_a_list():
    with pytest.raises(InvalidCondition, match="requires a list"):
        make_condition("id", "IN", 5, SQL)
    with pytest.raises(InvalidCondition, match="requires a list"):
        make_condition("id", "IN", "abc", SQL)


def test_graph_in_renders_list_literal():
    text, params = _render("n.id", "IN", [1, 2], GRAPH)
    assert text == "n.id IN [$param1, $param2]"
    assert params == {"param1": 1, "param2": 2}
    text, _ = _render("n.id", "NOT IN", [1], GRAPH)
    assert text == "NOT n.id IN [$param1]"


def test_unknown_operator():
    with pytest.raises(InvalidCondition, match="Unsupported operator"):
        make_condition("age", "~~", 1, SQL)


def test_operators_restricted_by_dialect():
    with pytest.raises(InvalidCondition, match="not available in SQL"):
        make_condition("name", "CONTAINS", "a", SQL)
    with pytest.raises(InvalidCondition, match="not available in Cypher"):
        make_condition("n.name", "ILIKE", "a", GRAPH)
    assert _render("n.name", "starts with", "A", GRAPH) == ("n.name STARTS WITH $param1", {"param1": "A"})


def test_field_is_sanitized():
    with pytest.raises(InvalidIdentifier):
        make_condition("id; DROP TABLE users", "=", 1, SQL)


def test_raw_condition_renumbered_in_place():
    store = PositionalParameters()
    text = render_conditions(
        [
            make_condition("status", "=", "active", SQL),
            make_raw("age BETWEEN ? AND ?", [18, 65]),
            make_condition("role", "IN", ["a", "b"], SQL),
        ],
        store,
    )
    assert text == "status = $1 AND age BETWEEN $2 AND $3 AND role IN ($4, $5)"
    assert store.values == ["active", 18, 65, "a", "b"]


def test_render_conditions_none_when_everything_skipped():
    store = PositionalParameters()
    assert render_conditions([make_condition("id", "IN", [], SQL)], store) is None
    assert render_conditions([], store) is None


def test_make_raw_rejects_blank():
    with pytest.raises(InvalidCondition):
        make_raw("   ")


def test_to_comparators_shapes():
    assert to_comparators(None) == [IsNull()]
    assert to_comparators([1, 2]) == [In([1, 2])]
    assert to_comparators({"$gte": 1, "$lt": 9}) == [Gte(1), Lt(9)]
    assert to_comparators({"$null": False}) == [IsNotNull()]
    assert to_comparators(Contains("x")) == [Contains("x")]


def test_unknown_filter_operator():
    with pytest.raises(InvalidCondition, match=r"\$regex"):
        to_comparators({"$regex": "a.*"})


def test_parse_filters_keeps_key_order():
    pairs = parse_filters({"b": 1, "a": {"$gt": 2, "$lte": 5}})
    assert [(f, type(c).__name__) for f, c in pairs] == [("b", "Eq"), ("a", "Gt"), ("a", "Lte")]


def test_conditions_from_filters():
    conds = conditions_from_filters({"status": "active", "deleted_at": None, "id": {"$in": [1]}}, SQL)
    assert conds == [
        FieldCondition("status", Operator.EQ, "active"),
        FieldCondition("deleted_at", Operator.IS),
        FieldCondition("id", Operator.IN, (1,)),
    ]
