import pytest

from qforge import BuilderConfig, CypherQuery, Pattern, cypher
from qforge.errors import InvalidArgument, InvalidCondition, InvalidIdentifier, ParameterCountMismatch
from qforge.types import SortDirection


def test_node_match_return_single_parameter():
    b = cypher()
    n = b.node("n", ["Person"], {"name": "Ann"})
    q = b.match(n).return_("n").build()
    assert q == CypherQuery(
        query="MATCH (n:Person {name: $props1.name})\nRETURN n",
        params={"props1": {"name": "Ann"}},
    )
    assert q.query.count("$props1") == 1


def test_return_before_match_still_emits_match_first():
    b = cypher()
    q = b.return_("n").match(b.node("n", ["Person"])).build()
    assert q.query == "MATCH (n:Person)\nRETURN n"


def test_full_clause_order():
    b = cypher()
    (
        b.limit(5)
        .skip(10)
        .order_by("m.name", "desc")
        .return_("n", "m")
        .delete("r")
        .detach_delete("x")
        .set_property("n", "seen", True)
        .merge(b.node("t", ["Tag"], {"name": "t1"}))
        .create("(n)-[:TAGGED]->(t)")
        .with_("n", "m")
        .where_equals("n", "name", "Ann")
        .unwind([1, 2], "i")
        .optional_match("(n)-[r:KNOWS]->(m)")
        .match(b.node("n", ["Person"]))
    )
    q = b.build()
    assert q.query.split("\n") == [
        "MATCH (n:Person)",
        "OPTIONAL MATCH (n)-[r:KNOWS]->(m)",
        "UNWIND $param6 AS i",
        "WHERE n.name = $param5",
        "WITH n, m",
        "CREATE (n)-[:TAGGED]->(t)",
        "MERGE (t:Tag {name: $props4.name})",
        "SET n.seen = $param3",
        "DETACH DELETE x",
        "DELETE r",
        "RETURN n, m",
        "ORDER BY m.name DESC",
        "SKIP $skip2",
        "LIMIT $limit1",
    ]
    # names are minted in call order, not emission order
    assert q.params == {
        "limit1": 5,
        "skip2": 10,
        "param3": True,
        "props4": {"name": "t1"},
        "param5": "Ann",
        "param6": [1, 2],
    }


def test_where_conditions_joined_with_and():
    b = cypher()
    q = (
        b.match(b.node("n", ["Person"]))
        .where_compare("n", "age", ">", 30)
        .where_in("n", "city", ["Oslo", "Rome"])
        .where_not_null("n", "email")
        .where_starts_with("n", "name", "A")
        .return_("n")
        .build()
    )
    assert q.query == (
        "MATCH (n:Person)\n"
        "WHERE n.age > $param1 AND n.city IN [$param2, $param3] AND n.email IS NOT NULL"
        " AND n.name STARTS WITH $param4\n"
        "RETURN n"
    )
    assert q.params == {"param1": 30, "param2": "Oslo", "param3": "Rome", "param4": "A"}


def test_empty_where_in_adds_nothing():
    b = cypher()
    q = b.match(b.node("n")).where_in("n", "id", []).where_not_in("n", "id", []).return_("n").build()
    assert q == CypherQuery(query="MATCH (n)\nRETURN n", params={})


def test_raw_where_with_markers():
    b = cypher()
    q = (
        b.match("(n:Person)")
        .where_equals("n", "team", "a")
        .where("n.age > ? AND n.age < ?", [20, 30])
        .where("exists((n)--())")
        .return_("n")
        .build()
    )
    assert q.query.split("\n")[1] == "WHERE n.team = $param1 AND n.age > $param2 AND n.age < $param3 AND exists((n)--())"
    assert q.params == {"param1": "a", "param2": 20, "param3": 30}


def test_raw_where_marker_mismatch():
    with pytest.raises(ParameterCountMismatch):
        cypher().where("n.age > ?", [])


def test_where_filters():
    b = cypher()
    q = b.match(b.node("n")).where_filters("n", {"age": {"$gte": 18}, "name": {"$contains": "an"}, "x": None}).build()
    assert q.query == "MATCH (n)\nWHERE n.age >= $param1 AND n.name CONTAINS $param2 AND n.x IS NULL"
    assert q.params == {"param1": 18, "param2": "an"}


def test_like_not_available():
    with pytest.raises(InvalidCondition):
        cypher().where_compare("n", "name", "LIKE", "A%")


def test_unused_pattern_leaves_no_parameter():
    b = cypher()
    b.node("ghost", ["Person"], {"name": "nobody"})
    used = b.node("n", ["Person"], {"name": "Ann"})
    q = b.match(used).return_("n").build()
    assert q.params == {"props2": {"name": "Ann"}}
    assert "props1" not in q.query


def test_every_param_is_referenced():
    b = cypher()
    a = b.node("a", ["P"], {"id": 1})
    c = b.node("c", ["P"], {"id": 2})
    rel = b.relationship("r", "R", {"w": 3})
    q = (
        b.match(a)
        .match(c)
        .create(b.path([b.node("a"), rel, b.node("c")]))
        .set_properties("r", {"updated": True})
        .return_("r")
        .skip(0)
        .limit(1)
        .build()
    )
    for name in q.params:
        assert f"${name}" in q.query
    assert len(q.params) == 6


def test_set_properties_and_unwind_expression():
    b = cypher()
    q = b.unwind("$rows", "row").merge("(p:Person {id: row.id})").set("p += row").build()
    assert q.query == "UNWIND $rows AS row\nMERGE (p:Person {id: row.id})\nSET p += row"
    assert q.params == {}


def test_set_raw_with_value():
    b = cypher()
    q = b.match("(n)").set("n.updated_at = ?", ["2024-01-01"]).set_properties("n", {"a": 1}).build()
    assert q.query == "MATCH (n)\nSET n.updated_at = $param1, n += $param2"
    assert q.params == {"param1": "2024-01-01", "param2": {"a": 1}}


def test_delete_partitions():
    q = cypher().match("(n)-[r]-(m)").delete("r").detach_delete("n", "m").build()
    assert q.query == "MATCH (n)-[r]-(m)\nDETACH DELETE n, m\nDELETE r"


def test_skip_limit_last_value_wins():
    q = cypher().match("(n)").return_("n").limit(5).limit(10).build()
    assert q.query == "MATCH (n)\nRETURN n\nLIMIT $limit2"
    assert q.params == {"limit2": 10}


def test_skip_limit_validated():
    with pytest.raises(InvalidArgument):
        cypher().skip(-1)
    with pytest.raises(InvalidArgument):
        cypher().limit("5")


def test_identifiers_sanitized():
    with pytest.raises(InvalidIdentifier):
        cypher().where_equals("n", "name = 'x' OR 1=1 //", "a")
    with pytest.raises(InvalidIdentifier):
        cypher().delete("n; MATCH (m)")
    with pytest.raises(InvalidIdentifier):
        cypher().set_properties("n", {"bad key": 1})
    with pytest.raises(InvalidIdentifier):
        cypher().order_by("n.name DESC, m")


def test_match_rejects_empty_pattern():
    with pytest.raises(InvalidArgument):
        cypher().match("  ")


def test_clause_separator_from_config():
    q = cypher(config=BuilderConfig(graph_clause_separator=" ")).match("(n)").return_("n").build()
    assert q.query == "MATCH (n) RETURN n"


def test_build_is_repeatable_and_returns_copies():
    b = cypher()
    b.match(b.node("n", ["P"], {"id": 1})).return_("n")
    first = b.build()
    first.params["props1"] = "mutated"
    assert b.build().params == {"props1": {"id": 1}}


def test_order_by_accepts_sort_direction_enum():
    q = cypher().match("(n)").return_("n").order_by("n.age", SortDirection.DESC).build()
    assert q.query == "MATCH (n)\nRETURN n\nORDER BY n.age DESC"


def test_blank_pattern_object_rejected():
    b = cypher()
    with pytest.raises(InvalidArgument):
        b.match(b.path([]))
    with pytest.raises(InvalidArgument):
        b.create(Pattern(" "))


def test_build_writes_nothing_to_stdout(capsys):
    b = cypher()
    b.match(b.node("n", ["Person"], {"name": "Ann"})).where_in("n", "id", []).return_("n").build()
    assert capsys.readouterr().out == ""
