from app.query.builder import Equal, Like, OrderBy, QueryBuilder, Range

BASE = "SELECT v.id FROM cars.vehicles v"


def test_build_without_conditions_returns_base():
    sql, args = QueryBuilder().build(BASE)
    assert sql == BASE
    assert args == []


def test_conditions_are_numbered_in_order():
    qb = QueryBuilder()
    qb.add_equal("v.make", "Toyota")
    qb.add_range("v.mileage_km", 10000, 80000)
    qb.add_like("v.model", "pri")

    sql, args = qb.build(BASE, limit=5, offset=5)

    assert sql == (
        BASE
        + " WHERE v.make = $1 AND v.mileage_km BETWEEN $2 AND $3 AND v.model ILIKE $4"
        + " LIMIT $5 OFFSET $6"
    )
    assert args == ["Toyota", 10000, 80000, "%pri%", 5, 5]


def test_min_and_max_render_inclusive_bounds():
    qb = QueryBuilder().add_min("v.year_of_manufacture", 2015).add_max("v.mileage_km", 50000)
    sql, args = qb.build(BASE)
    assert sql.endswith("WHERE v.year_of_manufacture >= $1 AND v.mileage_km <= $2")
    assert args == [2015, 50000]


def test_limit_and_offset_only_when_positive():
    qb = QueryBuilder().add_equal("v.color", "Red")
    sql, args = qb.build(BASE, limit=0, offset=0)
    assert "LIMIT" not in sql and "OFFSET" not in sql
    assert args == ["Red"]

    sql, args = qb.build(BASE, limit=10)
    assert sql.endswith("LIMIT $2")
    assert args == ["Red", 10]


def test_numbering_restarts_on_each_build():
    qb = QueryBuilder().add_equal("v.make", "Honda")
    first = qb.build(BASE, limit=10, offset=20)
    second = qb.build(BASE, limit=10, offset=20)
    assert first == second


def test_count_query_skips_order_and_shares_prefix():
    qb = QueryBuilder().add_equal("v.make", "Nissan").set_order_by("v.year_of_manufacture", "desc", "v.id")

    data_sql, data_args = qb.build(BASE, limit=10, offset=10)
    count_sql, count_args = qb.build("SELECT COUNT(*) FROM cars.vehicles v", count_only=True)

    assert "ORDER BY v.year_of_manufacture DESC, v.id DESC" in data_sql
    assert "ORDER BY" not in count_sql
    assert data_args[: len(count_args)] == count_args
    assert count_args == ["Nissan"]


def test_explicit_order_overrides_default_order():
    qb = QueryBuilder().set_order_by("v.make")
    sql, _ = qb.build(BASE, order_by="v.created_at DESC")
    assert sql.endswith("ORDER BY v.make ASC")

    sql, _ = QueryBuilder().build(BASE, order_by="v.created_at DESC, v.id DESC")
    assert sql.endswith("ORDER BY v.created_at DESC, v.id DESC")


def test_group_by_precedes_order_by():
    sql, _ = QueryBuilder().build(
        "SELECT v.make, COUNT(*) FROM cars.vehicles v", group_by="v.make", order_by="v.make"
    )
    assert sql.endswith("GROUP BY v.make ORDER BY v.make")


def test_order_direction_is_normalised():
    assert OrderBy("v.make", "desc").direction == "DESC"
    assert OrderBy("v.make", "sideways").direction == "ASC"
    assert OrderBy("v.make", "").direction == "ASC"


def test_tiebreaker_is_not_repeated_for_same_field():
    assert OrderBy("v.id", "DESC", "v.id").render() == "ORDER BY v.id DESC"


def test_values_never_reach_sql_text():
    hostile = "x'; DROP TABLE cars.vehicles; --"
    qb = QueryBuilder().add_equal("v.make", hostile).add_like("v.model", hostile)
    sql, args = qb.build(BASE)
    assert hostile not in sql
    assert args == [hostile, f"%{hostile}%"]


def test_conditions_render_themselves():
    assert Equal("a", 1).render(3) == ("a = $3", [1], 4)
    assert Like("a", "b").render(1) == ("a ILIKE $1", ["%b%"], 2)
    assert Range("a", 1, 2).render(2) == ("a BETWEEN $2 AND $3", [1, 2], 4)
