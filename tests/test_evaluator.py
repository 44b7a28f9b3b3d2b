"""
/tests/test_evaluator.py

查询求值器测试（经由 JudgeDatabase 会话）
"""
import sys
import os

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from interface import JudgeDatabase
from sql import EngineError, ErrorKind, Leniency, ResultSet
from sql.evaluator import like_to_regex, stringify, to_number


USERS_DDL = "CREATE TABLE users (id INT PRIMARY KEY, name VARCHAR(255), email VARCHAR(255), password VARCHAR(255))"


@pytest.fixture
def db():
    database = JudgeDatabase("evaluator_test")
    database.run(USERS_DDL)
    database.run("INSERT INTO users VALUES (1, 'Alice', 'alice@gmail.com', 'x')")
    database.run("INSERT INTO users VALUES (2, 'Bob', 'bob@yahoo.com', 'y')")
    yield database
    database.close()


@pytest.fixture
def strict_db():
    database = JudgeDatabase("evaluator_strict", leniency=Leniency.STRICT)
    yield database
    database.close()


def test_select_all_round_trip(db):
    results = db.exec("SELECT * FROM users")
    assert results == [
        ResultSet(
            ["id", "name", "email", "password"],
            [[1, "Alice", "alice@gmail.com", "x"], [2, "Bob", "bob@yahoo.com", "y"]],
        )
    ]


def test_delete_then_select_is_empty(db):
    db.run("DELETE FROM users")
    results = db.exec("SELECT * FROM users")
    assert results[0].values == []
    db.run("DELETE FROM users")
    assert db.exec("SELECT * FROM users")[0].values == []


def test_like_is_case_insensitive(db):
    results = db.exec("SELECT * FROM users WHERE email LIKE '%GMAIL%'")
    assert results[0].values == [[1, "Alice", "alice@gmail.com", "x"]]


def test_like_treats_dot_literally(db):
    db.run("INSERT INTO users VALUES (3, 'Carl', 'carl@gmailxcom', 'z')")
    results = db.exec("SELECT * FROM users WHERE email LIKE '%gmail.com%'")
    assert [row[0] for row in results[0].values] == [1]


def test_string_equality(db):
    results = db.exec("SELECT * FROM users WHERE email = 'bob@yahoo.com'")
    assert results[0].values == [[2, "Bob", "bob@yahoo.com", "y"]]


def test_string_equality_matches_any_cell(db):
    # 等值条件扫描整行而不是指定列
    results = db.exec("SELECT * FROM users WHERE name = 'bob@yahoo.com'")
    assert results[0].values == [[2, "Bob", "bob@yahoo.com", "y"]]


def test_number_equality_uses_first_column(db):
    results = db.exec("SELECT * FROM users WHERE id = 2")
    assert results[0].values == [[2, "Bob", "bob@yahoo.com", "y"]]


def test_count(db):
    results = db.exec("SELECT COUNT(*) FROM users")
    assert results[0].columns == ["COUNT(*)"]
    assert results[0].values == [[2]]


def test_count_with_filter(db):
    results = db.exec("SELECT COUNT(*) FROM users WHERE email LIKE '%gmail%'")
    assert results[0].values == [[1]]


def test_greater_than_uses_last_column():
    with JudgeDatabase() as database:
        database.run("CREATE TABLE orders (id INT, customer_id INT, order_date DATE, total DECIMAL(10,2))")
        database.run("INSERT INTO orders VALUES (1, 1, 'd', 99.99)")
        database.run("INSERT INTO orders VALUES (2, 1, 'd', 149.50)")
        results = database.exec("SELECT * FROM orders WHERE total > 100")
        assert results[0].values == [[2, 1, "d", 149.5]]
        assert results[0].columns == ["id", "customer_id", "order_date", "total"]


def test_group_by_count_keeps_first_seen_order():
    with JudgeDatabase() as database:
        database.run("CREATE TABLE orders (id INT, customer_id INT, order_date DATE, total DECIMAL(10,2))")
        database.run(
            "INSERT INTO orders VALUES (1, 3, 'a', 1), (2, 1, 'b', 2), (3, 3, 'c', 3), (4, 2, 'd', 4)"
        )
        results = database.exec("SELECT customer_id, COUNT(*) FROM orders GROUP BY customer_id")
        assert results[0].columns == ["customer_id", "COUNT(*)"]
        assert results[0].values == [[3, 2], [1, 1], [2, 1]]

def test_group_by_keys_keep_value_type():
    # 1 与 1.0 数值相等归为一组，字符串 '1' 单独成组
    with JudgeDatabase() as database:
        database.run("CREATE TABLE orders (id INT, customer_id INT, order_date DATE, total DECIMAL(10,2))")
        database.run("INSERT INTO orders VALUES (1, 1, 'a', 1), (2, '1', 'b', 2), (3, 1.0, 'c', 3)")
        results = database.exec("SELECT customer_id, COUNT(*) FROM orders GROUP BY customer_id")
        assert results[0].values == [[1, 2], ["1", 1]]
        assert isinstance(results[0].values[0][0], int)



def test_unknown_table_uses_fallback_columns():
    with JudgeDatabase() as database:
        database.run("CREATE TABLE widgets (a INT, b INT)")
        database.run("INSERT INTO widgets VALUES (1, 2)")
        results = database.exec("SELECT * FROM widgets")
        assert results[0].columns == ["col1", "col2", "col3"]
        assert results[0].values == [[1, 2]]


def test_non_select_returns_no_results(db):
    assert db.exec("DELETE FROM users") == []
    assert db.exec("SELECT 1") == []
    # exec不会修改数据
    assert len(db.exec("SELECT * FROM users")[0].values) == 2


def test_lenient_missing_table_is_empty():
    with JudgeDatabase() as database:
        results = database.exec("SELECT * FROM nowhere")
        assert results[0].values == []


def test_lenient_unsupported_predicate_keeps_rows(db):
    results = db.exec("SELECT * FROM users WHERE id < 2")
    assert len(results[0].values) == 2


def test_strict_unknown_table(strict_db):
    with pytest.raises(EngineError) as excinfo:
        strict_db.exec("SELECT * FROM nowhere")
    assert excinfo.value.kind == ErrorKind.UNKNOWN_TABLE


def test_strict_unsupported_predicate(strict_db):
    strict_db.run(USERS_DDL)
    with pytest.raises(EngineError) as excinfo:
        strict_db.exec("SELECT * FROM users WHERE id < 2")
    assert excinfo.value.kind == ErrorKind.UNSUPPORTED_PREDICATE


def test_strict_unknown_group_column(strict_db):
    strict_db.run(USERS_DDL)
    with pytest.raises(EngineError) as excinfo:
        strict_db.exec("SELECT region, COUNT(*) FROM users GROUP BY region")
    assert excinfo.value.kind == ErrorKind.UNKNOWN_COLUMN


def test_sessions_are_isolated():
    first = JudgeDatabase()
    second = JudgeDatabase()
    try:
        first.run("CREATE TABLE users (id INT)")
        first.run("INSERT INTO users VALUES (1, 'a', 'b', 'c')")
        assert second.list_tables() == []
        assert second.exec("SELECT * FROM users")[0].values == []
    finally:
        first.close()
        second.close()


def test_execute_query_wraps_errors(strict_db):
    result = strict_db.execute_query("SELECT * FROM nowhere")
    assert result["success"] is False
    assert result["message"].startswith("SQL Error:")
    assert "nowhere" in result["message"]


def test_execute_query_success(db):
    result = db.execute_query("SELECT COUNT(*) FROM users")
    assert result["success"] is True
    assert result["results"] == [{"columns": ["COUNT(*)"], "values": [[2]]}]


def test_reset_drops_everything(db):
    assert db.reset() == 1
    assert db.list_tables() == []
    assert db.reset() == 0


def test_closed_session_rejects_work(db):
    db.close()
    with pytest.raises(RuntimeError):
        db.exec("SELECT * FROM users")


def test_value_helpers():
    assert stringify(1.0) == "1"
    assert stringify(149.5) == "149.5"
    assert to_number("") == 0.0
    assert to_number(" 12.5 ") == 12.5
    assert to_number("abc") is None
    assert to_number("inf") is None
    assert like_to_regex("a%c").search("ABC")


def main():
    pytest.main([__file__, "-v"])


if __name__ == "__main__":
    main()
