"""
/tests/test_storage_and_catalog.py

表存储与列目录单元测试
"""
import sys
import os

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from table import TableStore
from catalog import SchemaCatalog, DEFAULT_TABLE_COLUMNS


def test_table_names_are_case_insensitive():
    store = TableStore()
    store.create("Users")
    assert store.has_table("USERS")
    assert store.table_names() == ["users"]


def test_append_does_not_validate_width():
    store = TableStore()
    store.create("t")
    assert store.append("t", [1])
    assert store.append("t", [1, "a", 2.5, "b", "c"])
    assert store.rows("t") == [[1], [1, "a", 2.5, "b", "c"]]


def test_append_and_clear_unknown_table():
    store = TableStore()
    assert store.append("missing", [1]) is False
    assert store.clear("missing") is False
    assert store.rows("missing") == []
    assert store.has_table("missing") is False


def test_rows_returns_copies():
    store = TableStore()
    store.create("t")
    store.append("t", [1, "x"])
    rows = store.rows("t")
    rows[0][1] = "changed"
    assert store.rows("t") == [[1, "x"]]


def test_drop_and_drop_all():
    store = TableStore()
    store.create("a")
    store.create("b")
    assert store.drop("a") is True
    assert store.drop("a") is False
    assert store.drop_all() == 1
    assert store.table_names() == []


def test_default_catalog_columns():
    catalog = SchemaCatalog()
    assert catalog.columns_for("users") == ["id", "name", "email", "password"]
    assert catalog.columns_for("ORDERS") == ["id", "customer_id", "order_date", "total"]
    assert catalog.columns_for("likes") == ["id", "user_id", "post_id"]
    assert catalog.columns_for("widgets") == ["col1", "col2", "col3"]


def test_catalog_column_index():
    catalog = SchemaCatalog()
    assert catalog.column_index("orders", "Customer_ID") == 1
    assert catalog.column_index("orders", "missing") == -1


def test_catalog_is_configurable():
    catalog = SchemaCatalog({"books": ["isbn", "title"]}, fallback=["a"])
    assert catalog.columns_for("books") == ["isbn", "title"]
    assert catalog.columns_for("users") == ["a"]
    catalog.register("Authors", ["ID", "Name"])
    assert catalog.is_known("authors")
    assert catalog.columns_for("authors") == ["id", "name"]


def test_catalog_copies_default_mapping():
    catalog = SchemaCatalog()
    catalog.register("users", ["x"])
    assert DEFAULT_TABLE_COLUMNS["users"] == ["id", "name", "email", "password"]


def main():
    pytest.main([__file__, "-v"])


if __name__ == "__main__":
    main()
