"""
列目录 - 表名到展示列名的映射
"""

from typing import Dict, List, Optional

# 内置教学题目使用的表结构
DEFAULT_TABLE_COLUMNS: Dict[str, List[str]] = {
    "users": ["id", "name", "email", "password"],
    "customers": ["id", "name", "email"],
    "orders": ["id", "customer_id", "order_date", "total"],
    "posts": ["id", "author_id", "content", "created_at"],
    "likes": ["id", "user_id", "post_id"],
}

FALLBACK_COLUMNS: List[str] = ["col1", "col2", "col3"]


class SchemaCatalog:
    """列目录

    只用于给结果集打列标签和解析GROUP BY列位置，
    列数量从不与实际行宽度做校验。
    """

    def __init__(
        self,
        table_columns: Optional[Dict[str, List[str]]] = None,
        fallback: Optional[List[str]] = None,
    ):
        source = DEFAULT_TABLE_COLUMNS if table_columns is None else table_columns
        self._columns: Dict[str, List[str]] = {}
        for table_name, columns in source.items():
            self.register(table_name, columns)
        self.fallback = list(fallback) if fallback is not None else list(FALLBACK_COLUMNS)

    def register(self, table_name: str, columns: List[str]):
        """注册（或覆盖）一张表的列名"""
        self._columns[table_name.lower()] = [c.lower() for c in columns]

    def unregister(self, table_name: str) -> bool:
        return self._columns.pop(table_name.lower(), None) is not None

    def is_known(self, table_name: str) -> bool:
        return table_name.lower() in self._columns

    def columns_for(self, table_name: str) -> List[str]:
        """获取表的列名，未登记的表返回通用列名"""
        return list(self._columns.get(table_name.lower(), self.fallback))

    def column_index(self, table_name: str, column_name: str) -> int:
        """获取列位置，找不到返回-1"""
        columns = self.columns_for(table_name)
        try:
            return columns.index(column_name.lower())
        except ValueError:
            return -1

    def tables(self) -> List[str]:
        return list(self._columns.keys())
