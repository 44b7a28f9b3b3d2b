"""
表存储 - 保存所有表及其行数据（纯内存）
"""

from typing import Dict, List, Union

Value = Union[int, float, str]
Row = List[Value]


class TableStore:
    """内存表存储，只负责保存，不做任何列结构校验

    表名不区分大小写，统一按小写保存；行是任意长度的标量列表。
    """

    def __init__(self):
        self._tables: Dict[str, List[Row]] = {}

    @staticmethod
    def _key(table_name: str) -> str:
        return table_name.lower()

    def create(self, table_name: str):
        """注册一张空表（已存在时重置为空）"""
        self._tables[self._key(table_name)] = []

    def drop(self, table_name: str) -> bool:
        """删除表，表不存在时返回False"""
        return self._tables.pop(self._key(table_name), None) is not None

    def clear(self, table_name: str) -> bool:
        """清空表数据，表不存在时返回False"""
        key = self._key(table_name)
        if key not in self._tables:
            return False
        self._tables[key] = []
        return True

    def append(self, table_name: str, row: Row) -> bool:
        """追加一行，表不存在时返回False"""
        key = self._key(table_name)
        if key not in self._tables:
            return False
        self._tables[key].append(list(row))
        return True

    def has_table(self, table_name: str) -> bool:
        return self._key(table_name) in self._tables

    def rows(self, table_name: str) -> List[Row]:
        """返回表中行的副本，未知表返回空列表"""
        return [list(row) for row in self._tables.get(self._key(table_name), [])]

    def row_count(self, table_name: str) -> int:
        return len(self._tables.get(self._key(table_name), []))

    def table_names(self) -> List[str]:
        return list(self._tables.keys())

    def drop_all(self) -> int:
        """删除所有表，返回删除的表数量"""
        count = len(self._tables)
        self._tables.clear()
        return count
