"""
表存储层模块
"""

from .table_store import TableStore, Row, Value

__all__ = ["TableStore", "Row", "Value"]
