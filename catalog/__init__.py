"""
列目录模块
"""

from .schema_catalog import SchemaCatalog, DEFAULT_TABLE_COLUMNS, FALLBACK_COLUMNS

__all__ = [
    "SchemaCatalog",
    "DEFAULT_TABLE_COLUMNS",
    "FALLBACK_COLUMNS",
]
