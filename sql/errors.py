"""
执行引擎错误定义
"""

from enum import Enum
from typing import Any, Dict


class ErrorKind(Enum):
    """引擎错误种类（封闭集合）"""

    UNKNOWN_TABLE = "UnknownTable"
    UNKNOWN_COLUMN = "UnknownColumn"
    MALFORMED_LITERAL = "MalformedLiteral"
    UNSUPPORTED_PREDICATE = "UnsupportedPredicate"
    UNSUPPORTED_STATEMENT = "UnsupportedStatement"
    SEED_FAILURE = "SeedFailure"


class EngineError(Exception):
    """执行引擎错误，携带错误种类和结构化上下文"""

    def __init__(self, kind: ErrorKind, message: str, **context: Any):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context: Dict[str, Any] = context

    def __repr__(self):
        return f"EngineError({self.kind.value}, {self.message!r}, {self.context})"


# 边界处展示给学习者的文案
_DISPLAY_TEMPLATES = {
    ErrorKind.UNKNOWN_TABLE: "Table '{table}' does not exist",
    ErrorKind.UNKNOWN_COLUMN: "Column '{column}' is not known for table '{table}'",
    ErrorKind.MALFORMED_LITERAL: "Malformed literal near line {line}, column {column_no}: {detail}",
    ErrorKind.UNSUPPORTED_PREDICATE: "Unsupported WHERE condition: {condition}",
    ErrorKind.UNSUPPORTED_STATEMENT: "Unsupported statement: {statement}",
    ErrorKind.SEED_FAILURE: "{detail}",
}


def display_message(error: Exception) -> str:
    """把异常映射为展示文案，非引擎异常直接使用str()"""
    if not isinstance(error, EngineError):
        return str(error)
    template = _DISPLAY_TEMPLATES.get(error.kind)
    if template is None:
        return error.message
    try:
        return template.format(**error.context)
    except KeyError:
        return error.message
