"""
SQL处理层模块
"""

from .lexer import SQLLexer, Token, TokenType
from .parser import SQLParser, parse_sql, coerce_literal
from .executor import StatementExecutor, split_script
from .evaluator import QueryEvaluator, ResultSet, COUNT_LABEL
from .errors import EngineError, ErrorKind, display_message
from .leniency import Leniency
from .ast_nodes import *

__all__ = [
    "SQLLexer",
    "SQLParser",
    "StatementExecutor",
    "QueryEvaluator",
    "ResultSet",
    "COUNT_LABEL",
    "Token",
    "TokenType",
    "parse_sql",
    "coerce_literal",
    "split_script",
    "EngineError",
    "ErrorKind",
    "display_message",
    "Leniency",
    "Statement",
    "CreateTableStatement",
    "DropTableStatement",
    "DeleteStatement",
    "InsertStatement",
    "SelectStatement",
    "ParseFailure",
    "Predicate",
    "LikePredicate",
    "StringEqualsPredicate",
    "NumberEqualsPredicate",
    "GreaterThanPredicate",
    "UnsupportedPredicate",
]
