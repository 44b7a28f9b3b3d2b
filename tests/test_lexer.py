"""
/tests/test_lexer.py

词法分析器单元测试
"""
import sys
import os

import pytest

# 将上级目录（项目根目录）添加到 sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from sql.lexer import SQLLexer, TokenType
from sql.errors import EngineError, ErrorKind


def _types_and_values(sql):
    return [(t.type, t.value) for t in SQLLexer(sql).tokenize()]


def test_keywords_and_identifiers():
    tokens = _types_and_values("select id FROM users WHERE id = 1;")
    assert tokens == [
        (TokenType.SELECT, 'select'),
        (TokenType.IDENTIFIER, 'id'),
        (TokenType.FROM, 'FROM'),
        (TokenType.IDENTIFIER, 'users'),
        (TokenType.WHERE, 'WHERE'),
        (TokenType.IDENTIFIER, 'id'),
        (TokenType.EQUALS, '='),
        (TokenType.NUMBER, '1'),
        (TokenType.SEMICOLON, ';'),
        (TokenType.EOF, ''),
    ]


def test_string_literal_keeps_percent_and_case():
    tokens = _types_and_values("email LIKE '%GMAIL.com%'")
    assert tokens[1] == (TokenType.LIKE, 'LIKE')
    assert tokens[2] == (TokenType.STRING, '%GMAIL.com%')


def test_escaped_quote_inside_string():
    tokens = _types_and_values(r"'O\'Brien'")
    assert tokens[0] == (TokenType.STRING, "O'Brien")


def test_negative_and_decimal_numbers():
    tokens = _types_and_values("(-5, 149.50, .5)")
    numbers = [v for t, v in tokens if t == TokenType.NUMBER]
    assert numbers == ['-5', '149.50', '.5']


def test_line_comments_are_skipped():
    tokens = _types_and_values("-- Database Schema\nCREATE TABLE users (id INT)")
    assert tokens[0] == (TokenType.CREATE, 'CREATE')


def test_operators():
    types = [t for t, _ in _types_and_values("a > 1 b >= 2 c != 3 d < 4")]
    assert TokenType.GREATER_THAN in types
    assert TokenType.GREATER_EQUAL in types
    assert TokenType.NOT_EQUAL in types
    assert TokenType.LESS_THAN in types


def test_unknown_character_becomes_token():
    tokens = _types_and_values("UPDATE t SET x = x + 1")
    assert (TokenType.UNKNOWN, '+') in tokens


def test_unclosed_string_is_malformed_literal():
    with pytest.raises(EngineError) as excinfo:
        SQLLexer("INSERT INTO users VALUES (1, 'abc").tokenize()
    assert excinfo.value.kind == ErrorKind.MALFORMED_LITERAL
    assert excinfo.value.context["line"] == 1


def test_token_positions():
    tokens = SQLLexer("SELECT *\nFROM users").tokenize()
    from_token = tokens[2]
    assert from_token.type == TokenType.FROM
    assert (from_token.line, from_token.column) == (2, 1)


def main():
    pytest.main([__file__, "-v"])


if __name__ == "__main__":
    main()
