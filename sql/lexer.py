"""
SQL词法分析器
"""

from enum import Enum
from typing import List, NamedTuple

from .errors import EngineError, ErrorKind


class TokenType(Enum):
    # 关键字
    SELECT = "SELECT"
    FROM = "FROM"
    WHERE = "WHERE"
    INSERT = "INSERT"
    INTO = "INTO"
    VALUES = "VALUES"
    CREATE = "CREATE"
    TABLE = "TABLE"
    DROP = "DROP"
    DELETE = "DELETE"
    IF = "IF"
    EXISTS = "EXISTS"
    LIKE = "LIKE"
    COUNT = "COUNT"
    GROUP = "GROUP"
    ORDER = "ORDER"
    BY = "BY"
    LIMIT = "LIMIT"
    AND = "AND"
    OR = "OR"
    PRIMARY = "PRIMARY"
    KEY = "KEY"

    # 标识符和字面量
    IDENTIFIER = "IDENTIFIER"
    NUMBER = "NUMBER"
    STRING = "STRING"

    # 运算符
    EQUALS = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_EQUAL = "<="
    GREATER_EQUAL = ">="
    NOT_EQUAL = "!="

    # 分隔符
    COMMA = ","
    SEMICOLON = ";"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    STAR = "*"
    DOT = "."

    # 特殊
    UNKNOWN = "UNKNOWN"  # 无法识别的字符，交给语法分析器决定如何处理
    EOF = "EOF"


class Token(NamedTuple):
    type: TokenType
    value: str
    line: int
    column: int


class SQLLexer:
    """SQL词法分析器"""

    KEYWORDS = {
        "SELECT": TokenType.SELECT,
        "FROM": TokenType.FROM,
        "WHERE": TokenType.WHERE,
        "INSERT": TokenType.INSERT,
        "INTO": TokenType.INTO,
        "VALUES": TokenType.VALUES,
        "CREATE": TokenType.CREATE,
        "TABLE": TokenType.TABLE,
        "DROP": TokenType.DROP,
        "DELETE": TokenType.DELETE,
        "IF": TokenType.IF,
        "EXISTS": TokenType.EXISTS,
        "LIKE": TokenType.LIKE,
        "COUNT": TokenType.COUNT,
        "GROUP": TokenType.GROUP,
        "ORDER": TokenType.ORDER,
        "BY": TokenType.BY,
        "LIMIT": TokenType.LIMIT,
        "AND": TokenType.AND,
        "OR": TokenType.OR,
        "PRIMARY": TokenType.PRIMARY,
        "KEY": TokenType.KEY,
    }

    def __init__(self, sql: str):
        self.sql = sql
        self.position = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """将SQL文本分解为Token列表"""
        while self.position < len(self.sql):
            self._skip_whitespace()

            if self.position >= len(self.sql):
                break

            char = self.sql[self.position]

            if char == "#" or (char == "-" and self._peek() == "-"):
                # 跳过注释到行尾
                while self.position < len(self.sql) and self.sql[self.position] != "\n":
                    self.position += 1
                continue

            if char.isalpha() or char == "_":
                self._read_identifier_or_keyword()
            elif char.isdigit() or (char == "-" and self._lookahead_is_digit()):
                self._read_number()
            elif char in ("'", '"'):
                self._read_string(char)
            elif char == "=":
                self._add_single_char_token(TokenType.EQUALS, char)
            elif char == "<":
                self._read_two_char_operator(TokenType.LESS_THAN, TokenType.LESS_EQUAL)
            elif char == ">":
                self._read_two_char_operator(TokenType.GREATER_THAN, TokenType.GREATER_EQUAL)
            elif char == "!" and self._peek() == "=":
                self._read_two_char_operator(TokenType.UNKNOWN, TokenType.NOT_EQUAL)
            elif char == ",":
                self._add_single_char_token(TokenType.COMMA, char)
            elif char == ";":
                self._add_single_char_token(TokenType.SEMICOLON, char)
            elif char == "(":
                self._add_single_char_token(TokenType.LEFT_PAREN, char)
            elif char == ")":
                self._add_single_char_token(TokenType.RIGHT_PAREN, char)
            elif char == "*":
                self._add_single_char_token(TokenType.STAR, char)
            elif char == ".":
                self._read_dot()
            else:
                self._add_single_char_token(TokenType.UNKNOWN, char)

        self._add_token(TokenType.EOF, "")
        return self.tokens

    def _peek(self, offset: int = 1) -> str:
        pos = self.position + offset
        return self.sql[pos] if pos < len(self.sql) else ""

    def _skip_whitespace(self):
        """跳过空白字符"""
        while self.position < len(self.sql) and self.sql[self.position].isspace():
            if self.sql[self.position] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.position += 1

    def _lookahead_is_digit(self) -> bool:
        return self._peek().isdigit() or (self._peek() == "." and self._peek(2).isdigit())

    def _read_identifier_or_keyword(self):
        """读取标识符或关键字"""
        start = self.position
        start_column = self.column

        while self.position < len(self.sql) and (
            self.sql[self.position].isalnum() or self.sql[self.position] == "_"
        ):
            self.position += 1
            self.column += 1

        value = self.sql[start : self.position]
        token_type = self.KEYWORDS.get(value.upper(), TokenType.IDENTIFIER)
        self.tokens.append(Token(token_type, value, self.line, start_column))

    def _read_number(self):
        """读取数字（整数或浮点数），支持可选的负号"""
        start = self.position
        start_column = self.column
        has_dot = False

        if self.sql[self.position] == "-":
            self.position += 1
            self.column += 1

        while self.position < len(self.sql):
            char = self.sql[self.position]
            if char.isdigit():
                self.position += 1
                self.column += 1
            elif char == "." and not has_dot and self._peek().isdigit():
                has_dot = True
                self.position += 1
                self.column += 1
            else:
                break

        value = self.sql[start : self.position]
        self.tokens.append(Token(TokenType.NUMBER, value, self.line, start_column))

    def _read_dot(self):
        """处理点号 - 可能是小数点或DOT操作符"""
        if self._peek().isdigit():
            self._read_number()
        else:
            self._add_single_char_token(TokenType.DOT, ".")

    def _read_string(self, quote_char: str):
        """读取字符串字面量，支持反斜杠转义"""
        start_line = self.line
        start_column = self.column
        self.position += 1  # 跳过开始引号
        self.column += 1

        value = ""
        while self.position < len(self.sql):
            char = self.sql[self.position]

            if char == quote_char:
                self.position += 1
                self.column += 1
                self.tokens.append(Token(TokenType.STRING, value, start_line, start_column))
                return
            elif char == "\\":
                self.position += 1
                self.column += 1
                if self.position < len(self.sql):
                    escaped_char = self.sql[self.position]
                    if escaped_char == "n":
                        value += "\n"
                    elif escaped_char == "t":
                        value += "\t"
                    else:
                        value += escaped_char
                    self.position += 1
                    self.column += 1
            else:
                value += char
                self.position += 1
                if char == "\n":
                    self.line += 1
                    self.column = 1
                else:
                    self.column += 1

        raise EngineError(
            ErrorKind.MALFORMED_LITERAL,
            f"未闭合的字符串，开始于行 {start_line}, 列 {start_column}",
            line=start_line,
            column_no=start_column,
            detail=f"unterminated string {quote_char}{value}",
        )

    def _read_two_char_operator(self, single: TokenType, double: TokenType):
        """读取 <, <=, >, >=, != 这类运算符"""
        if self._peek() == "=":
            value = self.sql[self.position : self.position + 2]
            self.tokens.append(Token(double, value, self.line, self.column))
            self.position += 2
            self.column += 2
        else:
            self._add_single_char_token(single, self.sql[self.position])

    def _add_token(self, token_type: TokenType, value: str):
        """添加Token（不移动位置）"""
        self.tokens.append(Token(token_type, value, self.line, self.column))

    def _add_single_char_token(self, token_type: TokenType, char: str):
        """添加单字符Token并移动位置"""
        self.tokens.append(Token(token_type, char, self.line, self.column))
        self.position += 1
        self.column += 1


def tokenize(sql: str) -> List[Token]:
    return SQLLexer(sql).tokenize()
