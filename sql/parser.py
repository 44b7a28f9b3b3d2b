"""
SQL语法分析器
"""

import re
from typing import List, Optional

from .ast_nodes import (
    CreateTableStatement,
    DeleteStatement,
    DropTableStatement,
    GreaterThanPredicate,
    InsertStatement,
    LikePredicate,
    NumberEqualsPredicate,
    ParseFailure,
    Predicate,
    SelectStatement,
    Statement,
    StringEqualsPredicate,
    UnsupportedPredicate,
    Value,
)
from .errors import EngineError, ErrorKind
from .lexer import SQLLexer, Token, TokenType

_INT_RE = re.compile(r"^-?\d+$")
_FLOAT_RE = re.compile(r"^-?(\d+\.?\d*|\.\d+)([eE][-+]?\d+)?$")

# WHERE子句在这些关键字处结束
_CLAUSE_END = (TokenType.GROUP, TokenType.ORDER, TokenType.LIMIT, TokenType.SEMICOLON, TokenType.EOF)


def coerce_literal(text: str) -> Value:
    """未加引号的字面量：能解析为数字则转为数字，否则保留字符串"""
    text = text.strip()
    if _INT_RE.match(text):
        return int(text)
    if _FLOAT_RE.match(text):
        return float(text)
    return text


class SQLParser:
    """SQL语法分析器
    将Token流解析为语句节点；无法识别的语句形态返回ParseFailure而不是抛异常。
    """

    def __init__(self, tokens: List[Token], sql: str = ""):
        self.tokens = tokens
        self.sql = sql
        self.position = 0
        self.current_token = tokens[0] if tokens else None

    def parse(self) -> Statement:
        """根据首个token分发到不同的解析分支"""
        if not self.current_token or self.current_token.type == TokenType.EOF:
            return self._fail("空的SQL语句")

        token_type = self.current_token.type
        if token_type == TokenType.CREATE:
            return self._parse_create_table()
        elif token_type == TokenType.DROP:
            return self._parse_drop_table()
        elif token_type == TokenType.DELETE:
            return self._parse_delete()
        elif token_type == TokenType.INSERT:
            return self._parse_insert()
        elif token_type == TokenType.SELECT:
            return self._parse_select()
        return self._fail(f"不支持的语句类型: {self.current_token.value}")

    def _fail(self, reason: str) -> ParseFailure:
        return ParseFailure(self.sql.strip(), reason)

    def _advance(self):
        """移动到下一个token"""
        if self.position < len(self.tokens) - 1:
            self.position += 1
            self.current_token = self.tokens[self.position]

    def _match(self, *types: TokenType) -> Optional[Token]:
        """当前token类型匹配则消费并返回，否则返回None"""
        if self.current_token and self.current_token.type in types:
            token = self.current_token
            self._advance()
            return token
        return None

    def _match_word(self, word: str) -> bool:
        """匹配不在关键字表里的单词（如NOT）"""
        if self.current_token and self.current_token.value.upper() == word:
            self._advance()
            return True
        return False

    def _table_name(self) -> Optional[str]:
        token = self._match(TokenType.IDENTIFIER)
        return token.value.lower() if token else None

    def _parse_create_table(self) -> Statement:
        self._advance()
        if not self._match(TokenType.TABLE):
            return self._fail("期望TABLE")
        if_not_exists = False
        if self.current_token.type == TokenType.IF:
            self._advance()
            if not (self._match_word("NOT") and self._match(TokenType.EXISTS)):
                return self._fail("期望IF NOT EXISTS")
            if_not_exists = True
        table_name = self._table_name()
        if not table_name:
            return self._fail("期望表名")
        return CreateTableStatement(table_name, self._column_names(), if_not_exists)

    def _column_names(self) -> List[str]:
        """从列定义中取出每一项的首个单词，类型和约束不做解析"""
        columns = []
        if not self._match(TokenType.LEFT_PAREN):
            return columns
        depth = 1
        expect_name = True
        while self.current_token.type != TokenType.EOF and depth > 0:
            token = self.current_token
            if token.type == TokenType.LEFT_PAREN:
                depth += 1
            elif token.type == TokenType.RIGHT_PAREN:
                depth -= 1
            elif token.type == TokenType.COMMA and depth == 1:
                expect_name = True
            elif expect_name and depth == 1:
                if token.type == TokenType.IDENTIFIER:
                    columns.append(token.value.lower())
                expect_name = False
            self._advance()
        return columns

    def _parse_drop_table(self) -> Statement:
        self._advance()
        if not self._match(TokenType.TABLE):
            return self._fail("期望TABLE")
        if_exists = False
        if self._match(TokenType.IF):
            if not self._match(TokenType.EXISTS):
                return self._fail("期望IF EXISTS")
            if_exists = True
        table_name = self._table_name()
        if not table_name:
            return self._fail("期望表名")
        return DropTableStatement(table_name, if_exists)

    def _parse_delete(self) -> Statement:
        self._advance()
        if not self._match(TokenType.FROM):
            return self._fail("期望FROM")
        table_name = self._table_name()
        if not table_name:
            return self._fail("期望表名")
        # WHERE等后续子句不参与，整表清空
        return DeleteStatement(table_name)

    def _parse_insert(self) -> Statement:
        self._advance()
        if not self._match(TokenType.INTO):
            return self._fail("期望INTO")
        table_name = self._table_name()
        if not table_name:
            return self._fail("期望表名")

        # 可选的列名列表不参与插入
        if self.current_token.type == TokenType.LEFT_PAREN:
            while self.current_token.type not in (TokenType.RIGHT_PAREN, TokenType.EOF):
                self._advance()
            self._advance()

        if not self._match(TokenType.VALUES):
            return self._fail("期望VALUES")

        rows = []
        while self._match(TokenType.LEFT_PAREN):
            row = self._parse_value_list()
            if row is None:
                return self._fail("VALUES缺少右括号")
            rows.append(row)
            if not self._match(TokenType.COMMA):
                break
        if not rows:
            return self._fail("期望VALUES (...)")
        return InsertStatement(table_name, rows)

    def _parse_value_list(self) -> Optional[List[Value]]:
        """解析一组括号内的值，当前位置在左括号之后"""
        values = []
        pending: List[Token] = []
        while True:
            token = self.current_token
            if token.type == TokenType.EOF:
                return None
            if token.type in (TokenType.COMMA, TokenType.RIGHT_PAREN):
                values.append(self._resolve_value(pending, token))
                pending = []
                self._advance()
                if token.type == TokenType.RIGHT_PAREN:
                    return values
                continue
            pending.append(token)
            self._advance()

    def _resolve_value(self, tokens: List[Token], at: Token) -> Value:
        """引号字面量为字符串，其余尝试解析为数字"""
        if not tokens:
            raise EngineError(
                ErrorKind.MALFORMED_LITERAL,
                f"空的值，位于行 {at.line}, 列 {at.column}",
                line=at.line,
                column_no=at.column,
                detail="empty value in VALUES list",
            )
        if len(tokens) == 1 and tokens[0].type == TokenType.STRING:
            return tokens[0].value
        if len(tokens) == 1 and tokens[0].type == TokenType.NUMBER:
            return coerce_literal(tokens[0].value)
        # 多个token组成的值按原文拼接（如 2024-01-15），不相邻处补一个空格
        text = tokens[0].value
        for prev, token in zip(tokens, tokens[1:]):
            adjacent = token.line == prev.line and token.column == prev.column + len(prev.value)
            text += token.value if adjacent else " " + token.value
        return coerce_literal(text)

    def _parse_select(self) -> Statement:
        self._advance()
        projection = []
        while self.current_token.type not in (TokenType.FROM, TokenType.SEMICOLON, TokenType.EOF):
            if self.current_token.type == TokenType.COMMA:
                self._advance()
                continue
            projection.append(self._parse_projection_item())

        if not self._match(TokenType.FROM):
            return SelectStatement(projection or ["*"], None)
        table_name = self._table_name()
        if not table_name:
            return SelectStatement(projection or ["*"], None)

        predicate = None
        if self._match(TokenType.WHERE):
            condition = []
            while self.current_token.type not in _CLAUSE_END:
                condition.append(self.current_token)
                self._advance()
            predicate = choose_predicate(condition)

        group_by = None
        while self.current_token.type not in (TokenType.SEMICOLON, TokenType.EOF):
            if self.current_token.type == TokenType.GROUP:
                self._advance()
                if self._match(TokenType.BY) and self.current_token.type == TokenType.IDENTIFIER:
                    group_by = self.current_token.value.lower()
            # ORDER BY / LIMIT 不参与求值
            self._advance()

        return SelectStatement(projection or ["*"], table_name, predicate, group_by)

    def _parse_projection_item(self) -> str:
        token = self.current_token
        self._advance()
        if token.type == TokenType.STAR:
            return "*"
        if token.type == TokenType.COUNT and self.current_token.type == TokenType.LEFT_PAREN:
            parts = []
            self._advance()
            while self.current_token.type not in (TokenType.RIGHT_PAREN, TokenType.EOF):
                parts.append(self.current_token.value)
                self._advance()
            self._match(TokenType.RIGHT_PAREN)
            return f"COUNT({''.join(parts)})"
        if token.type == TokenType.IDENTIFIER and self.current_token.type == TokenType.DOT:
            self._advance()
            column = self._match(TokenType.IDENTIFIER)
            return column.value.lower() if column else token.value.lower()
        return token.value.lower() if token.type == TokenType.IDENTIFIER else token.value


def _is_name(token: Token) -> bool:
    return token.type not in (TokenType.NUMBER, TokenType.STRING) and (
        token.value.replace("_", "").isalnum()
    )


def choose_predicate(condition: List[Token]) -> Predicate:
    """按优先级选取唯一的过滤条件：LIKE > 字符串等值 > 数字等值 > 大于

    每种模式都在整个条件中查找，AND/OR连接的其余部分被忽略。
    """
    windows = [condition[i : i + 3] for i in range(len(condition) - 2)]

    def find(operator: TokenType, operand: TokenType):
        for name, op, value in windows:
            if _is_name(name) and op.type == operator and value.type == operand:
                return name.value.lower(), value.value
        return None

    found = find(TokenType.LIKE, TokenType.STRING)
    if found:
        return LikePredicate(*found)
    found = find(TokenType.EQUALS, TokenType.STRING)
    if found:
        return StringEqualsPredicate(*found)
    found = find(TokenType.EQUALS, TokenType.NUMBER)
    if found:
        return NumberEqualsPredicate(found[0], coerce_literal(found[1]))
    found = find(TokenType.GREATER_THAN, TokenType.NUMBER)
    if found:
        return GreaterThanPredicate(found[0], coerce_literal(found[1]))
    return UnsupportedPredicate(" ".join(t.value for t in condition))


def parse_sql(sql: str) -> Statement:
    """词法分析 + 语法分析"""
    tokens = SQLLexer(sql).tokenize()
    return SQLParser(tokens, sql).parse()
