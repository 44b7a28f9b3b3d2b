"""
SQL执行器 - 解释DDL/DML语句并修改表存储
"""

import time
from typing import List, Optional

from table import TableStore
from .ast_nodes import (
    CreateTableStatement,
    DeleteStatement,
    DropTableStatement,
    InsertStatement,
    ParseFailure,
    SelectStatement,
    Statement,
)
from .errors import EngineError, ErrorKind
from .leniency import Leniency
from .parser import parse_sql


def split_script(script: str) -> List[str]:
    """按分号拆分多语句脚本，丢弃空片段和纯注释片段"""
    statements = []
    for fragment in script.split(";"):
        lines = [line for line in fragment.splitlines() if not line.strip().startswith("--")]
        text = "\n".join(lines).strip()
        if text:
            statements.append(text)
    return statements


class StatementExecutor:
    """语句执行器，只处理会修改表存储的语句"""

    def __init__(self, store: TableStore, leniency: Leniency = Leniency.LENIENT, log_manager=None):
        self.store = store
        self.leniency = leniency
        self.log_manager = log_manager

    @property
    def strict(self) -> bool:
        return self.leniency == Leniency.STRICT

    def run(self, sql: str) -> None:
        """执行一条DDL/DML语句，无返回值"""
        start = time.perf_counter()
        success = False
        try:
            self.execute(parse_sql(sql))
            success = True
        finally:
            if self.log_manager:
                elapsed = (time.perf_counter() - start) * 1000
                self.log_manager.log_sql_execution(sql, success, elapsed)

    def execute(self, statement: Statement) -> Optional[int]:
        """执行已解析的语句，返回受影响的行数（不适用时为None）"""
        if isinstance(statement, CreateTableStatement):
            return self._execute_create_table(statement)
        elif isinstance(statement, DropTableStatement):
            return self._execute_drop_table(statement)
        elif isinstance(statement, DeleteStatement):
            return self._execute_delete(statement)
        elif isinstance(statement, InsertStatement):
            return self._execute_insert(statement)
        elif isinstance(statement, SelectStatement):
            # 只读语句走查询求值器
            return None
        elif isinstance(statement, ParseFailure):
            if self.strict:
                raise EngineError(
                    ErrorKind.UNSUPPORTED_STATEMENT,
                    f"无法识别的语句: {statement.reason}",
                    statement=statement.statement,
                    reason=statement.reason,
                )
            return None
        raise TypeError(f"未知的语句节点: {statement!r}")

    def _execute_create_table(self, stmt: CreateTableStatement) -> None:
        if stmt.if_not_exists and self.store.has_table(stmt.table_name):
            return None
        self.store.create(stmt.table_name)
        self._log_table("创建", stmt.table_name, f"{len(stmt.columns)} 列")
        return None

    def _execute_drop_table(self, stmt: DropTableStatement) -> None:
        # 表不存在不算错误
        if self.store.drop(stmt.table_name):
            self._log_table("删除", stmt.table_name)
        return None

    def _execute_delete(self, stmt: DeleteStatement) -> int:
        count = self.store.row_count(stmt.table_name)
        if not self.store.clear(stmt.table_name):
            self._unknown_table(stmt.table_name, "DELETE")
            return 0
        self._log_table("清空", stmt.table_name, f"{count} 行")
        return count

    def _execute_insert(self, stmt: InsertStatement) -> int:
        if not self.store.has_table(stmt.table_name):
            self._unknown_table(stmt.table_name, "INSERT")
            return 0
        for row in stmt.rows:
            self.store.append(stmt.table_name, row)
        return len(stmt.rows)

    def _unknown_table(self, table_name: str, operation: str):
        if self.strict:
            raise EngineError(
                ErrorKind.UNKNOWN_TABLE,
                f"表 {table_name} 不存在",
                table=table_name,
                operation=operation,
            )
        if self.log_manager:
            self.log_manager.log_table_operation("跳过", table_name, f"{operation} 目标表不存在")

    def _log_table(self, operation: str, table_name: str, details: str = ""):
        if self.log_manager:
            self.log_manager.log_table_operation(operation, table_name, details)
