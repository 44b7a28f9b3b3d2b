"""
查询求值器 - 解释只读的SELECT语句并生成带列名的结果集
"""

import math
import re
import time
from typing import Any, Dict, List, Optional

from catalog import SchemaCatalog
from table import Row, TableStore
from .ast_nodes import (
    GreaterThanPredicate,
    LikePredicate,
    NumberEqualsPredicate,
    Predicate,
    SelectStatement,
    StringEqualsPredicate,
    UnsupportedPredicate,
)
from .errors import EngineError, ErrorKind
from .leniency import Leniency
from .parser import parse_sql

COUNT_LABEL = "COUNT(*)"


class ResultSet:
    """查询结果：列名 + 有序的结果行"""

    def __init__(self, columns: List[str], values: List[Row]):
        self.columns = columns
        self.values = values

    def to_dict(self) -> Dict[str, Any]:
        return {"columns": list(self.columns), "values": [list(row) for row in self.values]}

    def __eq__(self, other):
        if not isinstance(other, ResultSet):
            return NotImplemented
        return self.columns == other.columns and self.values == other.values

    def __repr__(self):
        return f"ResultSet(columns={self.columns}, values={self.values})"


def stringify(value: Any) -> str:
    """单元格转字符串，整数值的浮点数去掉小数部分（1.0 -> '1'）"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def to_number(value: Any) -> Optional[float]:
    """数值化，无法转换时返回None"""
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def like_to_regex(pattern: str) -> "re.Pattern":
    """LIKE模式转正则：%为通配符，其余字符按字面匹配，不区分大小写"""
    parts = [re.escape(part) for part in pattern.split("%")]
    return re.compile(".*".join(parts), re.IGNORECASE)


class QueryEvaluator:
    """查询求值器，只读访问表存储"""

    def __init__(
        self,
        store: TableStore,
        catalog: SchemaCatalog,
        leniency: Leniency = Leniency.LENIENT,
        log_manager=None,
    ):
        self.store = store
        self.catalog = catalog
        self.leniency = leniency
        self.log_manager = log_manager

    @property
    def strict(self) -> bool:
        return self.leniency == Leniency.STRICT

    def exec(self, sql: str) -> List[ResultSet]:
        """执行只读语句，返回包含0或1个结果集的列表"""
        start = time.perf_counter()
        success = False
        results: List[ResultSet] = []
        try:
            statement = parse_sql(sql)
            if isinstance(statement, SelectStatement):
                result = self.evaluate(statement)
                results = [result] if result is not None else []
            success = True
            return results
        finally:
            if self.log_manager:
                elapsed = (time.perf_counter() - start) * 1000
                count = len(results[0].values) if results else 0
                self.log_manager.log_sql_execution(sql, success, elapsed, count, "QUERY_EVALUATOR")

    def evaluate(self, stmt: SelectStatement) -> Optional[ResultSet]:
        """求值SELECT，缺少FROM时返回None"""
        if not stmt.table_name:
            return None

        table_name = stmt.table_name
        if not self.store.has_table(table_name) and self.strict:
            raise EngineError(ErrorKind.UNKNOWN_TABLE, f"表 {table_name} 不存在", table=table_name)
        rows = self.store.rows(table_name)

        if stmt.predicate is not None:
            rows = self.filter_rows(rows, stmt.predicate)

        if stmt.has_count and not stmt.group_by:
            return ResultSet([COUNT_LABEL], [[len(rows)]])

        if stmt.has_count and stmt.group_by:
            return self._group_count(table_name, stmt.group_by, rows)

        return ResultSet(self.catalog.columns_for(table_name), rows)

    def filter_rows(self, rows: List[Row], predicate: Predicate) -> List[Row]:
        """应用唯一的过滤条件"""
        if isinstance(predicate, LikePredicate):
            regex = like_to_regex(predicate.pattern)
            # 任意单元格匹配即保留该行
            return [row for row in rows if any(regex.search(stringify(cell)) for cell in row)]

        if isinstance(predicate, StringEqualsPredicate):
            return [row for row in rows if any(stringify(cell) == predicate.value for cell in row)]

        if isinstance(predicate, NumberEqualsPredicate):
            # 只比较第一列
            return [
                row for row in rows
                if row and _is_number(row[0]) and row[0] == predicate.value
            ]

        if isinstance(predicate, GreaterThanPredicate):
            # 只比较最后一列
            result = []
            for row in rows:
                number = to_number(row[-1]) if row else None
                if number is not None and number > predicate.threshold:
                    result.append(row)
            return result

        if isinstance(predicate, UnsupportedPredicate) and self.strict:
            raise EngineError(
                ErrorKind.UNSUPPORTED_PREDICATE,
                f"无法识别的WHERE条件: {predicate.condition}",
                condition=predicate.condition,
            )
        return rows

    def _group_count(self, table_name: str, group_col: str, rows: List[Row]) -> ResultSet:
        """按列分组计数，分组顺序为首次出现顺序"""
        index = self.catalog.column_index(table_name, group_col)
        if index < 0 and self.strict:
            raise EngineError(
                ErrorKind.UNKNOWN_COLUMN,
                f"表 {table_name} 没有列 {group_col}",
                table=table_name,
                column=group_col,
            )

        groups: Dict[Any, List[Any]] = {}
        for row in rows:
            value = row[index] if 0 <= index < len(row) else None
            if value not in groups:
                groups[value] = [value, 0]
            groups[value][1] += 1
        return ResultSet([group_col, COUNT_LABEL], [list(entry) for entry in groups.values()])


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
