"""
抽象语法树节点定义
"""

from abc import ABC
from typing import List, Optional, Union

Value = Union[int, float, str]


class ASTNode(ABC):
    """抽象语法树节点基类"""

    pass


class Statement(ASTNode):
    """语句基类"""

    pass


class Predicate(ASTNode):
    """WHERE子句中唯一的过滤条件"""

    def __init__(self, column_name: str):
        self.column_name = column_name


# 过滤条件节点
class LikePredicate(Predicate):
    """col LIKE 'pattern'"""

    def __init__(self, column_name: str, pattern: str):
        super().__init__(column_name)
        self.pattern = pattern

    def __repr__(self):
        return f"{self.column_name} LIKE '{self.pattern}'"


class StringEqualsPredicate(Predicate):
    """col = 'value'"""

    def __init__(self, column_name: str, value: str):
        super().__init__(column_name)
        self.value = value

    def __repr__(self):
        return f"{self.column_name} = '{self.value}'"


class NumberEqualsPredicate(Predicate):
    """col = number"""

    def __init__(self, column_name: str, value: Union[int, float]):
        super().__init__(column_name)
        self.value = value

    def __repr__(self):
        return f"{self.column_name} = {self.value}"


class GreaterThanPredicate(Predicate):
    """col > number"""

    def __init__(self, column_name: str, threshold: Union[int, float]):
        super().__init__(column_name)
        self.threshold = threshold

    def __repr__(self):
        return f"{self.column_name} > {self.threshold}"


class UnsupportedPredicate(Predicate):
    """没有匹配任何已知模式的条件"""

    def __init__(self, condition: str):
        super().__init__("")
        self.condition = condition

    def __repr__(self):
        return f"UNSUPPORTED({self.condition})"


# 语句节点
class CreateTableStatement(Statement):
    """CREATE TABLE 语句（列定义只记录列名，不做结构校验）"""

    def __init__(self, table_name: str, columns: List[str], if_not_exists: bool = False):
        self.table_name = table_name
        self.columns = columns
        self.if_not_exists = if_not_exists

    def __repr__(self):
        flag = " IF NOT EXISTS" if self.if_not_exists else ""
        return f"CREATE TABLE{flag} {self.table_name} ({', '.join(self.columns)})"


class DropTableStatement(Statement):
    """DROP TABLE 语句"""

    def __init__(self, table_name: str, if_exists: bool = False):
        self.table_name = table_name
        self.if_exists = if_exists

    def __repr__(self):
        flag = " IF EXISTS" if self.if_exists else ""
        return f"DROP TABLE{flag} {self.table_name}"


class DeleteStatement(Statement):
    """DELETE FROM 语句（整表清空）"""

    def __init__(self, table_name: str):
        self.table_name = table_name

    def __repr__(self):
        return f"DELETE FROM {self.table_name}"


class InsertStatement(Statement):
    """INSERT 语句"""

    def __init__(self, table_name: str, rows: List[List[Value]]):
        self.table_name = table_name
        self.rows = rows  # 值列表的列表（支持多行插入）

    def __repr__(self):
        return f"INSERT INTO {self.table_name} VALUES {self.rows}"


class SelectStatement(Statement):
    """SELECT 语句"""

    def __init__(
        self,
        projection: List[str],
        table_name: Optional[str],
        predicate: Optional[Predicate] = None,
        group_by: Optional[str] = None,
    ):
        self.projection = projection  # '*'、'COUNT(*)'或列名
        self.table_name = table_name  # 缺少FROM时为None
        self.predicate = predicate
        self.group_by = group_by

    @property
    def has_count(self) -> bool:
        return "COUNT(*)" in self.projection

    def __repr__(self):
        parts = [f"SELECT {', '.join(self.projection)}"]
        if self.table_name:
            parts.append(f"FROM {self.table_name}")
        if self.predicate is not None:
            parts.append(f"WHERE {self.predicate!r}")
        if self.group_by:
            parts.append(f"GROUP BY {self.group_by}")
        return " ".join(parts)


class ParseFailure(Statement):
    """无法识别的语句形态（显式的解析失败结果）"""

    def __init__(self, statement: str, reason: str):
        self.statement = statement
        self.reason = reason

    def __repr__(self):
        return f"ParseFailure({self.reason}: {self.statement!r})"
