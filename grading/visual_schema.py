"""
可视化表结构 - 学习者在画布上设计的表节点，以及由它生成的DDL
"""

from typing import Any, Dict, Iterable, List, Optional

DEFAULT_COLUMN_TYPE = "VARCHAR(255)"
# 会破坏生成的DDL
_FORBIDDEN_NAME_CHARS = ("'", '"', ";")


class SchemaInputError(ValueError):
    """表结构编辑输入不合法（在生成DDL之前拦截）"""

    pass


class ColumnSpec:
    """列定义"""

    def __init__(
        self,
        name: str,
        type: str = DEFAULT_COLUMN_TYPE,
        is_primary_key: bool = False,
        is_foreign_key: bool = False,
    ):
        self.name = name
        self.type = type
        self.is_primary_key = is_primary_key
        self.is_foreign_key = is_foreign_key

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "isPrimaryKey": self.is_primary_key,
            "isForeignKey": self.is_foreign_key,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnSpec":
        if not isinstance(data, dict):
            raise SchemaInputError(f"Column definition must be an object, got {data!r}")
        return cls(
            name=data.get("name", ""),
            type=data.get("type") or DEFAULT_COLUMN_TYPE,
            is_primary_key=bool(data.get("isPrimaryKey", data.get("isPrimary", False))),
            is_foreign_key=bool(data.get("isForeignKey", data.get("isForeign", False))),
        )

    def __repr__(self):
        flags = " PK" if self.is_primary_key else ""
        flags += " FK" if self.is_foreign_key else ""
        return f"{self.name} {self.type}{flags}"


class TableNode:
    """画布上的一张表"""

    def __init__(self, name: str, columns: List[ColumnSpec]):
        self.name = name
        self.columns = columns

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": [c.to_dict() for c in self.columns]}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TableNode":
        if not isinstance(data, dict):
            raise SchemaInputError(f"Table definition must be an object, got {data!r}")
        name = data.get("name", data.get("label", ""))
        return cls(name, [ColumnSpec.from_dict(c) for c in data.get("columns", [])])

    def __repr__(self):
        return f"TableNode({self.name}, {self.columns})"


def validate_table(name: str, columns: Iterable[ColumnSpec]) -> List[ColumnSpec]:
    """校验新表输入，返回去掉空列名之后的列"""
    if not name or not name.strip():
        raise SchemaInputError("Please provide a table name")

    valid_columns = [c for c in columns if c.name and c.name.strip()]
    if not valid_columns:
        raise SchemaInputError("Please provide at least one column with a name")

    if not any(c.is_primary_key for c in valid_columns):
        raise SchemaInputError("Please designate at least one column as PRIMARY KEY")

    for label in [name] + [c.name for c in valid_columns]:
        if any(ch in label for ch in _FORBIDDEN_NAME_CHARS):
            raise SchemaInputError(f"Name '{label}' cannot contain quotes or semicolons")
    return valid_columns


class TableDraft:
    """新建表的编辑表单"""

    def __init__(self, name: str = ""):
        self.name = name
        self.columns: List[ColumnSpec] = [ColumnSpec("")]

    def add_column(self, name: str = "", type: str = DEFAULT_COLUMN_TYPE,
                   is_primary_key: bool = False, is_foreign_key: bool = False) -> ColumnSpec:
        column = ColumnSpec(name, type, False, is_foreign_key)
        self.columns.append(column)
        if is_primary_key:
            self.update_column(len(self.columns) - 1, "is_primary_key", True)
        return column

    def update_column(self, index: int, field: str, value: Any):
        """修改列属性；设为主键时其余列的主键标记被清除"""
        if field not in ("name", "type", "is_primary_key", "is_foreign_key"):
            raise SchemaInputError(f"Unknown column field: {field}")
        if field == "is_primary_key" and value:
            for i, column in enumerate(self.columns):
                if i != index:
                    column.is_primary_key = False
        setattr(self.columns[index], field, value)

    def remove_column(self, index: int):
        if len(self.columns) == 1:
            raise SchemaInputError("Table must have at least one column")
        del self.columns[index]

    def build(self) -> TableNode:
        columns = validate_table(self.name, self.columns)
        return TableNode(self.name.strip(), columns)


class VisualSchema:
    """学习者设计的整个表结构"""

    def __init__(self, tables: Optional[List[TableNode]] = None):
        self.tables: List[TableNode] = list(tables or [])

    def add_table(self, table) -> TableNode:
        """添加表，可以是TableNode或TableDraft；都会先经过校验"""
        if isinstance(table, TableDraft):
            node = table.build()
        else:
            node = TableNode(table.name.strip() if table.name else "", validate_table(table.name, table.columns))
        self.tables.append(node)
        return node

    def remove_table(self, name: str) -> bool:
        before = len(self.tables)
        self.tables = [t for t in self.tables if t.name.lower() != name.lower()]
        return len(self.tables) != before

    def find_table(self, name: str) -> Optional[TableNode]:
        for table in self.tables:
            if table.name.lower() == name.lower():
                return table
        return None

    def is_empty(self) -> bool:
        return not self.tables

    def first_table_name(self) -> Optional[str]:
        return self.tables[0].name if self.tables else None

    def normalized(self) -> Dict[str, List[str]]:
        """表名与列名统一转为小写"""
        result: Dict[str, List[str]] = {}
        for table in self.tables:
            result.setdefault(table.name.lower(), [c.name.lower() for c in table.columns])
        return result

    def generate_ddl(self) -> str:
        """生成 CREATE TABLE 脚本，每张表一条语句"""
        if not self.tables:
            return ""

        sql = "-- Database Schema\n\n"
        for table in self.tables:
            column_defs = []
            for col in table.columns:
                col_def = f"  {col.name} {col.type}"
                if col.is_primary_key:
                    col_def += " PRIMARY KEY"
                column_defs.append(col_def)
            sql += f"CREATE TABLE {table.name} (\n" + ",\n".join(column_defs) + "\n);\n\n"
        return sql

    def to_list(self) -> List[Dict[str, Any]]:
        return [t.to_dict() for t in self.tables]

    @classmethod
    def from_list(cls, data: List[Dict[str, Any]]) -> "VisualSchema":
        return cls([TableNode.from_dict(t) for t in data])
