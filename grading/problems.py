"""
题目定义 - 表结构测试与查询测试
"""

import json
from typing import Any, Dict, List, Optional, Union

Seed = Union[List[List[Any]], Dict[str, List[List[Any]]]]


class ProblemFormatError(ValueError):
    """题目文件格式错误"""

    pass


class TestCase:
    """评分用例基类"""

    __test__ = False  # 避免被pytest当作测试类收集
    type = ""

    def __init__(self, name: str, points: int, description: str = ""):
        if points < 0:
            raise ProblemFormatError(f"测试 {name} 的分值不能为负数")
        self.name = name
        self.points = points
        self.description = description


class ExpectedTable:
    def __init__(self, name: str, columns: List[str]):
        self.name = name
        self.columns = columns


class SchemaTest(TestCase):
    """表结构测试：要求的表和列必须全部存在"""

    type = "schema"

    def __init__(self, name: str, expected_tables: List[ExpectedTable], points: int, description: str = ""):
        super().__init__(name, points, description)
        self.expected_tables = expected_tables

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "expectedTables": [{"name": t.name, "columns": list(t.columns)} for t in self.expected_tables],
            "points": self.points,
        }


class QueryTest(TestCase):
    """查询测试：可选的种子数据 + 查询 + 期望输出"""

    type = "query"

    def __init__(
        self,
        name: str,
        query: str,
        expected_output: List[List[Any]],
        points: int,
        seed_data: Optional[Seed] = None,
        description: str = "",
    ):
        super().__init__(name, points, description or query)
        self.query = query
        self.expected_output = expected_output
        self.seed_data = seed_data

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.type,
            "description": self.description,
            "query": self.query,
            "expectedOutput": self.expected_output,
            "points": self.points,
        }
        if self.seed_data is not None:
            data["seedData"] = self.seed_data
        return data


class Problem:
    """一道题目"""

    def __init__(
        self,
        id: int,
        title: str,
        test_cases: List[TestCase],
        difficulty: str = "Easy",
        description: str = "",
        requirements: Optional[List[str]] = None,
        hints: Optional[List[str]] = None,
    ):
        self.id = id
        self.title = title
        self.test_cases = test_cases
        self.difficulty = difficulty
        self.description = description
        self.requirements = requirements or []
        self.hints = hints or []

    @property
    def max_score(self) -> int:
        return sum(tc.points for tc in self.test_cases)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "difficulty": self.difficulty,
            "description": self.description,
            "requirements": list(self.requirements),
            "hints": list(self.hints),
            "maxScore": self.max_score,
            "testCases": [tc.to_dict() for tc in self.test_cases],
        }


def test_case_from_dict(data: Dict[str, Any]) -> TestCase:
    if not isinstance(data, dict):
        raise ProblemFormatError(f"测试用例必须是对象: {data!r}")
    try:
        case_type = data["type"]
        name = data["name"]
        points = int(data["points"])
    except (KeyError, TypeError, ValueError) as e:
        raise ProblemFormatError(f"测试用例缺少字段或字段无效: {e}") from e

    if case_type == "schema":
        try:
            tables = [ExpectedTable(t["name"], list(t.get("columns", []))) for t in data.get("expectedTables", [])]
        except (KeyError, TypeError, AttributeError) as e:
            raise ProblemFormatError(f"表结构测试 {name} 的 expectedTables 无效: {e}") from e
        return SchemaTest(name, tables, points, data.get("description", ""))
    if case_type == "query":
        if "query" not in data or "expectedOutput" not in data:
            raise ProblemFormatError(f"查询测试 {name} 缺少 query 或 expectedOutput")
        return QueryTest(
            name,
            data["query"],
            data["expectedOutput"],
            points,
            seed_data=data.get("seedData"),
            description=data.get("description", ""),
        )
    raise ProblemFormatError(f"未知的测试类型: {case_type}")


def problem_from_dict(data: Dict[str, Any]) -> Problem:
    if not isinstance(data, dict):
        raise ProblemFormatError(f"题目必须是对象: {type(data).__name__}")
    cases = data.get("testCases", [])
    if not isinstance(cases, list):
        raise ProblemFormatError("testCases 必须是列表")
    if "title" not in data:
        raise ProblemFormatError("题目缺少 title")
    return Problem(
        id=data.get("id", 0),
        title=data["title"],
        test_cases=[test_case_from_dict(tc) for tc in cases],
        difficulty=data.get("difficulty", "Easy"),
        description=data.get("description", ""),
        requirements=data.get("requirements"),
        hints=data.get("hints"),
    )


def load_problem(path: str) -> Problem:
    """从JSON文件加载题目"""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ProblemFormatError(f"题目文件 {path} 不是合法的JSON: {e}") from e
    return problem_from_dict(data)


_USERS_SEED = [
    [1, "Alice Johnson", "alice@gmail.com", "alice123"],
    [2, "Bob Smith", "bob@yahoo.com", "bob456"],
    [3, "Charlie Brown", "charlie@gmail.com", "charlie789"],
    [4, "Diana Prince", "diana@outlook.com", "diana321"],
    [5, "Eve Wilson", "eve@gmail.com", "eve654"],
]

_CUSTOMERS_SEED = [
    [1, "John Doe", "john@example.com"],
    [2, "Jane Smith", "jane@example.com"],
    [3, "Bob Wilson", "bob@example.com"],
]

_ORDERS_SEED = [
    [1, 1, "2024-01-15", 99.99],
    [2, 1, "2024-02-20", 149.50],
    [3, 2, "2024-01-10", 299.99],
    [4, 3, "2024-03-05", 49.99],
]


def builtin_problems() -> List[Problem]:
    """内置题目（每次调用返回新对象）"""
    return [
        Problem(
            id=1,
            title="User Authentication System",
            difficulty="Easy",
            description="Design a user authentication database with proper schema and query capabilities",
            requirements=[
                "Create a 'users' table with id, name, email, and password columns",
                "The id column should be the primary key",
                "Store user's full name for display purposes",
                "Email should be used for login authentication",
                "Password field for secure authentication",
            ],
            hints=[
                "Start by adding the users table",
                "Use INT for id, VARCHAR(255) for text fields",
                "Mark id as Primary Key (PK)",
                "Make sure all required columns are present",
            ],
            test_cases=[
                SchemaTest(
                    "Schema Validation",
                    [ExpectedTable("users", ["id", "name", "email", "password"])],
                    30,
                    "Verify users table has all required columns",
                ),
                QueryTest(
                    "Get All Users",
                    "SELECT * FROM users",
                    [list(row) for row in _USERS_SEED],
                    15,
                    seed_data=[list(row) for row in _USERS_SEED],
                ),
                QueryTest(
                    "Find Gmail Users",
                    "SELECT * FROM users WHERE email LIKE '%gmail.com%'",
                    [list(_USERS_SEED[0]), list(_USERS_SEED[2]), list(_USERS_SEED[4])],
                    20,
                ),
                QueryTest(
                    "Get Specific User",
                    "SELECT * FROM users WHERE email = 'bob@yahoo.com'",
                    [list(_USERS_SEED[1])],
                    15,
                ),
                QueryTest("Count Total Users", "SELECT COUNT(*) FROM users", [[5]], 20),
            ],
        ),
        Problem(
            id=2,
            title="E-Commerce Order System",
            difficulty="Medium",
            description="Design a two-table database system for tracking customer orders",
            requirements=[
                "Create a 'customers' table with id, name, and email",
                "Create an 'orders' table with id, customer_id, order_date, and total",
                "Link orders to customers using customer_id as foreign key",
                "Support tracking order dates and monetary totals",
            ],
            hints=[
                "You need two separate tables",
                "The orders.customer_id should reference customers.id",
                "Mark customer_id in orders as a Foreign Key (FK)",
                "Use DECIMAL type for monetary values",
            ],
            test_cases=[
                SchemaTest(
                    "Schema Validation",
                    [
                        ExpectedTable("customers", ["id", "name", "email"]),
                        ExpectedTable("orders", ["id", "customer_id", "order_date", "total"]),
                    ],
                    40,
                    "Verify both customers and orders tables exist with correct structure",
                ),
                QueryTest(
                    "Get All Customers",
                    "SELECT * FROM customers",
                    [list(row) for row in _CUSTOMERS_SEED],
                    20,
                    seed_data={
                        "customers": [list(row) for row in _CUSTOMERS_SEED],
                        "orders": [list(row) for row in _ORDERS_SEED],
                    },
                ),
                QueryTest(
                    "Find High Value Orders",
                    "SELECT * FROM orders WHERE total > 100",
                    [list(_ORDERS_SEED[1]), list(_ORDERS_SEED[2])],
                    20,
                ),
                QueryTest("Count Total Orders", "SELECT COUNT(*) FROM orders", [[4]], 20),
                QueryTest(
                    "Orders Per Customer",
                    "SELECT customer_id, COUNT(*) FROM orders GROUP BY customer_id",
                    [[1, 2], [2, 1], [3, 1]],
                    20,
                ),
            ],
        ),
    ]


def get_problem(problem_id: int) -> Optional[Problem]:
    for problem in builtin_problems():
        if problem.id == problem_id:
            return problem
    return None
