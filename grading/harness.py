"""
评测框架 - 驱动执行引擎运行题目中的测试用例并计算得分
"""

import math
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from sql import EngineError, ErrorKind, display_message
from .problems import Problem, QueryTest, SchemaTest, Seed, TestCase
from .scoring import (
    DEFAULT_PASS_THRESHOLD,
    award_points,
    exact_match,
    fuzzy_score,
    overall_feedback,
)
from .visual_schema import VisualSchema

DEFAULT_SEED_TABLE = "users"
EMPTY_SCHEMA_MESSAGE = "⚠️ Please design your database schema first by adding tables"


class ComparisonPolicy(Enum):
    """EXACT: 多题模式，全对才得分；FUZZY: 分步模式，按单元格给部分分"""

    EXACT = "exact"
    FUZZY = "fuzzy"


class TestResult:
    """单个测试用例的结果"""

    __test__ = False

    def __init__(
        self,
        name: str,
        passed: bool,
        message: str,
        points: int,
        max_points: int,
        query: Optional[str] = None,
        percentage: Optional[int] = None,
        test_type: str = "",
    ):
        self.name = name
        self.passed = passed
        self.message = message
        self.points = points
        self.max_points = max_points
        self.query = query
        self.percentage = percentage
        self.test_type = test_type

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "type": self.test_type,
            "passed": self.passed,
            "message": self.message,
            "points": self.points,
            "maxPoints": self.max_points,
        }
        if self.query is not None:
            data["query"] = self.query
        if self.percentage is not None:
            data["percentage"] = self.percentage
        return data

    def __repr__(self):
        status = "PASS" if self.passed else "FAIL"
        return f"TestResult({self.name}: {status} {self.points}/{self.max_points})"


class RunReport:
    """一次完整评测的结果"""

    def __init__(
        self,
        problem_title: str,
        results: List[TestResult],
        score: int,
        max_score: int,
        percentage: int,
        feedback: str,
        ddl: str = "",
    ):
        self.problem_title = problem_title
        self.results = results
        self.score = score
        self.max_score = max_score
        self.percentage = percentage
        self.feedback = feedback
        self.ddl = ddl

    def to_dict(self) -> Dict[str, Any]:
        return {
            "problem": self.problem_title,
            "results": [r.to_dict() for r in self.results],
            "score": self.score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "feedback": self.feedback,
            "ddl": self.ddl,
        }


def render_literal(value: Any) -> str:
    """种子数据的值转为SQL字面量：字符串加引号，数字原样"""
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        return f"'{escaped}'"
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        if isinstance(value, float) and not math.isfinite(value):
            raise EngineError(
                ErrorKind.SEED_FAILURE,
                f"种子数据包含非有限数值: {value}",
                detail=f"non-finite number {value!r} in seed data",
            )
        text = repr(value)
        if "e" not in text:
            return text
        # 词法分析器不识别科学计数法，展开为定点写法且不丢精度
        text = format(Decimal(text), "f")
        return text if "." in text else text + ".0"
    raise EngineError(
        ErrorKind.SEED_FAILURE,
        f"种子数据包含不支持的值: {value!r}",
        detail=f"unsupported seed value {value!r}",
    )


class GradingHarness:
    """评测框架

    测试用例严格按声明顺序串行执行；任一用例的异常都被转换为失败结果，不会中断后续用例。
    """

    def __init__(
        self,
        database=None,
        policy: ComparisonPolicy = ComparisonPolicy.EXACT,
        pass_threshold: int = DEFAULT_PASS_THRESHOLD,
    ):
        if database is None:
            from interface.database import JudgeDatabase

            database = JudgeDatabase()
        self.database = database
        self.policy = policy
        self.pass_threshold = pass_threshold

    @property
    def log_manager(self):
        return getattr(self.database, "log_manager", None)

    def prepare(self, visual_schema: VisualSchema) -> str:
        """删除所有表后按学习者的表结构重新建表，返回生成的DDL"""
        ddl = visual_schema.generate_ddl()
        self.database.reset()
        self.database.run_script(ddl)
        return ddl

    def grade_schema(self, test_case: SchemaTest, visual_schema: VisualSchema) -> TestResult:
        """表结构测试：所有期望的表和列都存在才得分，没有部分分"""
        actual_tables = visual_schema.normalized()
        missing_tables = []
        missing_columns = []

        for expected in test_case.expected_tables:
            table_name = expected.name.lower()
            found = actual_tables.get(table_name)
            if found is None:
                missing_tables.append(table_name)
                continue
            for column in expected.columns:
                if column.lower() not in found:
                    missing_columns.append(f"{table_name}.{column.lower()}")

        passed = not missing_tables and not missing_columns
        if passed:
            message = "✅ Schema structure is correct!"
        else:
            parts = []
            if missing_tables:
                parts.append(f"Missing tables: {', '.join(missing_tables)}.")
            if missing_columns:
                parts.append(f"Missing columns: {', '.join(missing_columns)}")
            message = " ".join(parts)

        return TestResult(
            test_case.name,
            passed,
            message,
            test_case.points if passed else 0,
            test_case.points,
            test_type=test_case.type,
        )

    def seed(self, seed_data: Seed, default_table: Optional[str] = None):
        """清空目标表并重新插入种子数据"""
        if isinstance(seed_data, dict):
            targets = list(seed_data.items())
        else:
            targets = [(default_table or DEFAULT_SEED_TABLE, seed_data)]

        for table_name, rows in targets:
            self.database.run(f"DELETE FROM {table_name}")
            for row in rows:
                values = ", ".join(render_literal(v) for v in row)
                self.database.run(f"INSERT INTO {table_name} VALUES ({values})")

    def grade_query(
        self,
        test_case: QueryTest,
        query: Optional[str] = None,
        default_table: Optional[str] = None,
    ) -> TestResult:
        """查询测试：先写入种子数据，再执行查询并与期望输出比较

        query为学习者自己写的查询（分步模式），为None时使用题目给定的查询。
        """
        query_text = query if query is not None else test_case.query

        if test_case.seed_data is not None:
            try:
                self.seed(test_case.seed_data, default_table)
            except Exception as e:
                error = e if isinstance(e, EngineError) else EngineError(
                    ErrorKind.SEED_FAILURE, str(e), detail=str(e)
                )
                return self._error_result(
                    test_case, f"❌ Failed to seed data: {display_message(error)}", query_text
                )

        try:
            results = self.database.exec(query_text)
        except Exception as e:
            return self._error_result(test_case, f"❌ Query error: {display_message(e)}", query_text)

        actual = results[0].values if results else []
        expected = test_case.expected_output

        if self.policy == ComparisonPolicy.FUZZY:
            outcome = fuzzy_score(actual, expected)
            points = award_points(outcome.percentage, test_case.points, self.pass_threshold)
            passed = outcome.percentage == 100
            prefix = "✅" if passed else ("⚠️" if points > 0 else "❌")
            return TestResult(
                test_case.name,
                passed,
                f"{prefix} {outcome.message}",
                points,
                test_case.points,
                query=query_text,
                percentage=outcome.percentage,
                test_type=test_case.type,
            )

        passed = exact_match(actual, expected)
        message = (
            "✅ Query executed correctly!"
            if passed
            else f"❌ Expected {len(expected)} rows but got {len(actual)}"
        )
        return TestResult(
            test_case.name,
            passed,
            message,
            test_case.points if passed else 0,
            test_case.points,
            query=query_text,
            test_type=test_case.type,
        )

    def grade_test_case(
        self,
        test_case: TestCase,
        visual_schema: VisualSchema,
        query: Optional[str] = None,
    ) -> TestResult:
        """评测单个用例，任何异常都转换为0分的失败结果"""
        try:
            if isinstance(test_case, SchemaTest):
                result = self.grade_schema(test_case, visual_schema)
            elif isinstance(test_case, QueryTest):
                result = self.grade_query(test_case, query, visual_schema.first_table_name())
            else:
                raise TypeError(f"未知的测试类型: {type(test_case).__name__}")
        except Exception as e:
            if self.log_manager:
                self.log_manager.log_error("GRADER", f"测试 {test_case.name} 执行异常", str(e))
            result = self._error_result(test_case, f"Error: {display_message(e)}", getattr(test_case, "query", None))

        if self.log_manager:
            self.log_manager.log_test_result(result.name, result.passed, result.points, result.max_points, result.message)
        return result

    def run_all(
        self,
        problem: Problem,
        visual_schema: VisualSchema,
        queries: Optional[Dict[str, str]] = None,
    ) -> RunReport:
        """运行题目的全部用例

        queries: 测试名 -> 学习者查询，用于替换题目给定的查询。
        """
        max_score = problem.max_score
        if visual_schema.is_empty():
            return RunReport(problem.title, [], 0, max_score, 0, EMPTY_SCHEMA_MESSAGE)

        queries = queries or {}
        try:
            ddl = self.prepare(visual_schema)
        except Exception as e:
            if self.log_manager:
                self.log_manager.log_error("GRADER", f"题目 {problem.title} 建表失败", str(e))
            feedback = f"❌ Error running tests: {display_message(e)}"
            return RunReport(problem.title, [], 0, max_score, 0, feedback, visual_schema.generate_ddl())

        results = []
        score = 0
        for test_case in problem.test_cases:
            result = self.grade_test_case(test_case, visual_schema, queries.get(test_case.name))
            results.append(result)
            score += result.points

        percentage, feedback = overall_feedback(score, max_score, self.pass_threshold)
        if self.log_manager:
            self.log_manager.log_run_summary(problem.title, score, max_score, percentage)
        return RunReport(problem.title, results, score, max_score, percentage, feedback, ddl)

    def _error_result(self, test_case: TestCase, message: str, query: Optional[str]) -> TestResult:
        return TestResult(
            test_case.name,
            False,
            message,
            0,
            test_case.points,
            query=query,
            test_type=test_case.type,
        )
