"""
评测层模块
"""

from .visual_schema import (
    ColumnSpec,
    TableNode,
    TableDraft,
    VisualSchema,
    SchemaInputError,
    validate_table,
)
from .problems import (
    Problem,
    SchemaTest,
    QueryTest,
    ExpectedTable,
    ProblemFormatError,
    builtin_problems,
    get_problem,
    load_problem,
    problem_from_dict,
)
from .scoring import exact_match, fuzzy_score, award_points, overall_feedback
from .harness import GradingHarness, ComparisonPolicy, TestResult, RunReport

__all__ = [
    "ColumnSpec",
    "TableNode",
    "TableDraft",
    "VisualSchema",
    "SchemaInputError",
    "validate_table",
    "Problem",
    "SchemaTest",
    "QueryTest",
    "ExpectedTable",
    "ProblemFormatError",
    "builtin_problems",
    "get_problem",
    "load_problem",
    "problem_from_dict",
    "exact_match",
    "fuzzy_score",
    "award_points",
    "overall_feedback",
    "GradingHarness",
    "ComparisonPolicy",
    "TestResult",
    "RunReport",
]
