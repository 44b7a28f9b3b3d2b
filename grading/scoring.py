"""
评分规则 - 精确比较与按单元格的模糊部分得分
"""

import math
from typing import Any, List, Optional, Sequence, Tuple

from sql.evaluator import stringify

DEFAULT_PASS_THRESHOLD = 70
ROW_MISMATCH_PENALTY = 20


def round_half_up(value: float) -> int:
    """四舍五入（0.5进位），与内置round的银行家舍入不同"""
    return int(math.floor(value + 0.5))


def normalize_cell(value: Any) -> str:
    return stringify(value).strip().lower()


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def cells_equal(actual: Any, expected: Any) -> bool:
    """严格相等：数字按数值比较，其余按类型和值比较"""
    if _is_number(actual) and _is_number(expected):
        return actual == expected
    return type(actual) is type(expected) and actual == expected


def exact_match(actual: Sequence[Sequence[Any]], expected: Sequence[Sequence[Any]]) -> bool:
    """逐行逐值比较，顺序敏感"""
    if len(actual) != len(expected):
        return False
    for actual_row, expected_row in zip(actual, expected):
        if len(actual_row) != len(expected_row):
            return False
        if not all(cells_equal(a, e) for a, e in zip(actual_row, expected_row)):
            return False
    return True


class FuzzyOutcome:
    """模糊比较的结果"""

    def __init__(
        self,
        percentage: int,
        message: str,
        matching_cells: int = 0,
        total_cells: int = 0,
        row_count_mismatch: bool = False,
    ):
        self.percentage = percentage
        self.message = message
        self.matching_cells = matching_cells
        self.total_cells = total_cells
        self.row_count_mismatch = row_count_mismatch

    def __repr__(self):
        return f"FuzzyOutcome({self.percentage}%, {self.message!r})"


def _find_by_key(actual: Sequence[Sequence[Any]], key: str) -> Optional[Sequence[Any]]:
    """以首列为行标识查找实际结果中的行，多行同键时取第一行"""
    for row in actual:
        if row and normalize_cell(row[0]) == key:
            return row
    return None


def fuzzy_score(actual: Sequence[Sequence[Any]], expected: Sequence[Sequence[Any]]) -> FuzzyOutcome:
    """按单元格计算匹配百分比

    行数不同：100 - 20 * 行数差（不低于0）；
    行数相同：对每个期望行按首列找到实际行，逐列做去空白、不区分大小写的字符串比较。
    """
    if len(actual) != len(expected):
        diff = abs(len(actual) - len(expected))
        percentage = max(0, 100 - ROW_MISMATCH_PENALTY * diff)
        return FuzzyOutcome(
            percentage,
            f"Expected {len(expected)} rows but got {len(actual)}",
            row_count_mismatch=True,
        )

    total_cells = 0
    matching_cells = 0
    for expected_row in expected:
        total_cells += len(expected_row)
        if not expected_row:
            continue
        actual_row = _find_by_key(actual, normalize_cell(expected_row[0]))
        if actual_row is None:
            continue
        for position, expected_cell in enumerate(expected_row):
            if position < len(actual_row) and normalize_cell(actual_row[position]) == normalize_cell(expected_cell):
                matching_cells += 1

    if total_cells == 0:
        percentage = 100
    else:
        percentage = round_half_up(100 * matching_cells / total_cells)

    if percentage == 100:
        message = "Query executed correctly!"
    else:
        message = f"{percentage}% of cells matched ({matching_cells}/{total_cells})"
    return FuzzyOutcome(percentage, message, matching_cells, total_cells)


def award_points(percentage: int, points: int, threshold: int = DEFAULT_PASS_THRESHOLD) -> int:
    """100%得满分；达到阈值按比例给分；低于阈值不得分"""
    if percentage >= 100:
        return points
    if percentage >= threshold:
        return min(points, max(0, round_half_up(points * percentage / 100)))
    return 0


def score_percentage(score: int, max_score: int) -> int:
    if max_score <= 0:
        return 0
    return round_half_up(100 * score / max_score)


def overall_feedback(score: int, max_score: int, threshold: int = DEFAULT_PASS_THRESHOLD) -> Tuple[int, str]:
    """总分反馈文案，返回 (百分比, 文案)"""
    percentage = score_percentage(score, max_score)
    summary = f"Score: {score}/{max_score} ({percentage}%)"
    if percentage == 100:
        return percentage, f"🎉 Perfect! All tests passed! {summary}"
    if percentage >= threshold:
        return percentage, f"✅ Good job! {summary}. Check failed tests below."
    return percentage, f"❌ Some tests failed. {summary}. Review feedback and try again."
