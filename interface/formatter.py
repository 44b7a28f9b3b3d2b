"""
结果格式化器
"""

from typing import Any, Dict, List

from grading import RunReport


def format_result_set(results: List[Dict[str, Any]]):
    """格式化并打印查询结果（{columns, values} 列表）"""
    if not results:
        print("查询结果为空")
        return

    result = results[0]
    columns = [str(c) for c in result.get("columns", [])]
    rows = result.get("values", [])

    if not columns:
        print("没有数据可显示")
        return

    # 计算每列的最大宽度，行宽度可能与列数不一致
    width = max([len(columns)] + [len(row) for row in rows])
    columns = columns + [""] * (width - len(columns))
    col_widths = [len(col) for col in columns]
    for row in rows:
        for i, value in enumerate(row):
            col_widths[i] = max(col_widths[i], len(str(value)))

    header = " | ".join(f"{col:<{col_widths[i]}}" for i, col in enumerate(columns))
    print(header)
    print("-" * len(header))

    for row in rows:
        cells = [str(v) for v in row] + [""] * (width - len(row))
        print(" | ".join(f"{cell:<{col_widths[i]}}" for i, cell in enumerate(cells)))

    print(f"\n共 {len(rows)} 行")


def format_query_result(result: Dict[str, Any]):
    """格式化 JudgeDatabase.execute_query 的返回值"""
    if not result.get("success", True):
        print(f"❌ {result.get('message', '未知错误')}")
        return
    format_result_set(result.get("results", []))


def format_run_report(report: RunReport):
    """格式化一次评测的结果"""
    print(f"\n题目: {report.problem_title}")
    print("=" * 50)
    for result in report.results:
        status = "✅" if result.passed else "❌"
        line = f"{status} {result.name:<28} {result.points:>3}/{result.max_points:<3}"
        if result.percentage is not None:
            line += f" ({result.percentage}%)"
        print(line)
        print(f"    {result.message}")
        if result.query:
            print(f"    SQL: {result.query}")
    print("-" * 50)
    print(report.feedback)
