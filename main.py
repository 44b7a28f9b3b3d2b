#!/usr/bin/env python3
"""
SQL 学习评测系统主程序
"""

import json
import os
import sys

from grading import (
    ColumnSpec,
    ComparisonPolicy,
    GradingHarness,
    ProblemFormatError,
    SchemaInputError,
    TableNode,
    VisualSchema,
    builtin_problems,
    load_problem,
)
from interface import JudgeDatabase, format_query_result, format_run_report


def _demo_schema() -> VisualSchema:
    schema = VisualSchema()
    schema.add_table(
        TableNode(
            "users",
            [
                ColumnSpec("id", "INT", is_primary_key=True),
                ColumnSpec("name"),
                ColumnSpec("email"),
                ColumnSpec("password"),
            ],
        )
    )
    return schema


def run_demo():
    """运行演示程序"""
    print("🗄️  SQL 学习评测系统演示")
    print("=" * 40)
    problem = builtin_problems()[0]
    schema = _demo_schema()

    with JudgeDatabase("demo") as db:
        print("📝 生成的DDL:")
        print(schema.generate_ddl())

        for policy in (ComparisonPolicy.EXACT, ComparisonPolicy.FUZZY):
            print(f"\n🧪 评分模式: {policy.value}")
            report = GradingHarness(db, policy).run_all(problem, schema)
            format_run_report(report)

        print("\n🔍 自由查询: SELECT * FROM users WHERE email LIKE '%GMAIL%'")
        format_query_result(db.execute_query("SELECT * FROM users WHERE email LIKE '%GMAIL%'"))

    print("\n✨ 演示完成！")


def run_grade(problem_file: str, schema_file: str, mode: str = "exact") -> int:
    """用JSON文件中的题目和表结构评测，返回退出码"""
    try:
        policy = ComparisonPolicy(mode.lower())
    except ValueError:
        print(f"❌ 未知的评分模式: {mode}（可选 exact 或 fuzzy）")
        return 2

    try:
        problem = load_problem(problem_file)
    except (OSError, ProblemFormatError) as e:
        print(f"❌ 无法加载题目: {e}")
        return 2

    schema = VisualSchema()
    try:
        with open(schema_file, "r", encoding="utf-8") as f:
            tables = json.load(f)
        if not isinstance(tables, list):
            raise SchemaInputError("表结构文件必须是表定义的列表")
        for table in tables:
            schema.add_table(TableNode.from_dict(table))
    except (OSError, ValueError) as e:
        print(f"❌ 无法加载表结构: {e}")
        return 2

    with JudgeDatabase(os.path.splitext(os.path.basename(problem_file))[0]) as db:
        report = GradingHarness(db, policy).run_all(problem, schema)
    if not report.results:
        print(report.feedback)
        return 1
    format_run_report(report)
    return 0 if report.percentage == 100 else 1


def main():
    """主程序"""
    if len(sys.argv) > 1:
        command = sys.argv[1].lower()

        if command == "demo":
            run_demo()
            return
        elif command == "shell":
            from interface.shell import interactive_judge_shell

            with JudgeDatabase("shell", log_dir=os.environ.get("JUDGE_LOG_DIR")) as db:
                interactive_judge_shell(db)
            return
        elif command == "web":
            from interface.web_api import JudgeWebAPI

            host = os.environ.get("JUDGE_HOST", "127.0.0.1")
            port = int(os.environ.get("JUDGE_PORT", "5000"))
            JudgeWebAPI().run(host=host, port=port)
            return
        elif command == "grade" and len(sys.argv) >= 4:
            mode = sys.argv[4] if len(sys.argv) > 4 else "exact"
            sys.exit(run_grade(sys.argv[2], sys.argv[3], mode))

    # 显示使用说明
    print("🗄️  SQL 学习评测系统")
    print("=" * 40)
    print("用法:")
    print("  python main.py demo                                    # 运行功能演示")
    print("  python main.py shell                                   # 启动交互式评测Shell")
    print("  python main.py web                                     # 启动Web API")
    print("  python main.py grade <problem.json> <schema.json> [exact|fuzzy]")


if __name__ == "__main__":
    main()
