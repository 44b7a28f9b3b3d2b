"""
交互式评测Shell
"""

from typing import Dict, List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggest, Suggestion
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from grading import (
    ColumnSpec,
    ComparisonPolicy,
    GradingHarness,
    Problem,
    SchemaInputError,
    TableNode,
    VisualSchema,
    builtin_problems,
)
from .database import JudgeDatabase
from .formatter import format_query_result, format_run_report

SHELL_COMMANDS = [
    "help", "problems", "use ", "problem", "add table ", "remove table ", "schema",
    "test", "mode exact", "mode fuzzy", "reset", "tables", "quit",
]

SQL_KEYWORDS = ["SELECT", "FROM", "WHERE", "LIKE", "COUNT(*)", "GROUP", "BY"]


class _JudgeCompleter(Completer):
    def __init__(self, shell: "JudgeShell"):
        self.shell = shell

    def get_completions(self, document: Document, complete_event):
        word = document.get_word_before_cursor(WORD=True)
        low = word.lower()
        candidates = SHELL_COMMANDS + SQL_KEYWORDS + [t.name for t in self.shell.schema.tables]
        for candidate in candidates:
            if candidate.lower().startswith(low):
                yield Completion(candidate, start_position=-len(word))


class _InlineSuggest(AutoSuggest):
    def __init__(self, shell: "JudgeShell"):
        self.shell = shell

    def get_suggestion(self, buffer, document: Document):
        text = document.text_before_cursor
        if not text:
            return None
        # 基于固定命令表的灰色联想
        for w in SHELL_COMMANDS:
            if w.lower().startswith(text.lower()) and w.lower() != text.lower():
                return Suggestion(w[len(text):])
        return None


def parse_column_spec(spec: str) -> ColumnSpec:
    """解析 name[:type][:pk][:fk] 形式的列描述"""
    parts = spec.split(":")
    column = ColumnSpec(parts[0])
    for part in parts[1:]:
        flag = part.lower()
        if flag == "pk":
            column.is_primary_key = True
        elif flag == "fk":
            column.is_foreign_key = True
        elif part:
            column.type = part.upper()
    return column


class JudgeShell:
    """评测交互式Shell"""

    def __init__(self, database: JudgeDatabase, problems: Optional[List[Problem]] = None):
        self.database = database
        self.problems: Dict[int, Problem] = {p.id: p for p in (problems or builtin_problems())}
        self.problem: Optional[Problem] = None
        self.schema = VisualSchema()
        self.policy = ComparisonPolicy.EXACT
        self.running = True
        self._pt_session = None

    def start(self):
        """启动Shell"""
        print("=" * 60)
        print("🗄️  SQL Learning Platform - 评测 Shell")
        print("=" * 60)
        print("输入 'help' 查看帮助，输入 'quit' 或 'exit' 退出\n")
        self._pt_session = PromptSession(
            completer=_JudgeCompleter(self),
            auto_suggest=_InlineSuggest(self),
        )

        while self.running:
            try:
                user_input = self._pt_session.prompt(self._prompt())
            except (KeyboardInterrupt, EOFError):
                self._safe_exit()
                break
            if user_input and user_input.strip():
                self.process_command(user_input)

    def _prompt(self) -> str:
        if self.problem:
            return f"judge[{self.problem.id}]> "
        return "judge> "

    def process_command(self, command: str):
        """处理一条命令"""
        command = command.strip().rstrip(";").strip()
        if not command:
            return
        lower = command.lower()

        if lower in ("quit", "exit"):
            self._safe_exit()
        elif lower == "help":
            self._show_help()
        elif lower == "problems":
            self._list_problems()
        elif lower.startswith("use "):
            self._select_problem(command.split()[1])
        elif lower == "problem":
            self._show_problem()
        elif lower.startswith("add table "):
            self._add_table(command.split()[2:])
        elif lower.startswith("remove table "):
            name = command.split()[2]
            if self.schema.remove_table(name):
                print(f"✅ 已移除表 {name}")
            else:
                print(f"表 {name} 不存在")
        elif lower == "schema":
            print(self.schema.generate_ddl() or "尚未设计任何表")
        elif lower == "tables":
            print(", ".join(self.database.list_tables()) or "当前没有表")
        elif lower.startswith("mode "):
            self._set_mode(lower.split()[1])
        elif lower == "test":
            self._run_tests()
        elif lower == "reset":
            self._reset()
        elif lower.startswith("select"):
            format_query_result(self.database.execute_query(command))
        else:
            print(f"未知命令: {command}，输入 'help' 查看帮助")

    def _list_problems(self):
        for problem in self.problems.values():
            print(f"  [{problem.id}] {problem.title} ({problem.difficulty}) - {problem.max_score} pts")

    def _select_problem(self, raw_id: str):
        try:
            problem = self.problems.get(int(raw_id))
        except ValueError:
            problem = None
        if problem is None:
            print(f"题目 {raw_id} 不存在")
            return
        self.problem = problem
        self._reset()
        print(f"✅ 已选择题目: {problem.title}")

    def _show_problem(self):
        if not self._require_problem():
            return
        print(f"\n{self.problem.title} ({self.problem.difficulty})")
        print(self.problem.description)
        print("\n要求:")
        for item in self.problem.requirements:
            print(f"  - {item}")
        print("\n提示:")
        for item in self.problem.hints:
            print(f"  - {item}")

    def _add_table(self, args: List[str]):
        if not args:
            print("用法: add table <name> <col[:type][:pk][:fk]> ...")
            return
        node = TableNode(args[0], [parse_column_spec(spec) for spec in args[1:]])
        try:
            self.schema.add_table(node)
        except SchemaInputError as e:
            print(f"❌ {e}")
            return
        print('✅ Table added! Continue designing or run "test"')

    def _set_mode(self, mode: str):
        try:
            self.policy = ComparisonPolicy(mode)
        except ValueError:
            print("模式只能是 exact 或 fuzzy")
            return
        print(f"评分模式: {self.policy.value}")

    def _run_tests(self):
        if not self._require_problem():
            return
        harness = GradingHarness(self.database, self.policy)
        report = harness.run_all(self.problem, self.schema)
        if not report.results:
            print(report.feedback)
            return
        format_run_report(report)

    def _reset(self):
        self.schema = VisualSchema()
        self.database.reset()

    def _require_problem(self) -> bool:
        if self.problem is None:
            print("请先使用 'use <id>' 选择题目")
            return False
        return True

    def _safe_exit(self):
        """安全退出"""
        self.running = False
        print("\n再见！")

    def _show_help(self):
        print(
            """
            📋 命令:
            problems                         - 列出题目
            use <id>                         - 选择题目
            problem                          - 查看题目要求与提示
            add table <name> <col[:type][:pk][:fk]> ...
                                             - 添加表，例如 add table users id:INT:pk name email password
            remove table <name>              - 移除表
            schema                           - 查看生成的DDL
            mode exact|fuzzy                 - 切换评分模式
            test                             - 运行全部测试
            tables                           - 查看引擎中的表
            reset                            - 清空设计与数据
            SELECT ...                       - 执行查询
            quit / exit                      - 退出
            """
        )


def interactive_judge_shell(database: JudgeDatabase):
    """启动交互式评测Shell"""
    shell = JudgeShell(database)
    shell.start()
