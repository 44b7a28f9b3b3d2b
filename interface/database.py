"""
评测数据库主接口 - 一个会话独占一套表存储与执行器
"""

import itertools
from typing import Dict, List, Optional

from catalog import SchemaCatalog
from db_logging import LogManager
from sql import (
    EngineError,
    Leniency,
    QueryEvaluator,
    ResultSet,
    StatementExecutor,
    display_message,
    split_script,
)
from table import TableStore

_session_counter = itertools.count(1)


class JudgeDatabase:
    """评测会话引擎

    每个实例拥有独立的TableStore；多个学习者并发使用时必须各自创建实例。
    """

    def __init__(
        self,
        name: Optional[str] = None,
        leniency: Leniency = Leniency.LENIENT,
        table_columns: Optional[Dict[str, List[str]]] = None,
        log_dir: Optional[str] = None,
    ):
        self.session_id = next(_session_counter)
        self.name = name or f"judge_session_{self.session_id}"
        self.leniency = leniency
        self.log_manager = LogManager(self.name, log_dir)

        self.store = TableStore()
        self.catalog = SchemaCatalog(table_columns)
        self.executor = StatementExecutor(self.store, leniency, self.log_manager)
        self.evaluator = QueryEvaluator(self.store, self.catalog, leniency, self.log_manager)
        self.closed = False

    def run(self, sql: str) -> None:
        """执行修改类语句（DDL/DML）"""
        self._check_open()
        self.executor.run(sql)

    def run_script(self, script: str) -> int:
        """按分号拆分脚本后逐条执行，返回执行的语句数"""
        statements = split_script(script)
        for statement in statements:
            self.run(statement)
        return len(statements)

    def exec(self, sql: str) -> List[ResultSet]:
        """执行只读查询，返回包含0或1个结果集的列表"""
        self._check_open()
        return self.evaluator.exec(sql)

    def execute_query(self, sql: str) -> Dict:
        """执行学习者自由输入的查询，错误被捕获为消息"""
        try:
            results = self.exec(sql)
        except EngineError as e:
            self.log_manager.log_error("QUERY_EVALUATOR", "查询失败", str(e))
            return {"success": False, "message": f"SQL Error: {display_message(e)}", "results": []}
        return {
            "success": True,
            "message": "Query executed successfully!",
            "results": [result.to_dict() for result in results],
        }

    def list_tables(self) -> List[str]:
        return self.store.table_names()

    def reset(self) -> int:
        """删除所有表，返回删除的表数量"""
        self._check_open()
        dropped = 0
        for table_name in self.store.table_names():
            self.run(f"DROP TABLE IF EXISTS {table_name}")
            dropped += 1
        return dropped

    def close(self):
        if self.closed:
            return
        self.store.drop_all()
        self.log_manager.close()
        self.closed = True

    def _check_open(self):
        if self.closed:
            raise RuntimeError(f"数据库会话 {self.name} 已关闭")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
