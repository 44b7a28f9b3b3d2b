"""
Web API 接口
基于 Flask 提供 RESTful API，每个Web会话拥有独立的评测引擎
"""

import hashlib
import logging
import os
import time
from typing import Dict, List, Optional

from flask import Flask, jsonify, request, session
from flask_cors import CORS

from grading import (
    ComparisonPolicy,
    GradingHarness,
    Problem,
    SchemaInputError,
    TableNode,
    VisualSchema,
    builtin_problems,
)
from sql import Leniency
from .database import JudgeDatabase

logger = logging.getLogger(__name__)


class JudgeWebAPI:
    """评测 Web API"""

    def __init__(
        self,
        problems: Optional[List[Problem]] = None,
        strict: Optional[bool] = None,
        log_dir: Optional[str] = None,
        session_ttl: Optional[float] = None,
    ):
        self.app = Flask(__name__)
        self.app.secret_key = os.environ.get("JUDGE_SECRET_KEY", "minisql-judge-secret-key")

        # 启用 CORS 支持前端跨域访问
        CORS(self.app, supports_credentials=True)

        if strict is None:
            strict = os.environ.get("JUDGE_STRICT", "0")
        self.leniency = Leniency.from_flag(strict)
        self.log_dir = log_dir if log_dir is not None else os.environ.get("JUDGE_LOG_DIR")
        self.problems: Dict[int, Problem] = {p.id: p for p in (problems or builtin_problems())}

        # session_id -> 独立的评测引擎
        self._sessions: Dict[str, JudgeDatabase] = {}
        self._last_seen: Dict[str, float] = {}
        if session_ttl is None:
            session_ttl = float(os.environ.get("JUDGE_SESSION_TTL", "3600"))
        self.session_ttl = session_ttl

        self._setup_routes()

    def _get_session_id(self) -> str:
        """获取或创建会话ID"""
        if "session_id" not in session:
            session["session_id"] = hashlib.md5(
                f"{request.remote_addr}_{os.urandom(16).hex()}".encode()
            ).hexdigest()
        return session["session_id"]

    def _get_db(self) -> JudgeDatabase:
        """获取当前Web会话的评测引擎，不同会话之间互不共享"""
        session_id = self._get_session_id()
        self._evict_idle_sessions(exclude=session_id)
        if session_id not in self._sessions:
            self._sessions[session_id] = JudgeDatabase(
                f"web_{session_id[:8]}", self.leniency, log_dir=self.log_dir
            )
            logger.info(f"创建评测会话: {session_id[:8]}")
        self._last_seen[session_id] = time.monotonic()
        return self._sessions[session_id]

    def _evict_idle_sessions(self, exclude: Optional[str] = None):
        """关闭超过 session_ttl 秒未使用的会话"""
        if self.session_ttl <= 0:
            return
        now = time.monotonic()
        idle = [
            sid for sid, seen in self._last_seen.items()
            if sid != exclude and now - seen > self.session_ttl
        ]
        for session_id in idle:
            self.close_session(session_id)
            logger.info(f"回收空闲评测会话: {session_id[:8]}")

    def close_session(self, session_id: str) -> bool:
        """关闭并移除一个会话，会话不存在时返回False"""
        self._last_seen.pop(session_id, None)
        db = self._sessions.pop(session_id, None)
        if db is None:
            return False
        db.close()
        return True

    @staticmethod
    def _build_schema(tables_data) -> VisualSchema:
        if not isinstance(tables_data, list):
            raise SchemaInputError("tables must be a list")
        schema = VisualSchema()
        for table_data in tables_data:
            schema.add_table(TableNode.from_dict(table_data))
        return schema

    @staticmethod
    def _error(message: str, status: int):
        return jsonify({"success": False, "message": message}), status

    def _setup_routes(self):
        """设置路由"""

        @self.app.route("/api/health", methods=["GET"])
        def health_check():
            """健康检查"""
            return jsonify({
                "status": "ok",
                "message": "SQL judge API is running",
            })

        @self.app.route("/api/problems", methods=["GET"])
        def list_problems():
            """题目列表"""
            return jsonify({
                "success": True,
                "problems": [
                    {
                        "id": p.id,
                        "title": p.title,
                        "difficulty": p.difficulty,
                        "description": p.description,
                        "maxScore": p.max_score,
                        "testCount": len(p.test_cases),
                    }
                    for p in self.problems.values()
                ],
            })

        @self.app.route("/api/problems/<int:problem_id>", methods=["GET"])
        def get_problem(problem_id: int):
            """题目详情"""
            problem = self.problems.get(problem_id)
            if problem is None:
                return self._error(f"Problem {problem_id} not found", 404)
            return jsonify({"success": True, "problem": problem.to_dict()})

        @self.app.route("/api/schema/ddl", methods=["POST"])
        def generate_ddl():
            """由可视化表结构生成DDL"""
            data = request.get_json(silent=True) or {}
            try:
                schema = self._build_schema(data.get("tables", []))
            except SchemaInputError as e:
                return self._error(str(e), 400)
            return jsonify({"success": True, "ddl": schema.generate_ddl()})

        @self.app.route("/api/sql/execute", methods=["POST"])
        def execute_sql():
            """执行学习者的只读查询"""
            data = request.get_json(silent=True)
            if not data:
                return self._error("请求数据格式错误", 400)

            # 将不可见的非中断空格替换为标准空格
            sql = str(data.get("sql", "")).replace("\u00A0", " ").strip()
            if not sql:
                return self._error("Please enter a SQL query", 400)

            try:
                result = self._get_db().execute_query(sql)
            except Exception as e:
                logger.error(f"SQL执行错误: {e}")
                return self._error(f"SQL执行失败: {e}", 500)
            return jsonify(result)

        @self.app.route("/api/problems/<int:problem_id>/grade", methods=["POST"])
        def grade_problem(problem_id: int):
            """运行题目的全部测试"""
            problem = self.problems.get(problem_id)
            if problem is None:
                return self._error(f"Problem {problem_id} not found", 404)

            data = request.get_json(silent=True) or {}
            try:
                schema = self._build_schema(data.get("tables", []))
            except SchemaInputError as e:
                return self._error(str(e), 400)

            try:
                policy = ComparisonPolicy(data.get("mode", ComparisonPolicy.EXACT.value))
            except ValueError:
                return self._error("mode must be 'exact' or 'fuzzy'", 400)

            queries = data.get("queries") or {}
            if not isinstance(queries, dict):
                return self._error("queries must be an object", 400)

            try:
                harness = GradingHarness(self._get_db(), policy)
                report = harness.run_all(problem, schema, queries)
            except Exception as e:
                logger.error(f"评测错误: {e}")
                return self._error(f"Error running tests: {e}", 500)

            return jsonify({"success": bool(report.results), **report.to_dict()})

        @self.app.route("/api/session/reset", methods=["POST"])
        def reset_session():
            """删除当前会话的所有表"""
            dropped = self._get_db().reset()
            return jsonify({"success": True, "dropped": dropped})

        @self.app.route("/api/session/close", methods=["POST"])
        def close_session():
            """结束当前会话并释放其评测引擎"""
            session_id = session.pop("session_id", None)
            closed = self.close_session(session_id) if session_id else False
            return jsonify({"success": True, "closed": closed})

    def run(self, host: str = "127.0.0.1", port: int = 5000, debug: bool = False):
        """启动Web服务器"""
        print("🌐 评测 Web API 启动中...")
        print(f"   地址: http://{host}:{port}")
        print(f"   严格模式: {'开启' if self.leniency == Leniency.STRICT else '关闭'}")

        try:
            self.app.run(host=host, port=port, debug=debug)
        except KeyboardInterrupt:
            print("\n正在关闭服务器...")
        finally:
            self.close_all_sessions()

    def close_all_sessions(self):
        """关闭所有评测会话"""
        for db in self._sessions.values():
            try:
                db.close()
            except Exception as e:
                logger.warning(f"关闭会话时出错: {e}")
        self._sessions.clear()
        self._last_seen.clear()


def create_web_app(problems: Optional[List[Problem]] = None, strict: Optional[bool] = None) -> Flask:
    """创建Flask应用实例"""
    web_api = JudgeWebAPI(problems, strict)
    return web_api.app
