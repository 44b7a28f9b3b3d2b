"""
日志管理器 - 为不同组件提供统一的日志接口
"""

from typing import Optional

from .logger import DatabaseLogger, LogLevel


class LogManager:
    """日志管理器"""

    def __init__(self, db_name: str, log_dir: Optional[str] = None):
        self.logger = DatabaseLogger(db_name, log_dir)

    def log_sql_execution(
        self,
        sql: str,
        success: bool,
        execution_time: float,
        result_count: int = 0,
        component: str = "SQL_EXECUTOR",
    ):
        """记录SQL执行日志"""
        status = "成功" if success else "失败"
        sql = " ".join(sql.split())
        sql_preview = sql[:100] + "..." if len(sql) > 100 else sql
        message = f"SQL执行{status}: {sql_preview} (耗时: {execution_time:.3f}ms, 结果: {result_count}行)"

        if success:
            self.logger.debug(message, component)
        else:
            self.logger.error(message, component)

    def log_table_operation(self, operation: str, table_name: str, details: str = ""):
        """记录表操作"""
        message = f"表{operation}: {table_name}"
        if details:
            message += f" - {details}"
        self.logger.debug(message, "TABLE_STORE")

    def log_test_result(self, test_name: str, passed: bool, points: int, max_points: int, message: str = ""):
        """记录单个测试用例的评分结果"""
        status = "通过" if passed else "未通过"
        line = f"测试 {test_name} {status}: {points}/{max_points}"
        if message:
            line += f" - {message}"
        self.logger.info(line, "GRADER")

    def log_run_summary(self, problem_title: str, score: int, max_score: int, percentage: int):
        """记录一次完整评测的总分"""
        self.logger.info(f"题目 {problem_title} 评测完成: {score}/{max_score} ({percentage}%)", "GRADER")

    def log_error(self, component: str, error_message: str, details: str = ""):
        """记录错误"""
        message = f"{error_message}"
        if details:
            message += f" - {details}"
        self.logger.error(message, component)

    def set_log_level(self, level: LogLevel):
        """设置日志级别"""
        self.logger.set_log_level(level)

    def close(self):
        self.logger.close()
