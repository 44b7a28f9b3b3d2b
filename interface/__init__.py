"""
用户接口层模块
"""

from .database import JudgeDatabase
from .formatter import format_query_result, format_result_set, format_run_report

__all__ = [
    "JudgeDatabase",
    "format_query_result",
    "format_result_set",
    "format_run_report",
]
