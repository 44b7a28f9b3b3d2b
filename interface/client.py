"""
评测 Web API 客户端
"""

from typing import Any, Dict, List, Optional

import requests


class JudgeAPIError(RuntimeError):
    """服务端返回了失败结果"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class JudgeClient:
    """通过 HTTP 调用评测服务，同一个客户端复用同一个服务端会话"""

    def __init__(self, base_url: str = "http://127.0.0.1:5000", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = requests.Session()

    def _request(self, method: str, path: str, payload: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        response = self.session.request(method, url, json=payload, timeout=self.timeout)
        try:
            result = response.json()
        except ValueError as e:
            raise JudgeAPIError(f"无法解析服务端响应: {e}", response.status_code) from e
        if response.status_code >= 400:
            raise JudgeAPIError(result.get("message", "未知错误"), response.status_code)
        return result

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/api/health")

    def list_problems(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/problems")["problems"]

    def get_problem(self, problem_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/problems/{problem_id}")["problem"]

    def execute(self, sql: str) -> Dict[str, Any]:
        return self._request("POST", "/api/sql/execute", {"sql": sql})

    def grade(
        self,
        problem_id: int,
        tables: List[Dict[str, Any]],
        queries: Optional[Dict[str, str]] = None,
        mode: str = "exact",
    ) -> Dict[str, Any]:
        payload = {"tables": tables, "queries": queries or {}, "mode": mode}
        return self._request("POST", f"/api/problems/{problem_id}/grade", payload)

    def reset(self) -> Dict[str, Any]:
        return self._request("POST", "/api/session/reset")

    def close_session(self) -> Dict[str, Any]:
        """结束服务端会话，释放其评测引擎"""
        return self._request("POST", "/api/session/close")

    def close(self):
        self.session.close()
