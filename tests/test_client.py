"""
/tests/test_client.py

Web API 客户端测试（替换 requests.Session.request）
"""
import sys
import os

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from interface.client import JudgeAPIError, JudgeClient


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self._payload = payload

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def client():
    judge_client = JudgeClient("http://judge.local/", timeout=3)
    yield judge_client
    judge_client.close()


def _stub(monkeypatch, client, response, calls):
    def fake_request(method, url, json=None, timeout=None):
        calls.append((method, url, json, timeout))
        return response

    monkeypatch.setattr(client.session, "request", fake_request)


def test_grade_sends_payload(monkeypatch, client):
    calls = []
    _stub(monkeypatch, client, FakeResponse(200, {"success": True, "score": 100}), calls)
    result = client.grade(1, [{"name": "users", "columns": []}], mode="fuzzy")
    assert result["score"] == 100
    method, url, payload, timeout = calls[0]
    assert method == "POST"
    assert url == "http://judge.local/api/problems/1/grade"
    assert payload == {"tables": [{"name": "users", "columns": []}], "queries": {}, "mode": "fuzzy"}
    assert timeout == 3


def test_list_problems_unwraps(monkeypatch, client):
    calls = []
    _stub(monkeypatch, client, FakeResponse(200, {"success": True, "problems": [{"id": 1}]}), calls)
    assert client.list_problems() == [{"id": 1}]
    assert calls[0][:2] == ("GET", "http://judge.local/api/problems")


def test_error_status_raises(monkeypatch, client):
    _stub(monkeypatch, client, FakeResponse(404, {"success": False, "message": "Problem 9 not found"}), [])
    with pytest.raises(JudgeAPIError) as excinfo:
        client.get_problem(9)
    assert excinfo.value.status_code == 404
    assert "Problem 9 not found" in str(excinfo.value)


def test_unparsable_response_raises(monkeypatch, client):
    _stub(monkeypatch, client, FakeResponse(502), [])
    with pytest.raises(JudgeAPIError) as excinfo:
        client.health()
    assert excinfo.value.status_code == 502

def test_close_session(monkeypatch, client):
    calls = []
    _stub(monkeypatch, client, FakeResponse(200, {"success": True, "closed": True}), calls)
    assert client.close_session()["closed"] is True
    assert calls[0][:2] == ("POST", "http://judge.local/api/session/close")



def main():
    pytest.main([__file__, "-v"])


if __name__ == "__main__":
    main()
