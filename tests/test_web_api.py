"""
/tests/test_web_api.py

Web API 测试（Flask test client）
"""
import sys
import os

import pytest

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from interface.web_api import JudgeWebAPI


USERS_TABLE = {
    "name": "users",
    "columns": [
        {"name": "id", "type": "INT", "isPrimaryKey": True},
        {"name": "name"},
        {"name": "email"},
        {"name": "password"},
    ],
}


@pytest.fixture
def web_api():
    api = JudgeWebAPI(strict=False)
    api.app.config["TESTING"] = True
    yield api
    api.close_all_sessions()


@pytest.fixture
def client(web_api):
    return web_api.app.test_client()


def test_health(client):
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"


def test_list_and_get_problems(client):
    problems = client.get("/api/problems").get_json()["problems"]
    assert [p["id"] for p in problems] == [1, 2]
    assert problems[0]["maxScore"] == 100

    detail = client.get("/api/problems/2").get_json()["problem"]
    assert detail["title"] == "E-Commerce Order System"
    assert len(detail["testCases"]) == 5

    assert client.get("/api/problems/42").status_code == 404


def test_generate_ddl(client):
    response = client.post("/api/schema/ddl", json={"tables": [USERS_TABLE]})
    ddl = response.get_json()["ddl"]
    assert "CREATE TABLE users (" in ddl
    assert "id INT PRIMARY KEY" in ddl


def test_generate_ddl_rejects_missing_primary_key(client):
    table = {"name": "t", "columns": [{"name": "id"}]}
    response = client.post("/api/schema/ddl", json={"tables": [table]})
    assert response.status_code == 400
    assert "PRIMARY KEY" in response.get_json()["message"]


def test_grade_full_score(client):
    response = client.post("/api/problems/1/grade", json={"tables": [USERS_TABLE], "mode": "exact"})
    data = response.get_json()
    assert response.status_code == 200
    assert data["success"] is True
    assert data["score"] == 100
    assert data["maxScore"] == 100
    assert all(r["passed"] for r in data["results"])


def test_grade_empty_schema(client):
    data = client.post("/api/problems/1/grade", json={"tables": []}).get_json()
    assert data["success"] is False
    assert data["results"] == []
    assert "design your database schema" in data["feedback"]


def test_grade_rejects_bad_mode(client):
    response = client.post("/api/problems/1/grade", json={"tables": [USERS_TABLE], "mode": "loose"})
    assert response.status_code == 400


def test_execute_uses_session_tables(client):
    client.post("/api/problems/1/grade", json={"tables": [USERS_TABLE]})
    data = client.post("/api/sql/execute", json={"sql": "SELECT COUNT(*) FROM users"}).get_json()
    assert data["success"] is True
    assert data["results"] == [{"columns": ["COUNT(*)"], "values": [[5]]}]


def test_execute_rejects_empty_sql(client):
    assert client.post("/api/sql/execute", json={"sql": "   "}).status_code == 400
    assert client.post("/api/sql/execute", data="nope").status_code == 400


def test_sessions_do_not_share_tables(web_api):
    first = web_api.app.test_client()
    second = web_api.app.test_client()
    first.post("/api/problems/1/grade", json={"tables": [USERS_TABLE]})
    data = second.post("/api/sql/execute", json={"sql": "SELECT COUNT(*) FROM users"}).get_json()
    assert data["results"][0]["values"] == [[0]]
    assert len(web_api._sessions) == 2


def test_reset_session(client):
    client.post("/api/problems/1/grade", json={"tables": [USERS_TABLE]})
    data = client.post("/api/session/reset").get_json()
    assert data == {"success": True, "dropped": 1}


def test_strict_mode_reports_sql_errors():
    api = JudgeWebAPI(strict=True)
    try:
        client = api.app.test_client()
        data = client.post("/api/sql/execute", json={"sql": "SELECT * FROM ghosts"}).get_json()
        assert data["success"] is False
        assert data["message"] == "SQL Error: Table 'ghosts' does not exist"
    finally:
        api.close_all_sessions()

def test_grade_rejects_quoted_names(client):
    table = {"name": "users", "columns": [{"name": "id", "isPrimaryKey": True}, {"name": "user's name"}]}
    response = client.post("/api/problems/1/grade", json={"tables": [table]})
    assert response.status_code == 400
    assert "quotes" in response.get_json()["message"]


def test_close_session_releases_engine(web_api, client):
    client.post("/api/session/reset")
    assert len(web_api._sessions) == 1
    data = client.post("/api/session/close").get_json()
    assert data == {"success": True, "closed": True}
    assert web_api._sessions == {}
    assert client.post("/api/session/close").get_json()["closed"] is False


def test_idle_sessions_are_evicted():
    api = JudgeWebAPI(strict=False, session_ttl=60)
    try:
        first = api.app.test_client()
        second = api.app.test_client()
        first.post("/api/session/reset")
        (idle_id,) = list(api._sessions)
        idle_db = api._sessions[idle_id]
        api._last_seen[idle_id] -= 120
        second.post("/api/session/reset")
        assert idle_id not in api._sessions
        assert idle_db.closed
        assert len(api._sessions) == 1
    finally:
        api.close_all_sessions()



def main():
    pytest.main([__file__, "-v"])


if __name__ == "__main__":
    main()
