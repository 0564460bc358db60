import json

import httpx
import pytest
import respx

from taskmind import app as app_module
from taskmind.app import (
    create_flask_app,
    db_config_from_env,
    init_app,
    init_db,
    init_llm_handler,
)
from taskmind.domain import LLMRequest, StreamResponse, Task
from taskmind.handler import Handler


class _FakeService:
    def __init__(self):
        self.submitted = []

    def run_task(self, task):
        self.submitted.append(task)
        return "task-1"

    def get_task(self, task_id):
        return Task(uuid=task_id, state="success", type="summarize", result="short")

    def stream(self, request):
        return iter([StreamResponse(content=request.content), StreamResponse(done=True)])


@pytest.fixture
def service():
    return _FakeService()


@pytest.fixture
def client(service):
    flask_app = create_flask_app(Handler(service))
    return flask_app.test_client()


def test_db_config_defaults():
    config = db_config_from_env({})
    assert config.host == "localhost"
    assert config.port == "13306"
    assert config.db_name == "ai_platform"
    assert config.user_name == "root"


def test_db_config_reads_environment():
    env = {
        "DB_HOST": "db.example.com",
        "DB_PORT": "3306",
        "DB_NAME": "tasks",
        "DB_USERNAME": "user",
        "DB_PASSWORD": "password",
    }
    config = db_config_from_env(env)
    assert config.host == "db.example.com"
    assert config.port == "3306"
    assert config.db_name == "tasks"
    assert config.user_name == "user"
    assert config.password == "password"


def test_db_config_empty_value_falls_back_to_default():
    config = db_config_from_env({"DB_HOST": "", "DB_NAME": "other"})
    assert config.host == "localhost"
    assert config.db_name == "other"


def test_init_db_rejects_bad_port():
    with pytest.raises(ValueError):
        init_db({"DB_PORT": "abc"})


def test_init_app_rejects_bad_port():
    with pytest.raises(ValueError):
        init_app({"DB_PORT": "abc"})


def test_main_rejects_bad_port(monkeypatch):
    monkeypatch.setenv("DB_PORT", "abc")
    with pytest.raises(ValueError):
        app_module.main([])


def test_init_llm_handler_uses_token_and_base_url():
    env = {"AI_TOKEN": "token", "AI_BASE_URL": "http://llm.test/v1"}
    with respx.mock:
        route = respx.post("http://llm.test/v1/chat/completions").mock(
            return_value=httpx.Response(
                200, json={"choices": [{"message": {"content": "hello"}}]}
            )
        )
        handler = init_llm_handler(env)
        answer = handler.handle(LLMRequest(type="summarize", content="text"))
    assert answer == "hello"
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer token"
    body = json.loads(sent.content)
    assert body["messages"][1]["content"] == "text"


def test_flask_app_lists_functions(client):
    response = client.get("/ai/v1/list")
    payload = response.get_json()
    assert payload["code"] == 200
    assert payload["data"]["total"] == 3
    types = [f["type"] for f in payload["data"]["functions"]]
    assert types == ["translate_zh2en", "translate_en2zh", "summarize"]


def test_flask_app_runs_task(client, service):
    response = client.post("/ai/v1/run", json={"type": "summarize", "content": "abc"})
    assert response.get_json()["data"] == "task-1"
    assert service.submitted[0].content == "abc"
    assert service.submitted[0].type == "summarize"


def test_flask_app_gets_task(client):
    response = client.get("/ai/v1/task/xyz")
    data = response.get_json()["data"]
    assert data["id"] == "xyz"
    assert data["result"] == "short"


def test_flask_app_streams(client):
    response = client.post("/ai/v1/stream", json={"type": "summarize", "content": "chunk"})
    lines = [json.loads(line) for line in response.get_data(as_text=True).splitlines() if line]
    assert [line["type"] for line in lines] == ["event_message", "event_done"]
    assert lines[0]["content"] == "chunk"