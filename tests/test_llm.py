import json

import httpx
import pytest
import respx

from taskmind.domain import LLMRequest, TaskType
from taskmind.llm import MODEL, LLMError, LLMHandler, system_prompt

BASE_URL = "http://llm.test"


@pytest.fixture
def router():
    with respx.mock(base_url=BASE_URL) as mock:
        yield mock


@pytest.fixture
def handler():
    return LLMHandler("token", BASE_URL)


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _sse(*pieces, done=True):
    body = "".join(
        "data: " + json.dumps({"choices": [{"delta": {"content": piece}}]}) + "\n\n"
        for piece in pieces
    )
    if done:
        body += "data: [DONE]\n\n"
    return body.encode()


@pytest.mark.parametrize(
    "task_type, prompt",
    [
        ("translate_zh2en", "将输入的中文翻译成为英文"),
        ("translate_en2zh", "将输入的英文翻译成为中文"),
        ("summarize", "对输入的文字进行总结"),
        (TaskType.SUMMARIZE, "对输入的文字进行总结"),
        ("unknown", ""),
    ],
)
def test_system_prompt(task_type, prompt):
    assert system_prompt(task_type) == prompt


def test_handle_returns_answer_and_sends_request(router, handler):
    route = router.post("/chat/completions").mock(
        return_value=httpx.Response(200, json=_completion("Hello"))
    )
    answer = handler.handle(LLMRequest(type="translate_zh2en", content="你好"))
    assert answer == "Hello"
    sent = route.calls.last.request
    assert sent.headers["Authorization"] == "Bearer token"
    body = json.loads(sent.content)
    assert body["model"] == MODEL
    assert body["messages"] == [
        {"role": "system", "content": "将输入的中文翻译成为英文"},
        {"role": "user", "content": "你好"},
    ]
    assert "stream" not in body


def test_handle_error_status_raises(router, handler):
    router.post("/chat/completions").mock(return_value=httpx.Response(401, json={"error": "no"}))
    with pytest.raises(LLMError):
        handler.handle(LLMRequest(type="summarize", content="text"))


def test_handle_malformed_response_raises(router, handler):
    router.post("/chat/completions").mock(return_value=httpx.Response(200, json={"choices": []}))
    with pytest.raises(LLMError):
        handler.handle(LLMRequest(type="summarize", content="text"))


def test_handle_transport_error_raises(router, handler):
    router.post("/chat/completions").mock(side_effect=httpx.ConnectError("refused"))
    with pytest.raises(LLMError):
        handler.handle(LLMRequest(type="summarize", content="text"))


def test_stream_yields_pieces_then_done(router, handler):
    route = router.post("/chat/completions").mock(
        return_value=httpx.Response(200, content=_sse("Hel", "lo"))
    )
    responses = list(handler.stream(LLMRequest(type="translate_zh2en", content="你好")))
    assert [r.content for r in responses[:-1]] == ["Hel", "lo"]
    assert responses[-1].done is True
    assert all(r.error is None for r in responses)
    body = json.loads(route.calls.last.request.content)
    assert body["stream"] is True
    assert route.calls.last.request.headers["Accept"] == "text/event-stream"


def test_stream_end_without_done_marker_is_done(router, handler):
    router.post("/chat/completions").mock(
        return_value=httpx.Response(200, content=_sse("x", done=False))
    )
    responses = list(handler.stream(LLMRequest(type="summarize", content="x")))
    assert [r.content for r in responses[:-1]] == ["x"]
    assert responses[-1].done is True


def test_stream_skips_chunks_without_choices(router, handler):
    body = b'data: {"choices": []}\n\n' + _sse("only")
    router.post("/chat/completions").mock(return_value=httpx.Response(200, content=body))
    responses = list(handler.stream(LLMRequest(type="summarize", content="x")))
    assert [r.content for r in responses if not r.done] == ["only"]


def test_stream_error_status_raises_at_start(router, handler):
    router.post("/chat/completions").mock(return_value=httpx.Response(500, text="down"))
    with pytest.raises(LLMError):
        handler.stream(LLMRequest(type="summarize", content="x"))


def test_stream_malformed_chunk_ends_with_error(router, handler):
    body = _sse("ok", done=False) + b"data: {not json\n\n"
    router.post("/chat/completions").mock(return_value=httpx.Response(200, content=body))
    responses = list(handler.stream(LLMRequest(type="summarize", content="x")))
    assert responses[0].content == "ok"
    assert isinstance(responses[-1].error, LLMError)
    assert not any(r.done for r in responses)