"""HTTP endpoints for listing functions, running tasks and streaming answers."""

import json
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, Sequence

from flask import Flask, Response, abort, request

from taskmind import logger
from taskmind.domain import LLMRequest, StreamResponse, Task

_INTERNAL_ERROR = "内部错误"


class EventType(str, Enum):
    """Kind of line sent on the answer stream."""

    ERR = "event_err"
    MESSAGE = "event_message"
    DONE = "event_done"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StreamEvent:
    """One line of the answer stream."""

    type: EventType
    content: str = ""
    err: str = ""

    def to_json(self) -> str:
        """Return the compact JSON form sent on the wire."""
        return json.dumps(
            {"type": EventType(self.type).value, "content": self.content, "err": self.err},
            ensure_ascii=False,
            separators=(",", ":"),
        )


@dataclass(frozen=True)
class Function:
    """A function the service offers."""

    name: str
    desc: str
    type: str


FUNCTIONS = (
    Function(name="中译英", desc="中文翻译成为英文", type="translate_zh2en"),
    Function(name="英译中", desc="英文翻译成为中文", type="translate_en2zh"),
    Function(name="总结功能", desc="对文字进行总结", type="summarize"),
)


def _line(event: StreamEvent) -> str:
    return event.to_json() + "\n"


def stream_lines(responses: Iterable[StreamResponse]) -> Iterator[str]:
    """Turn model stream pieces into wire lines, ending with a done or error line."""
    iterator = iter(responses)
    try:
        for response in iterator:
            if response.done:
                yield _line(StreamEvent(EventType.DONE))
                return
            if response.error is not None:
                yield _line(StreamEvent(EventType.ERR, err=str(response.error)))
                return
            logger.debug("eventMessage|%s", response.content)
            yield _line(StreamEvent(EventType.MESSAGE, content=response.content))
        yield _line(StreamEvent(EventType.DONE))
    finally:
        close = getattr(iterator, "close", None)
        if close is not None:
            close()


def _result(code: int, data, msg: str = "") -> Response:
    body = json.dumps({"code": code, "msg": msg, "data": data}, ensure_ascii=False)
    return Response(body, status=200, content_type="application/json; charset=utf-8")


def _bind(fields: Sequence[str]) -> Dict[str, str]:
    data = request.get_json(force=True, silent=True)
    if data is None and request.form:
        data = request.form.to_dict()
    if not isinstance(data, dict):
        abort(400)
    values = {}
    for field in fields:
        value = data.get(field, "")
        if not isinstance(value, str):
            abort(400)
        values[field] = value
    return values


class Handler:
    """Flask views over an AIService."""

    def __init__(self, service):
        self._service = service

    def route(self, app: Flask) -> None:
        """Register the views under /ai/v1."""
        app.add_url_rule("/ai/v1/list", "ai_list", self.list_functions, methods=["GET"])
        app.add_url_rule("/ai/v1/run", "ai_run", self.run, methods=["POST"])
        app.add_url_rule("/ai/v1/stream", "ai_stream", self.stream, methods=["POST"])
        app.add_url_rule("/ai/v1/task/<task_id>", "ai_task", self.get_task, methods=["GET"])

    def list_functions(self) -> Response:
        """List the functions on offer."""
        return _result(
            200,
            {"total": len(FUNCTIONS), "functions": [asdict(f) for f in FUNCTIONS]},
            msg="success",
        )

    def run(self) -> Response:
        """Submit a task to run in the background and return its id."""
        fields = _bind(("id", "type", "text", "content"))
        try:
            task_id = self._service.run_task(
                Task(uuid=fields["id"], content=fields["content"], type=fields["type"])
            )
        except Exception as exc:
            logger.error("run| %s", exc)
            return _result(500, _INTERNAL_ERROR)
        return _result(200, task_id)

    def get_task(self, task_id: str) -> Response:
        """Return a task's state and result."""
        try:
            task = self._service.get_task(task_id)
        except Exception as exc:
            logger.error("get task| %s", exc)
            return _result(500, _INTERNAL_ERROR)
        return _result(
            200, {"id": task.uuid, "type": task.type, "state": task.state, "result": task.result}
        )

    def stream(self) -> Response:
        """Stream the model's answer as newline-delimited JSON events."""
        fields = _bind(("content", "type"))
        try:
            responses = self._service.stream(
                LLMRequest(type=fields["type"], content=fields["content"])
            )
        except Exception as exc:
            logger.error("stream| %s", exc)
            lines: Iterator[str] = iter([_line(StreamEvent(EventType.ERR, err=str(exc)))])
        else:
            lines = stream_lines(responses)
        return Response(
            lines, content_type="text/event-stream", headers={"Cache-Control": "no-cache"}
        )