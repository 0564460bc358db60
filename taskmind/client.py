"""Command-line client that submits a request and prints the streamed answer."""

import argparse
import json
import sys
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Sequence, TextIO, Union

import httpx

from taskmind.domain import TaskType
from taskmind.handler import EventType

DEFAULT_URL = "http://localhost:8080/ai/v1/stream"
DEFAULT_CONTENT = "你好，请帮我翻译成英文。"


@dataclass(frozen=True)
class _Event:
    type: str = ""
    content: str = ""
    err: str = ""
    raw: str = ""
    parse_error: Optional[str] = None


def _parse(line: str) -> _Event:
    try:
        data = json.loads(line)
    except ValueError as exc:
        return _Event(raw=line, parse_error=str(exc))
    if not isinstance(data, dict):
        return _Event(raw=line, parse_error="expected a JSON object")
    fields = {}
    for name in ("type", "content", "err"):
        value = data.get(name)
        if value is None:
            value = ""
        if not isinstance(value, str):
            return _Event(raw=line, parse_error=f"field {name!r} is not a string")
        fields[name] = value
    return _Event(raw=line, **fields)


def iter_events(lines: Iterable[Union[str, bytes]]) -> Iterator[_Event]:
    """Parse each non-empty line into an event; unparsable lines carry a parse error."""
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        line = line.rstrip("\r\n")
        if not line:
            continue
        yield _parse(line)


def render(events: Iterable[_Event], out: Optional[TextIO] = None) -> bool:
    """Print events until an error or done event; return True if the stream finished."""
    out = sys.stdout if out is None else out
    for event in events:
        if event.parse_error is not None:
            out.write(f"JSON解析失败: {event.parse_error}, 原始数据: {event.raw}\n")
            continue
        if event.type == EventType.MESSAGE.value:
            out.write(event.content)
        elif event.type == EventType.ERR.value:
            out.write(f"\n错误: {event.err}\n")
            return False
        elif event.type == EventType.DONE.value:
            out.write("\n流结束\n")
            return True
        else:
            out.write(f"\n未知事件类型: {event.type}\n")
        out.flush()
    return False


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Send one request to the streaming endpoint and print the answer."""
    parser = argparse.ArgumentParser(description="Stream an answer from the AI task API.")
    parser.add_argument("content", nargs="?", default=DEFAULT_CONTENT)
    parser.add_argument("--type", default=TaskType.ZH2EN.value)
    parser.add_argument("--url", default=DEFAULT_URL)
    args = parser.parse_args(argv)

    payload = {"content": args.content, "type": args.type}
    headers = {"Accept": "text/event-stream", "Cache-Control": "no-cache"}
    out = sys.stdout
    with httpx.Client(timeout=None) as http:
        with http.stream("POST", args.url, json=payload, headers=headers) as response:
            print("开始接收流式响应：", file=out)
            try:
                render(iter_events(response.iter_lines()), out)
            except httpx.HTTPError as exc:
                print(f"读取错误: {exc}", file=out)
    return 0