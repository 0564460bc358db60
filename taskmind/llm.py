"""Client for an OpenAI-style chat-completion API, plain and streamed."""

import json
import os
from typing import Iterable, Iterator, Optional

import httpx

from taskmind.domain import LLMRequest, StreamResponse, TaskType

MODEL = "deepseek-chat"

_PROMPTS = {
    TaskType.ZH2EN.value: "将输入的中文翻译成为英文",
    TaskType.EN2ZH.value: "将输入的英文翻译成为中文",
    TaskType.SUMMARIZE.value: "对输入的文字进行总结",
}


class LLMError(Exception):
    """Raised when the model API cannot be reached or answers badly."""


def system_prompt(task_type) -> str:
    """Return the system prompt for a task type, or an empty string if unknown."""
    key = task_type.value if isinstance(task_type, TaskType) else task_type
    return _PROMPTS.get(key, "")


def _sse_data(lines: Iterable[str]) -> Iterator[str]:
    for line in lines:
        if line.startswith("data:"):
            yield line[len("data:"):].strip()


def _chunk_content(data: str) -> Optional[str]:
    """Return the delta text of one stream chunk, or None when it has no choices."""
    try:
        chunk = json.loads(data)
    except ValueError as exc:
        raise LLMError(f"malformed stream chunk: {data!r}") from exc
    if not isinstance(chunk, dict):
        raise LLMError(f"malformed stream chunk: {data!r}")
    choices = chunk.get("choices") or []
    if not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        raise LLMError(f"malformed stream chunk: {data!r}")
    delta = first.get("delta") or {}
    if not isinstance(delta, dict):
        raise LLMError(f"malformed stream chunk: {data!r}")
    return delta.get("content") or ""


class LLMHandler:
    """Sends task requests to the model, either waiting for the answer or streaming it."""

    def __init__(self, token: str, base_url: Optional[str] = None, client: Optional[httpx.Client] = None):
        base_url = base_url or os.environ.get("AI_BASE_URL", "")
        self._url = f"{base_url.rstrip('/')}/chat/completions" if base_url else "/chat/completions"
        self._headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        self._client = client if client is not None else httpx.Client(timeout=httpx.Timeout(60.0))

    def _payload(self, request: LLMRequest, stream: bool) -> dict:
        payload = {
            "model": MODEL,
            "messages": [
                {"role": "system", "content": system_prompt(request.type)},
                {"role": "user", "content": request.content},
            ],
        }
        if stream:
            payload["stream"] = True
        return payload

    def handle(self, request: LLMRequest) -> str:
        """Ask the model and return the whole answer."""
        try:
            response = self._client.post(
                self._url, json=self._payload(request, stream=False), headers=self._headers
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise LLMError(str(exc)) from exc
        if response.is_error:
            raise LLMError(f"model API returned {response.status_code}: {response.text}")
        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise LLMError("malformed model API response") from exc
        return content or ""

    def stream(self, request: LLMRequest) -> Iterator[StreamResponse]:
        """Start a streamed answer and return an iterator over its pieces.

        Failing to start raises LLMError at once; a failure later on arrives as a
        final response carrying the error. A clean end arrives as a response with
        ``done`` set.
        """
        headers = {**self._headers, "Accept": "text/event-stream"}
        try:
            built = self._client.build_request(
                "POST", self._url, json=self._payload(request, stream=True), headers=headers
            )
            response = self._client.send(built, stream=True)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise LLMError(str(exc)) from exc
        if response.is_error:
            try:
                response.read()
                detail = response.text
            finally:
                response.close()
            raise LLMError(f"model API returned {response.status_code}: {detail}")
        return self._recv(response)

    def _recv(self, response: httpx.Response) -> Iterator[StreamResponse]:
        try:
            for data in _sse_data(response.iter_lines()):
                if data == "[DONE]":
                    break
                try:
                    content = _chunk_content(data)
                except LLMError as exc:
                    yield StreamResponse(error=exc)
                    return
                if content is not None:
                    yield StreamResponse(content=content)
            yield StreamResponse(done=True)
        except httpx.HTTPError as exc:
            yield StreamResponse(error=LLMError(str(exc)))
        finally:
            response.close()