"""Domain types shared by the service layers."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TaskState(str, Enum):
    """Execution state of a submitted task."""

    PADDING = "padding"
    RUNNING = "running"
    FAILED = "failed"
    SUCCESS = "success"

    def __str__(self) -> str:
        return self.value


class TaskType(str, Enum):
    """Kind of work a task or request asks for."""

    ZH2EN = "translate_zh2en"
    EN2ZH = "translate_en2zh"
    SUMMARIZE = "summarize"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class LLMRequest:
    """Work to submit: the kind of task and its input text."""

    type: str = ""
    content: str = ""


@dataclass(frozen=True)
class StreamResponse:
    """One piece of a streamed answer."""

    content: str = ""
    done: bool = False
    error: Optional[Exception] = None


@dataclass
class Task:
    """A unit of asynchronous work and its outcome."""

    uuid: str = ""
    state: str = ""
    type: str = ""
    content: str = ""
    result: str = ""