"""Task orchestration: submit work to the model in the background and track it."""

import traceback
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import replace
from typing import Iterator, Optional

from taskmind import logger
from taskmind.domain import LLMRequest, StreamResponse, Task, TaskState
from taskmind.llm import LLMHandler
from taskmind.repo import AIRepo


class AIService:
    """Runs tasks asynchronously and exposes streamed model answers."""

    def __init__(self, repo: AIRepo, handler: LLMHandler, executor: Optional[Executor] = None):
        self._repo = repo
        self._handler = handler
        self._executor = executor if executor is not None else ThreadPoolExecutor(
            thread_name_prefix="ai-task"
        )

    def run_task(self, task: Task) -> str:
        """Store the task as pending, start it in the background and return its id."""
        pending = replace(task, state=TaskState.PADDING.value)
        task_id = self._repo.save_task(pending)
        request = LLMRequest(type=task.type, content=task.content)
        self._executor.submit(self._execute, task_id, request)
        return task_id

    def _execute(self, task_id: str, request: LLMRequest) -> None:
        try:
            try:
                content = self._handler.handle(request)
                state = TaskState.SUCCESS.value
            except Exception as exc:
                logger.error("AIService|RunTask | %s: %s", task_id, exc)
                content = ""
                state = TaskState.FAILED.value
            logger.debug("AIService|RunTask|%s|%s", content, state)
            try:
                self._repo.save_task(Task(uuid=task_id, result=content, state=state))
            except Exception as exc:
                logger.error("AIService|RunTask | %s: %s", task_id, exc)
        except Exception as exc:
            logger.error("unexpected failure in AIService.run_task job: %s", exc)
            logger.error("Stack trace: %s", traceback.format_exc())

    def get_task(self, task_id: str) -> Task:
        """Return the stored task; raise TaskNotFoundError if it does not exist."""
        return self._repo.get_task(task_id)

    def stream(self, request: LLMRequest) -> Iterator[StreamResponse]:
        """Stream the model's answer to ``request``."""
        return self._handler.stream(request)