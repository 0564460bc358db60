"""Repository translating between domain tasks and stored rows."""

from uuid import uuid4

from taskmind.dao import AIDao, TaskDao, TaskRecord
from taskmind.domain import Task


class AIRepo:
    """Stores and loads tasks for the service layer."""

    def __init__(self, chat_dao: AIDao, task_dao: TaskDao):
        self._chat_dao = chat_dao
        self._task_dao = task_dao

    def get_task(self, uuid: str) -> Task:
        """Load a task; raise TaskNotFoundError if it does not exist."""
        record = self._task_dao.get_task(uuid)
        return Task(
            uuid=record.uuid,
            content=record.content,
            state=record.state,
            result=record.result,
        )

    def save_task(self, task: Task) -> str:
        """Save a task, giving it a fresh uuid if it has none, and return its uuid."""
        task_id = task.uuid or str(uuid4())
        self._task_dao.save(
            TaskRecord(
                uuid=task_id,
                content=task.content,
                state=task.state,
                type=task.type,
                result=task.result,
            )
        )
        return task_id