"""Table mappings and data access for tasks and chats."""

import time
from typing import Any, Dict

from sqlalchemy import BigInteger, Integer, String, Text, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

_ID_TYPE = BigInteger().with_variant(Integer, "sqlite")


class Base(DeclarativeBase):
    """Declarative base for all tables."""


class TaskRecord(Base):
    """Row of the ``tasks`` table."""

    __tablename__ = "tasks"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    uid: Mapped[int] = mapped_column(BigInteger, default=0)
    uuid: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    content: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(Text, default="")
    result: Mapped[str] = mapped_column(Text, default="")
    state: Mapped[str] = mapped_column(Text, default="")
    ctime: Mapped[int] = mapped_column(BigInteger, default=0)
    utime: Mapped[int] = mapped_column(BigInteger, default=0)


class ChatRecord(Base):
    """Row of the ``chats`` table."""

    __tablename__ = "chats"

    id: Mapped[int] = mapped_column(_ID_TYPE, primary_key=True, autoincrement=True)
    content: Mapped[str] = mapped_column(Text, default="")
    ctime: Mapped[int] = mapped_column(BigInteger, default=0)


class TaskNotFoundError(LookupError):
    """Raised when no task has the requested uuid."""


class AIDao:
    """Access to stored chats."""

    def __init__(self, engine: Engine):
        self.engine = engine


def _text(value) -> str:
    return "" if value is None else str(value)


class TaskDao:
    """Access to stored tasks."""

    def __init__(self, engine: Engine):
        self.engine = engine

    def save(self, task: TaskRecord) -> None:
        """Insert the task, or update state, result and utime when its uuid exists."""
        now = int(time.time())
        values: Dict[str, Any] = {
            "uid": task.uid or 0,
            "uuid": task.uuid,
            "content": _text(task.content),
            "type": _text(task.type),
            "result": _text(task.result),
            "state": _text(task.state),
            "ctime": now,
            "utime": now,
        }
        updates = {"state": values["state"], "utime": now, "result": values["result"]}
        with self.engine.begin() as conn:
            self._upsert(conn, values, updates)

    def _upsert(self, conn: Connection, values: Dict[str, Any], updates: Dict[str, Any]) -> None:
        dialect = self.engine.dialect.name
        if dialect == "mysql":
            from sqlalchemy.dialects.mysql import insert as mysql_insert

            stmt = mysql_insert(TaskRecord).values(**values).on_duplicate_key_update(**updates)
            conn.execute(stmt)
        elif dialect in ("sqlite", "postgresql"):
            if dialect == "sqlite":
                from sqlalchemy.dialects.sqlite import insert as dialect_insert
            else:
                from sqlalchemy.dialects.postgresql import insert as dialect_insert
            stmt = dialect_insert(TaskRecord).values(**values).on_conflict_do_update(
                index_elements=[TaskRecord.uuid], set_=updates
            )
            conn.execute(stmt)
        else:
            existing = conn.execute(
                select(TaskRecord.id).where(TaskRecord.uuid == values["uuid"])
            ).first()
            if existing is None:
                conn.execute(insert(TaskRecord).values(**values))
            else:
                conn.execute(
                    update(TaskRecord).where(TaskRecord.uuid == values["uuid"]).values(**updates)
                )

    def get_task(self, uuid: str) -> TaskRecord:
        """Return the task with this uuid; raise TaskNotFoundError if there is none."""
        with Session(self.engine) as session:
            record = session.scalars(
                select(TaskRecord).where(TaskRecord.uuid == uuid).order_by(TaskRecord.id).limit(1)
            ).first()
        if record is None:
            raise TaskNotFoundError(uuid)
        return record


def init_tables(engine: Engine) -> None:
    """Recreate the tasks table from scratch and make sure the chats table exists."""
    TaskRecord.__table__.drop(engine, checkfirst=True)
    Base.metadata.create_all(engine, tables=[TaskRecord.__table__, ChatRecord.__table__])