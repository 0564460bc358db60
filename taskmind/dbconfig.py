"""Database connection settings and helpers."""

from dataclasses import dataclass

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine


@dataclass
class DBConfig:
    """Connection settings for the MySQL database."""

    user_name: str = ""
    password: str = ""
    host: str = ""
    port: str = ""
    db_name: str = ""

    def url(self) -> URL:
        """Return the SQLAlchemy URL for these settings."""
        try:
            port = int(self.port) if self.port else None
        except ValueError:
            raise ValueError(f"invalid database port: {self.port!r}") from None
        return URL.create(
            "mysql+pymysql",
            username=self.user_name or None,
            password=self.password or None,
            host=self.host or None,
            port=port,
            database=self.db_name or None,
            query={"charset": "utf8"},
        )


def new_engine(config: DBConfig) -> Engine:
    """Create an engine for ``config`` and check that the database is reachable."""
    engine = create_engine(config.url())
    try:
        with engine.connect():
            pass
    except Exception:
        engine.dispose()
        raise
    return engine


def tear_tables(engine: Engine, *args: str) -> None:
    """Empty each named table in turn, stopping at the first failure."""
    preparer = engine.dialect.identifier_preparer
    for table in args:
        name = preparer.quote(table)
        if engine.dialect.name == "mysql":
            statement = f"TRUNCATE TABLE {name}"
        else:
            statement = f"DELETE FROM {name}"
        with engine.begin() as conn:
            conn.execute(text(statement))