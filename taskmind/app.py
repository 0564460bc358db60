"""Wiring of the service from environment settings, and the server entry point."""

import argparse
import os
from typing import Mapping, Optional, Sequence

from flask import Flask
from sqlalchemy.engine import Engine

from taskmind import logger
from taskmind.dao import AIDao, TaskDao, init_tables
from taskmind.dbconfig import DBConfig, new_engine
from taskmind.handler import Handler
from taskmind.llm import LLMHandler
from taskmind.repo import AIRepo
from taskmind.service import AIService

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

_DB_DEFAULTS = {
    "DB_HOST": "localhost",
    "DB_PORT": "13306",
    "DB_NAME": "ai_platform",
    "DB_USERNAME": "root",
    "DB_PASSWORD": "password",
}


def _environment(env: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if env is None else env


def db_config_from_env(env: Optional[Mapping[str, str]] = None) -> DBConfig:
    """Build database settings from the environment, falling back to defaults."""
    env = _environment(env)
    values = {key: env.get(key) or default for key, default in _DB_DEFAULTS.items()}
    return DBConfig(
        host=values["DB_HOST"],
        port=values["DB_PORT"],
        db_name=values["DB_NAME"],
        user_name=values["DB_USERNAME"],
        password=values["DB_PASSWORD"],
    )


def init_db(env: Optional[Mapping[str, str]] = None) -> Engine:
    """Connect to the database and prepare its tables."""
    engine = new_engine(db_config_from_env(env))
    init_tables(engine)
    return engine


def init_llm_handler(env: Optional[Mapping[str, str]] = None) -> LLMHandler:
    """Create the model client from AI_TOKEN and, if given, AI_BASE_URL."""
    env = _environment(env)
    token = env.get("AI_TOKEN", "")
    logger.debug("AI token configured: %s", bool(token))
    return LLMHandler(token, base_url=env.get("AI_BASE_URL") or None)


def init_app(env: Optional[Mapping[str, str]] = None) -> Handler:
    """Assemble the HTTP handler with all of its dependencies."""
    engine = init_db(env)
    repo = AIRepo(AIDao(engine), TaskDao(engine))
    service = AIService(repo, init_llm_handler(env))
    return Handler(service)


def create_flask_app(handler: Handler) -> Flask:
    """Return a Flask application serving the handler's routes."""
    app = Flask(__name__)
    handler.route(app)
    return app


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Start the HTTP server."""
    parser = argparse.ArgumentParser(description="Serve the AI task API.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    app = create_flask_app(init_app())
    app.run(host=args.host, port=args.port, threaded=True)
    return 0