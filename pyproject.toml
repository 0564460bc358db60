[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "taskmind"
version = "0.1.0"
description = "Small HTTP service that runs translation and summarisation tasks on a chat-completion model, with task storage and streamed replies"
requires-python = ">=3.10"
keywords = ["llm", "http", "flask", "tasks", "streaming", "translation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]
dependencies = [
    "flask",
    "sqlalchemy>=2.0",
    "httpx",
]

[project.optional-dependencies]
test = [
    "pytest",
    "respx",
]

[project.scripts]
taskmind-server = "taskmind.app:main"
taskmind-client = "taskmind.client:main"

[tool.hatch.build.targets.wheel]
packages = ["taskmind"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
