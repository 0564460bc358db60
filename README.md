# taskmind

taskmind is a small HTTP service in front of an OpenAI-style chat-completion
API. It offers three kinds of task:

| type              | what it does                   |
|-------------------|--------------------------------|
| `translate_zh2en` | translates Chinese to English  |
| `translate_en2zh` | translates English to Chinese  |
| `summarize`       | summarises the text            |

A task can run in the background, with its state and result kept in a
database table. It can also be answered straight away as a stream of JSON
lines.

## Install

```
pip install .
```

The server connects to MySQL through the `mysql+pymysql` driver of
SQLAlchemy, so the PyMySQL driver has to be installed next to the package:

```
pip install pymysql
```

## Running the server

```
taskmind-server
taskmind-server --host 0.0.0.0 --port 9000
```

By default the server listens on `localhost:8080`. The database, the model
token and the model API address come from the environment:

| variable      | default       |
|---------------|---------------|
| `DB_HOST`     | `localhost`   |
| `DB_PORT`     | `13306`       |
| `DB_NAME`     | `ai_platform` |
| `DB_USERNAME` | `root`        |
| `DB_PASSWORD` | `password`    |
| `AI_TOKEN`    | (empty)       |
| `AI_BASE_URL` | (none)        |

Requests go to `<AI_BASE_URL>/chat/completions` with the model
`deepseek-chat` and `Authorization: Bearer <AI_TOKEN>`, for example with
`AI_BASE_URL=https://api.example.com/v1`.

At startup the server checks that the database is reachable, drops the
`tasks` table and creates it again, and creates the `chats` table if it is
missing.

Log lines go to standard error, coloured by level, from `debug` upwards.

## Endpoints

All endpoints sit under `/ai/v1`. Except for the stream, each answers with
HTTP 200 and a JSON body `{"code": ..., "msg": ..., "data": ...}`; a failure
is reported as `code` 500 with `data` set to `"内部错误"`.

- `GET /list`: lists the available functions (name, description, type).
- `POST /run`: takes a body such as `{"id": "...", "type": "summarize", "content": "..."}`.
  An empty or missing `id` gets a fresh UUID. The task is saved as `padding`,
  run in the background, and its id is returned in `data`. When the run ends
  the state becomes `success` or `failed` and the answer is stored as the result.
- `GET /task/<id>`: returns the task's `id`, `type`, `state` and `result`.
  The `type` field is always returned empty.
- `POST /stream`: takes a body such as `{"type": "translate_zh2en", "content": "..."}`.
  It answers with `Content-Type: text/event-stream` and one JSON object per
  line, `{"type": ..., "content": ..., "err": ...}`, where `type` is
  `event_message` (with `content`), `event_err` (with `err`) or `event_done`.
  The stream ends after the first `event_err` or `event_done` line.

A body that is not a JSON object (or form data), or whose fields are not
strings, is rejected with HTTP 400.

## Streaming client

```
taskmind-client
taskmind-client "Hello there" --type translate_en2zh --url http://localhost:8080/ai/v1/stream
```

The client posts one request to the stream endpoint (by default a sample
Chinese sentence to translate into English). It prints each message chunk as
it arrives and stops at the first `event_done` or `event_err` line. Lines that
are not valid JSON are reported and skipped.

## Library use

- `taskmind.app.init_app(env)` builds the `Handler` with its database, model
  client and service; `taskmind.app.create_flask_app(handler)` returns the
  Flask application.
- `taskmind.llm.LLMHandler` calls the model, either returning the whole
  answer (`handle`) or an iterator of `StreamResponse` pieces (`stream`).
- `taskmind.service.AIService` runs tasks on a thread pool.
- `taskmind.handler.stream_lines` turns model stream pieces into wire lines.
- `taskmind.client.iter_events` and `taskmind.client.render` read and print
  a stream of JSON lines.
- `taskmind.logger` has a levelled, coloured `Logger` and a process-wide one.

## What it does not do

There are no users, no authentication and no rate limiting. The `chats`
table is created but nothing reads or writes it. Background tasks live only
in the server process; a task that is running when the server stops stays in
the `padding` state.

## Tests

```
pip install ".[test]"
pytest
```