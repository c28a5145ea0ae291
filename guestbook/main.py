from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from flask import Flask, Response, jsonify, request

from .config import AppSettings, load_settings
from .log_store import Entry, LogStore, StorageError
from .validation import ValidationError, validate_entry

READ_CHUNK_BYTES = 64 * 1024

CONTENT_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
}
DEFAULT_CONTENT_TYPE = "application/octet-stream"


class RequestPayloadError(Exception):
    pass


class PayloadTooLarge(RequestPayloadError):
    pass


class ParseError(RequestPayloadError):
    pass


class PathTraversalError(Exception):
    pass


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def read_body(limit: int) -> bytes:
    if request.content_length is not None and request.content_length > limit:
        raise PayloadTooLarge(f"Body of {request.content_length} bytes exceeds {limit}")

    chunks: list[bytes] = []
    size = 0
    while True:
        chunk = request.stream.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise PayloadTooLarge(f"Body exceeds {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def parse_json(body: bytes) -> Any:
    # ValueError covers JSONDecodeError and integers past the digit limit.
    try:
        payload = json.loads(body.decode("utf-8") or "{}")
    except (UnicodeDecodeError, ValueError, RecursionError) as exc:
        raise ParseError(str(exc)) from exc
    if payload is None:
        raise ParseError("Body is JSON null")
    return payload


def resolve_static_path(static_dir: Path, url_path: str) -> Path:
    root = static_dir.resolve()
    candidate = (root / url_path).resolve()
    if not candidate.is_relative_to(root):
        raise PathTraversalError(url_path)
    return candidate


def create_app(settings: AppSettings | None = None, store: LogStore | None = None) -> Flask:
    app = Flask(__name__, static_folder=None)

    settings = settings or load_settings()
    store = store or LogStore(settings.log_path)
    store.initialize()

    @app.get("/entries", provide_automatic_options=False)
    def list_entries():
        try:
            entries = store.list_all()
        except StorageError:
            app.logger.exception("Failed to read guestbook entries")
            return jsonify({"error": "Failed to read entries."}), 500
        return jsonify([entry.to_dict() for entry in entries])

    @app.post("/entries", provide_automatic_options=False)
    def create_entry():
        try:
            payload = parse_json(read_body(settings.max_body_bytes))
        except RequestPayloadError:
            app.logger.exception("Rejected guestbook payload")
            return jsonify({"error": "Invalid request payload."}), 400

        try:
            sanitized = validate_entry(payload)
        except ValidationError as exc:
            return jsonify({"error": exc.message}), 400

        entry = Entry(
            user=sanitized.user,
            message=sanitized.message,
            timestamp=utc_timestamp(),
        )
        try:
            store.append(entry)
        except StorageError:
            app.logger.exception("Failed to save guestbook entry")
            return jsonify({"error": "Failed to save entry."}), 500

        app.logger.info("Stored entry from %s at %s", entry.user, entry.timestamp)
        return jsonify(entry.to_dict()), 201

    def serve_static(filename: str):
        try:
            path = resolve_static_path(settings.static_dir, filename)
        except PathTraversalError:
            return "Forbidden", 403

        try:
            data = path.read_bytes()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError):
            return "Not Found", 404
        except OSError:
            app.logger.exception("Failed to read static file %s", path)
            return "Server Error", 500

        content_type = CONTENT_TYPES.get(path.suffix.lower(), DEFAULT_CONTENT_TYPE)
        return Response(data, content_type=content_type)

    @app.get("/", provide_automatic_options=False)
    def index():
        return serve_static("index.html")

    @app.get("/<path:filename>", provide_automatic_options=False)
    def static_file(filename: str):
        return serve_static(filename)

    @app.errorhandler(405)
    def method_not_allowed(_exc):
        return "Not Found", 404

    return app


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    settings = load_settings()
    app = create_app(settings)
    app.logger.info("Server listening on http://localhost:%s", settings.port)
    app.run(host=settings.host, port=settings.port)
