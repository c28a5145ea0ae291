from __future__ import annotations

from pathlib import Path

import pytest

from guestbook.config import AppSettings
from guestbook.log_store import LogStore
from guestbook.main import create_app


@pytest.fixture
def settings(tmp_path: Path) -> AppSettings:
    static_dir = tmp_path / "static"
    static_dir.mkdir()
    (static_dir / "index.html").write_text("<h1>Guestbook</h1>", encoding="utf-8")
    (static_dir / "style.css").write_text("body { margin: 0; }", encoding="utf-8")
    (static_dir / "app.js").write_text("console.log('hi');", encoding="utf-8")
    return AppSettings(
        log_path=tmp_path / "data" / "log.json",
        static_dir=static_dir,
    )


@pytest.fixture
def store(settings: AppSettings) -> LogStore:
    return LogStore(settings.log_path)


@pytest.fixture
def client(settings: AppSettings, store: LogStore):
    app = create_app(settings, store)
    app.config["TESTING"] = True
    return app.test_client()
