from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

PACKAGE_DIR = Path(__file__).resolve().parent

DEFAULT_PORT = 3000
DEFAULT_MAX_BODY_BYTES = 1024 * 1024


@dataclass
class AppSettings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_path: Path = field(default_factory=lambda: PACKAGE_DIR / "data" / "log.json")
    static_dir: Path = field(default_factory=lambda: PACKAGE_DIR / "static")
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES


def env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def env_int(name: str, default: int) -> int:
    raw = env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def load_settings() -> AppSettings:
    defaults = AppSettings()
    log_path = env("GUESTBOOK_LOG_PATH")
    static_dir = env("GUESTBOOK_STATIC_DIR")
    return AppSettings(
        host=env("HOST", defaults.host) or defaults.host,
        port=env_int("PORT", defaults.port),
        log_path=Path(log_path) if log_path else defaults.log_path,
        static_dir=Path(static_dir) if static_dir else defaults.static_dir,
        max_body_bytes=env_int("GUESTBOOK_MAX_BODY_BYTES", defaults.max_body_bytes),
    )
