from __future__ import annotations

import logging
from contextlib import suppress
from pathlib import Path
from typing import Dict


_LOG_LEVELS: Dict[str, int] = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "verbose": logging.INFO,
    "info": logging.INFO,
    "notify": logging.WARNING,
    "warn": logging.WARNING,
}


def resolve_log_level(name: str | None, default: int = logging.INFO) -> int:
    if not name:
        return default
    return _LOG_LEVELS.get(str(name).strip().lower(), default)


def setup_logging(logs_dir: Path, level: int = logging.INFO) -> None:
    logs_dir.mkdir(parents=True, exist_ok=True)

    root = logging.getLogger("labconf")
    configured_dir = getattr(root, "_labconf_logs_dir", None)
    configured_level = getattr(root, "_labconf_logs_level", None)
    if configured_dir == str(logs_dir) and configured_level == level:
        return

    _close_handlers(root)
    root.setLevel(level)
    root.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root.addHandler(console_handler)

    run_handler = logging.FileHandler(logs_dir / "run.log", encoding="utf-8")
    run_handler.setLevel(level)
    run_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(name)s | %(message)s"))
    root.addHandler(run_handler)

    root._labconf_logs_dir = str(logs_dir)  # type: ignore[attr-defined]
    root._labconf_logs_level = level  # type: ignore[attr-defined]


def _close_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        with suppress(Exception):
            handler.close()
