# Copyright 2025-2026 Dimensional Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Structured logging for jointplan.

Every module gets its logger through ``setup_logger()``. Lines go to the
console in a compact single-line format and to a rotating JSONL file, one
per process, so long planning runs can be inspected afterwards.

The level comes from ``JOINTPLAN_LOG_LEVEL`` (``DEBUG`` shows the
bidirectional planner's gap trace) unless a caller passes one explicitly.
"""

from collections.abc import Mapping
from datetime import datetime
import inspect
import logging
import logging.handlers
import os
from pathlib import Path
import sys
import tempfile
from typing import Any

import structlog
from structlog.processors import CallsiteParameter, CallsiteParameterAdder

from jointplan.constants import JOINTPLAN_LOG_DIR, JOINTPLAN_PROJECT_ROOT

LOG_LEVEL_ENV = "JOINTPLAN_LOG_LEVEL"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 20

_log_file_path: Path | None = None


def _candidate_log_dirs() -> list[Path]:
    candidates = []
    if (JOINTPLAN_PROJECT_ROOT / ".git").exists():
        candidates.append(JOINTPLAN_LOG_DIR)
    state_home = os.getenv("XDG_STATE_HOME")
    base = Path(state_home) if state_home else Path.home() / ".local" / "state"
    candidates.append(base / "jointplan" / "logs")
    candidates.append(Path(tempfile.gettempdir()) / "jointplan" / "logs")
    return candidates


def _resolve_log_dir() -> Path:
    """First writable log directory: checkout, XDG state dir, then tmp."""
    *preferred, fallback = _candidate_log_dirs()
    for log_dir in preferred:
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            continue
        return log_dir
    fallback.mkdir(parents=True, exist_ok=True)
    return fallback


def _configure_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            CallsiteParameterAdder(
                parameters=[CallsiteParameter.FUNC_NAME, CallsiteParameter.LINENO]
            ),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_log_file_path() -> Path:
    """Path of the JSONL file this process logs to.

    The first call picks the file and configures structlog; later calls
    return the same path.
    """
    global _log_file_path

    if _log_file_path is None:
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        _log_file_path = _resolve_log_dir() / f"jointplan_{stamp}_{os.getpid()}.jsonl"
        _configure_structlog()

    return _log_file_path


# ============= Console Rendering =============

_NAME_WIDTH = 30
_USE_COLORS = hasattr(sys.stdout, "isatty") and sys.stdout.isatty()

_RESET = "\033[0m"
_DIM = "\033[1;30;40m"
_KEY = "\033[0;36m"
_VALUE = "\033[0;35m"
_LEVEL_COLORS = {
    "deb": "\033[1;36;40m",
    "inf": "\033[1;32;40m",
    "war": "\033[1;33;40m",
    "err": "\033[1;31;40m",
    "cri": "\033[1;31;40m",
}

# Only useful in the JSON file
_FILE_ONLY_KEYS = frozenset(
    {"func_name", "lineno", "exception", "exc_info", "_record", "_from_structlog"}
)


def _short_time(timestamp: str) -> str:
    try:
        moment = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except ValueError:
        return timestamp[:12] if timestamp else datetime.now().strftime("%H:%M:%S.000")
    return f"{moment:%H:%M:%S}.{moment.microsecond // 1000:03d}"


def _paint(text: str, color: str) -> str:
    return f"{color}{text}{_RESET}" if _USE_COLORS else text


def _compact_console_processor(logger: Any, method_name: str, event_dict: Mapping[str, Any]) -> str:
    """Render ``HH:MM:SS.mmm [lvl][module path] event key=value ...``."""
    fields = {k: v for k, v in event_dict.items() if k not in _FILE_ONLY_KEYS}

    when = _short_time(fields.pop("timestamp", ""))
    level = str(fields.pop("level", "???"))[:3].lower()
    name = str(fields.pop("logger", ""))[-_NAME_WIDTH:]
    event = fields.pop("event", "")

    head = (
        _paint(when, _DIM)
        + " "
        + _paint(f"[{level}]", _LEVEL_COLORS.get(level, ""))
        + _paint(f"[{name:<{_NAME_WIDTH}}]", _DIM)
    )
    pairs = [f"{_paint(f'{k}=', _KEY)}{_paint(str(v), _VALUE)}" for k, v in sorted(fields.items())]
    return " ".join([head, str(event), *pairs])


# ============= Logger Setup =============


def _level_from_env() -> int:
    name = os.getenv(LOG_LEVEL_ENV, "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def _caller_name(depth: int = 2) -> str:
    filename = inspect.stack()[depth].filename
    try:
        return Path(filename).relative_to(JOINTPLAN_PROJECT_ROOT).as_posix()
    except ValueError:
        return filename


def _make_handlers(log_file: Path) -> list[logging.Handler]:
    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(structlog.stdlib.ProcessorFormatter(processor=_compact_console_processor))

    jsonl = logging.handlers.RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    jsonl.setFormatter(
        structlog.stdlib.ProcessorFormatter(processor=structlog.processors.JSONRenderer())
    )
    return [console, jsonl]


def setup_logger(*, level: int | None = None) -> Any:
    """Set up a structured logger named after the calling module.

    Calling it again from the same module replaces the handlers, so the
    level can be changed at runtime.

    Args:
        level: Logging level. Defaults to ``JOINTPLAN_LOG_LEVEL`` or INFO.

    Returns:
        A structlog logger bound to the module path relative to the project root.
    """
    name = _caller_name()
    log_file = get_log_file_path()
    if level is None:
        level = _level_from_env()

    stdlib_logger = logging.getLogger(name)
    stdlib_logger.handlers.clear()
    stdlib_logger.setLevel(level)
    stdlib_logger.propagate = False
    for handler in _make_handlers(log_file):
        handler.setLevel(level)
        stdlib_logger.addHandler(handler)

    return structlog.get_logger(name)
