# rectify/trace.py
"""File trace channel for rectify.

Each request's attempts, spawned commands and cleanup are appended to a log
file, independent of the user-facing debug stream.

Usage:
    from rectify.trace import trace

    trace("Pipeline", "run: src/app.php formatters=['pint']")

The path comes from RECTIFY_TRACE_LOG. An empty value disables tracing; when
the variable is unset, rectify_trace.log in the system temp directory is used.
"""

import os
import tempfile
from datetime import datetime
from typing import Optional

TRACE_ENV_VAR = "RECTIFY_TRACE_LOG"
DEFAULT_TRACE_FILENAME = "rectify_trace.log"


def resolve_trace_path() -> Optional[str]:
    """Return the trace file path, or None if tracing is disabled."""
    value = os.environ.get(TRACE_ENV_VAR)
    if value is None:
        return os.path.join(tempfile.gettempdir(), DEFAULT_TRACE_FILENAME)
    return value or None


def trace(component: str, msg: str) -> None:
    """Append "[time] [component] msg" to the trace log.

    Tracing must never disturb formatting, so write errors are dropped.
    """
    path = resolve_trace_path()
    if path is None:
        return
    line = f"[{datetime.now():%H:%M:%S.%f}] [{component}] {msg}\n"
    try:
        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line)
    except OSError:
        pass
