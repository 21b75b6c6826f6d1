"""
Utility functions for the cexpr library.
"""

from __future__ import annotations

import linecache
import os
import sys
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any


def _is_site_package(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    return "/site-packages/" in normalized


def _is_stdlib(path: str) -> bool:
    normalized = path.replace("\\", "/").lower()
    if normalized.startswith("<"):
        return False
    return (
        "/lib/python" in normalized
        or "/frameworks/python.framework" in normalized
        or "/.local/share/uv/python" in normalized
    )


_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _is_cexpr_internal(path: str) -> bool:
    return os.path.abspath(path).startswith(_PACKAGE_DIR + os.sep)


def _is_user_frame(path: str) -> bool:
    if path.startswith("<"):
        return True
    return not (_is_site_package(path) or _is_stdlib(path) or _is_cexpr_internal(path))


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").lower() in ("1", "true", "yes")


# Environment variable to control debug mode
DEBUG_EXPRESSIONS = _env_flag("CEXPR_DEBUG")


@dataclass(frozen=True)
class CreationContext:
    """Where a computation node (or delayed value) was constructed."""

    filename: str
    line: int
    function: str
    code: str | None = None
    stack_trace: tuple[dict[str, Any], ...] = field(default_factory=tuple)

    def format_location(self) -> str:
        """Format the creation location as a string."""
        return f"{self.filename}:{self.line} in {self.function}"

    def format_user_location(self) -> str:
        """Location of the nearest frame outside cexpr and the standard library."""
        if _is_user_frame(self.filename):
            return self.format_location()
        for frame in self.stack_trace:
            if _is_user_frame(frame["filename"]):
                return f"{frame['filename']}:{frame['line']} in {frame['function']}"
        return self.format_location()

    def format_full(self) -> str:
        """Format the full creation context with stack trace."""
        lines = [f"Created at {self.format_location()}"]
        if self.code:
            lines.append(f"    {self.code}")
        if self.stack_trace:
            lines.append("\nCreation stack trace:")
            for frame in self.stack_trace:
                lines.append(
                    f'  File "{frame["filename"]}", line {frame["line"]}, in {frame["function"]}'
                )
                if frame.get("code"):
                    lines.append(f"    {frame['code']}")
        return "\n".join(lines)


def capture_creation_context(skip_frames: int = 2) -> CreationContext | None:
    """
    Capture the current stack context for debugging node creation.

    Args:
        skip_frames: Number of frames to skip (default 2 to skip this function and caller)

    Returns:
        CreationContext with frame info, or None when frames are unavailable.
        Outer frames are collected up to the first user frame, or deeper when
        ``CEXPR_DEBUG`` is set.
    """
    try:
        frame = sys._getframe(skip_frames)
    except (AttributeError, ValueError):
        # sys._getframe() is missing on some implementations, or the stack is too shallow
        return None

    filename = frame.f_code.co_filename
    line = frame.f_lineno
    code = linecache.getline(filename, line).strip() or None

    stack_data: list[dict[str, Any]] = []
    current_frame = frame.f_back
    max_depth = 12 if DEBUG_EXPRESSIONS else 8

    while current_frame is not None and len(stack_data) < max_depth:
        frame_filename = current_frame.f_code.co_filename
        frame_data: dict[str, Any] = {
            "filename": frame_filename,
            "line": current_frame.f_lineno,
            "function": current_frame.f_code.co_name,
        }
        code_line = linecache.getline(frame_filename, current_frame.f_lineno)
        if code_line:
            frame_data["code"] = code_line.strip()
        stack_data.append(frame_data)

        if not DEBUG_EXPRESSIONS and _is_user_frame(frame_filename):
            break

        current_frame = current_frame.f_back

    return CreationContext(
        filename=filename,
        line=line,
        function=frame.f_code.co_name,
        code=code,
        stack_trace=tuple(stack_data),
    )


NOTE_PREFIX = "cexpr: "


def add_note_once(exc: BaseException, text: str) -> bool:
    """Attach ``NOTE_PREFIX + text`` unless a cexpr note is already present.

    Returns True when the note was added. The innermost site to see an
    exception wins, so outer frames re-raising it leave it alone.
    """
    if any(note.startswith(NOTE_PREFIX) for note in getattr(exc, "__notes__", ())):
        return False
    exc.add_note(f"{NOTE_PREFIX}{text}")
    return True


def acquire(resources: ExitStack, resource: Any) -> Any:
    """Register a resource bound by ``use``/``use!`` with ``resources``.

    Context managers are entered and the value their ``__enter__`` returns
    is bound, as with the target of a ``with`` statement; when ``resources``
    closes they are exited with the exception that ended the body, if any.
    Other objects are bound as they are and released through ``close()`` or
    ``dispose()``. ``None`` is accepted and ignored, like a null disposable.
    """
    if resource is None:
        return None
    if hasattr(resource, "__enter__") and hasattr(resource, "__exit__"):
        return resources.enter_context(resource)
    for name in ("close", "dispose"):
        method = getattr(resource, name, None)
        if callable(method):
            resources.callback(method)
            return resource
    raise TypeError(
        f"{type(resource).__name__!r} object cannot be released: "
        "expected a context manager or an object with close()/dispose()"
    )


__all__ = [
    "DEBUG_EXPRESSIONS",
    "NOTE_PREFIX",
    "CreationContext",
    "acquire",
    "add_note_once",
    "capture_creation_context",
]
