# src/taskboard/core/result.py

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from .errors import TaskboardError


@dataclass(frozen=True, slots=True)
class Result:
    """
    Uniform envelope returned by every controller call.

    `count` is set only for list-returning operations.
    """

    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    count: int | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None) -> Result:
        return cls(success=True, data=data, message=message)

    @classmethod
    def ok_list(cls, items: Sequence[Any], message: str | None = None) -> Result:
        items = list(items)
        return cls(success=True, data=items, message=message, count=len(items))

    @classmethod
    def fail(cls, error: str) -> Result:
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict view with absent keys omitted (what a rendering layer consumes)."""
        out: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            data = self.data
            if isinstance(data, list):
                data = [_plain(x) for x in data]
            else:
                data = _plain(data)
            out["data"] = data
        if self.error is not None:
            out["error"] = self.error
        if self.message is not None:
            out["message"] = self.message
        if self.count is not None:
            out["count"] = self.count
        return out


def _plain(value: Any) -> Any:
    to_record = getattr(value, "to_record", None)
    return to_record() if callable(to_record) else value


def guarded(op: str, fn: Callable[[], Result], *, log: logging.Logger) -> Result:
    """
    Run a controller operation; nothing raised below escapes as an exception.

    TaskboardError -> failure Result with the error's message.
    Anything else  -> logged with traceback, generic failure Result.
    """
    try:
        return fn()
    except TaskboardError as e:
        log.info("%s failed (%s): %s", op, e.kind, e)
        return Result.fail(str(e))
    except Exception:
        log.exception("%s crashed", op)
        return Result.fail(f"Unexpected error during {op}")
