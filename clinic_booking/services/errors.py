"""Error types shared by the booking services and lightweight error logging."""

from __future__ import annotations

from datetime import datetime, UTC
from pathlib import Path
import traceback

from flask import current_app


class ClinicError(Exception):
    """Base exception for clinic operations; carries the HTTP status to report."""

    status_code = 500
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.default_message


class ValidationFailed(ClinicError):
    status_code = 400
    default_message = "Invalid request"


class NotAuthenticated(ClinicError):
    status_code = 401
    default_message = "Unauthorized: No token provided"


class PermissionDenied(ClinicError):
    status_code = 403
    default_message = "Forbidden"


class NotFound(ClinicError):
    status_code = 404
    default_message = "Not found"


class Conflict(ClinicError):
    status_code = 409
    default_message = "Conflict"


def record_exception(context: str, exc: BaseException) -> None:
    """Append exception details to data/logs/app_errors.log for offline inspection."""

    current_app.logger.error("%s failed: %s", context, exc)
    try:
        root = Path(current_app.config["DATA_ROOT"]) / "logs"
        root.mkdir(parents=True, exist_ok=True)
        log_path = root / "app_errors.log"
        with log_path.open("a", encoding="utf-8") as handle:
            handle.write(f"[{datetime.now(UTC).isoformat()}] {context}\n")
            handle.write("".join(traceback.format_exception(exc)))
            handle.write("\n")
    except Exception:
        # Never let logging failures break the request cycle.
        pass
