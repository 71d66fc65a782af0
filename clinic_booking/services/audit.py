"""Append-only audit logging."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Mapping

from flask import current_app, has_request_context, request

from clinic_booking.services.store import DocumentStore

SENSITIVE_KEYS = {"notes", "note", "medical_history", "reason", "password"}


def _sanitize_meta(meta: Mapping[str, Any] | None) -> dict[str, Any]:
    cleaned: dict[str, Any] = {}
    if not meta:
        return cleaned
    for key, value in meta.items():
        if key.lower() in SENSITIVE_KEYS:
            cleaned[key] = "[redacted]"
        else:
            cleaned[key] = value
    return cleaned


class AuditTrail:
    def __init__(self, store: DocumentStore) -> None:
        self._store = store

    def write_event(
        self,
        actor_user_id: str | None,
        action: str,
        *,
        entity: str | None = None,
        entity_id: str | None = None,
        result: str = "ok",
        meta: Mapping[str, Any] | None = None,
    ) -> None:
        details = dict(meta or {})
        if has_request_context():
            details.setdefault("path", request.path)
        payload = json.dumps(_sanitize_meta(details), ensure_ascii=False, default=str)
        try:
            self._store.add(
                "audit_log",
                {
                    "actor_user_id": actor_user_id,
                    "action": action,
                    "entity": entity,
                    "entity_id": entity_id,
                    "ts": datetime.now(timezone.utc).isoformat(),
                    "result": result,
                    "meta_json_redacted": payload,
                },
            )
        except Exception as exc:
            # The action itself already succeeded; a lost audit row is only logged.
            current_app.logger.warning("Audit write failed for %s: %s", action, exc)

    def events(self, action: str | None = None) -> list[dict[str, Any]]:
        if action:
            return self._store.query("audit_log", "action", "==", action)
        return self._store.all("audit_log")
