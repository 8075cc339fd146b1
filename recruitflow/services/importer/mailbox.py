"""Single-consumer mailbox handing a pending file to the next import session."""

from __future__ import annotations

import base64
import binascii
import json
import os
import uuid
from pathlib import Path

from recruitflow.core.errors import InputRejectedError
from recruitflow.core.logger import get_logger

from .models import PendingFile

LOGGER = get_logger()

DEFAULT_KEY = "pendingFile"


class PendingFileMailbox:
    """Directory-backed one-shot channel for a single :class:`PendingFile`.

    ``put`` replaces any unread entry. ``take`` claims the entry with an
    atomic rename before reading it, so concurrent consumers never see the
    same payload twice.
    """

    def __init__(self, directory: str | Path, *, key: str = DEFAULT_KEY) -> None:
        self._directory = Path(directory)
        self._key = key

    @property
    def path(self) -> Path:
        return self._directory / f"{self._key}.json"

    def put(self, pending: PendingFile) -> Path:
        self._directory.mkdir(parents=True, exist_ok=True)
        payload = {
            "name": pending.name,
            "base64": base64.b64encode(pending.content).decode("ascii"),
            "type": pending.content_type,
            "isResume": pending.is_resume,
        }
        staging = self._directory / f".{self._key}.{uuid.uuid4().hex}.tmp"
        staging.write_text(json.dumps(payload), encoding="utf-8")
        os.replace(staging, self.path)
        LOGGER.info("importer.mailbox put name=%s bytes=%d resume=%s", pending.name, len(pending.content), pending.is_resume)
        return self.path

    def put_file(self, path: str | Path, *, content_type: str = "", is_resume: bool = False) -> Path:
        source = Path(path)
        return self.put(
            PendingFile(name=source.name, content=source.read_bytes(), content_type=content_type, is_resume=is_resume)
        )

    def has_pending(self) -> bool:
        return self.path.exists()

    def take(self) -> PendingFile | None:
        """Remove and return the pending file, or ``None`` when the mailbox is empty."""

        claimed = self._directory / f".{self._key}.{uuid.uuid4().hex}.claimed"
        try:
            os.replace(self.path, claimed)
        except FileNotFoundError:
            return None
        try:
            raw = claimed.read_text(encoding="utf-8")
        finally:
            claimed.unlink(missing_ok=True)

        try:
            payload = json.loads(raw)
            content = base64.b64decode(payload["base64"], validate=True)
            name = str(payload["name"])
        except (ValueError, KeyError, TypeError, binascii.Error) as exc:
            LOGGER.warning("importer.mailbox malformed_payload error=%s", type(exc).__name__)
            raise InputRejectedError("Pending file payload is malformed.") from exc

        LOGGER.info("importer.mailbox take name=%s bytes=%d", name, len(content))
        return PendingFile(
            name=name,
            content=content,
            content_type=str(payload.get("type") or ""),
            is_resume=bool(payload.get("isResume", False)),
        )


__all__ = ["PendingFileMailbox", "DEFAULT_KEY"]
