"""
infrastructure.storage.credential_store - Local credential storage.

Credentials (bearer token + serialized user record) are stored in
~/.greenhero/credentials.json so the user stays logged in between
invocations without re-entering their password every time.

The file is private to the user (mode 0600) and rewritten atomically so a
crash mid-write never leaves a truncated document behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from greenhero.domain.exceptions import CredentialStoreError

logger = logging.getLogger(__name__)


class FileCredentialStore:
    """JSON-file implementation of CredentialStore (structural typing)."""

    def __init__(self, path: Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def get_item(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    async def set_item(self, key: str, value: str) -> None:
        entries = self._read()
        entries[key] = value
        self._write(entries)

    async def delete_item(self, key: str) -> None:
        entries = self._read()
        if key not in entries:
            return
        del entries[key]
        self._write(entries)

    def _read(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise CredentialStoreError(f"Cannot read {self._path}: {e}") from e

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Credential file %s is corrupted; treating as empty", self._path)
            return {}
        if not isinstance(data, dict):
            logger.warning("Credential file %s does not hold an object; treating as empty", self._path)
            return {}
        return data

    def _write(self, entries: dict[str, str]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".credentials-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(entries, fh, indent=2)
                os.chmod(tmp, 0o600)
                os.replace(tmp, self._path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CredentialStoreError(f"Cannot write {self._path}: {e}") from e


class InMemoryCredentialStore:
    """Process-local CredentialStore for tests and ephemeral runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.entries: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.entries[key] = value

    async def delete_item(self, key: str) -> None:
        self.entries.pop(key, None)
