# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Atomic JSON persistence and the clock shared by the on-disk caches."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

LOGGER = logging.getLogger(__name__)

Clock = Callable[[], int]


def epoch_ms() -> int:
    """Return the current wall-clock time in milliseconds since the epoch."""

    return time.time_ns() // 1_000_000


class JsonFileStore:
    """Read and atomically replace JSON documents under a directory.

    Concurrent writers never leave a partially written file behind: content is
    written to a temporary sibling and moved into place with ``os.replace``.
    """

    def read(self, path: Path) -> Any | None:
        """Return the decoded JSON document at ``path``.

        Args:
            path: File to load.

        Returns:
            Any | None: Decoded document, or ``None`` when the file is missing,
            unreadable or corrupt.
        """

        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.debug("cache read failed for %s: %s", path, exc)
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            LOGGER.debug("cache file %s is corrupt; ignoring it", path)
            return None

    def write(self, path: Path, payload: Any) -> None:
        """Atomically replace ``path`` with ``payload`` serialised as JSON.

        Args:
            path: Destination file.
            payload: JSON-serialisable document.

        Raises:
            OSError: If the directory cannot be created or the file replaced.
        """

        path.parent.mkdir(parents=True, exist_ok=True)
        serialized = json.dumps(payload, indent=2, sort_keys=False)
        handle = tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        )
        try:
            with handle:
                handle.write(serialized)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(handle.name, path)
        except OSError:
            Path(handle.name).unlink(missing_ok=True)
            raise

    def try_write(self, path: Path, payload: Any) -> bool:
        """Write ``payload`` and report success instead of raising on I/O errors."""

        try:
            self.write(path, payload)
        except OSError as exc:
            LOGGER.debug("cache write failed for %s: %s", path, exc)
            return False
        return True


__all__ = ["Clock", "JsonFileStore", "epoch_ms"]
