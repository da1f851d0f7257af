"""
Backing stores for content documents.

A store maps a relative document path (``dosimetry/beginner.json``) to its
decoded JSON object. Reads are the only suspension points of the pipeline.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from resident.core.errors import ContentLoadError, ContentNotFoundError


class ContentStore(Protocol):
    """Protocol for content document sources."""

    async def read_document(self, path: str) -> dict[str, Any]:
        """Return the decoded document at ``path`` or raise ContentNotFoundError."""
        ...


class FileContentStore:
    """Reads JSON documents below a base directory."""

    def __init__(self, base_dir: Path | str):
        self.base_dir = Path(base_dir)

    def _read(self, path: str) -> dict[str, Any]:
        file_path = self.base_dir / path
        if not file_path.is_file():
            raise ContentNotFoundError(path)
        try:
            with open(file_path, encoding="utf-8") as f:
                document = json.load(f)
        except json.JSONDecodeError as e:
            raise ContentLoadError(path, f"invalid JSON at line {e.lineno}: {e.msg}") from e
        except UnicodeDecodeError as e:
            raise ContentLoadError(path, f"invalid UTF-8 at byte {e.start}: {e.reason}") from e
        if not isinstance(document, dict):
            raise ContentLoadError(path, "top-level value must be an object")
        return document

    async def read_document(self, path: str) -> dict[str, Any]:
        logger.debug(f"Reading {self.base_dir / path}")
        return await asyncio.to_thread(self._read, path)

    def __repr__(self) -> str:
        return f"FileContentStore({str(self.base_dir)!r})"


class InMemoryContentStore:
    """Dictionary-backed store, mostly for tests and embedded hosts."""

    def __init__(self, documents: dict[str, dict[str, Any]] | None = None):
        self.documents: dict[str, dict[str, Any]] = dict(documents or {})
        self.reads: dict[str, int] = {}

    def put(self, path: str, document: dict[str, Any]) -> None:
        self.documents[path] = document

    async def read_document(self, path: str) -> dict[str, Any]:
        self.reads[path] = self.reads.get(path, 0) + 1
        if path not in self.documents:
            raise ContentNotFoundError(path)
        return self.documents[path]
