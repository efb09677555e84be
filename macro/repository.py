"""Persistent store for the macro script collection."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional

from .script_model import Script, new_script_id, now_ms

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (copy)"


class MacroRepository:
    """
    Keeps every script in one JSON array document.

    Each mutation reads the whole collection, modifies it and writes it back
    atomically. A re-entrant lock serialises all calls so concurrent callers
    never interleave a read and a write of the document.
    """

    def __init__(self, storage_path: Path, clock: Optional[Callable[[], int]] = None) -> None:
        self._storage_path = Path(storage_path)
        self._clock = clock or now_ms
        self._lock = threading.RLock()

    @property
    def storage_path(self) -> Path:
        return self._storage_path

    # Queries -----------------------------------------------------------

    def get_all(self) -> List[Script]:
        """All scripts, most recently updated first. Missing/corrupt document -> []."""
        with self._lock:
            scripts = self._load()
        return sorted(scripts, key=lambda s: s.updated_at, reverse=True)

    def get(self, script_id: str) -> Optional[Script]:
        for script in self.get_all():
            if script.id == script_id:
                return script
        return None

    def search(self, query: str) -> List[Script]:
        scripts = self.get_all()
        if not query or not query.strip():
            return scripts
        needle = query.lower()
        return [
            s
            for s in scripts
            if needle in s.name.lower()
            or needle in s.description.lower()
            or any(needle in tag.lower() for tag in s.tags)
        ]

    def get_by_tag(self, tag: str) -> List[Script]:
        return [s for s in self.get_all() if tag in s.tags]

    @staticmethod
    def tags_of(scripts: Iterable[Script]) -> List[str]:
        return sorted({tag for script in scripts for tag in script.tags})

    def all_tags(self) -> List[str]:
        return self.tags_of(self.get_all())

    def export(self, script_id: str) -> Optional[str]:
        script = self.get(script_id)
        if script is None:
            return None
        return json.dumps(script.to_dict(), indent=2, ensure_ascii=False)

    # Mutations ---------------------------------------------------------

    def save(self, script: Script) -> Optional[Script]:
        """
        Insert or replace `script`, stamping updated_at.

        Returns:
            The stored copy, or None when the document could not be written.
        """
        stored = replace(script, updated_at=self._clock())
        with self._lock:
            scripts = self._load()
            for i, existing in enumerate(scripts):
                if existing.id == stored.id:
                    scripts[i] = stored
                    break
            else:
                scripts.insert(0, stored)
            if not self._write(scripts):
                return None
        return stored

    def delete(self, script_id: str) -> bool:
        with self._lock:
            scripts = self._load()
            remaining = [s for s in scripts if s.id != script_id]
            if len(remaining) == len(scripts):
                return False
            return self._write(remaining)

    def duplicate(self, script_id: str) -> Optional[Script]:
        with self._lock:
            original = self.get(script_id)
            if original is None:
                return None
            stamp = self._clock()
            copy = replace(
                original,
                id=new_script_id(),
                name=f"{original.name}{COPY_SUFFIX}",
                created_at=stamp,
                updated_at=stamp,
            )
            return self.save(copy)

    def import_script(self, document: str) -> Optional[Script]:
        """Import a single-script JSON document under a fresh id."""
        try:
            data = json.loads(document)
            if not isinstance(data, dict):
                raise ValueError("Script document must be a JSON object")
            parsed = Script.from_dict(data)
        except (ValueError, TypeError) as e:
            logger.error("Import failed: %s", e)
            return None

        with self._lock:
            existing_ids = {s.id for s in self._load()}
            new_id = new_script_id()
            while new_id in existing_ids:
                new_id = new_script_id()
            stamp = self._clock()
            imported = replace(parsed, id=new_id, created_at=stamp, updated_at=stamp)
            return self.save(imported)

    def clear(self) -> None:
        with self._lock:
            try:
                self._storage_path.unlink()
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.error("Could not remove %s: %s", self._storage_path, e)

    # Document I/O ------------------------------------------------------

    def _load(self) -> List[Script]:
        path = self._storage_path
        if not path.exists():
            return []

        try:
            raw_data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(raw_data, list):
                raise ValueError("Macro document has invalid structure")
        except (OSError, ValueError) as e:
            logger.error("Unreadable macro document %s: %s", path, e)
            # Keep the corrupt file for inspection instead of overwriting it later.
            backup_path = path.with_suffix(".bak")
            try:
                path.replace(backup_path)
            except OSError:
                pass
            return []

        scripts: List[Script] = []
        for entry in raw_data:
            script = self._decode_entry(entry)
            if script is not None:
                scripts.append(script)
        return scripts

    @staticmethod
    def _decode_entry(entry: Any) -> Optional[Script]:
        if not isinstance(entry, dict):
            logger.warning("Skipping non-object entry in macro document")
            return None
        try:
            return Script.from_dict(entry)
        except (ValueError, TypeError) as e:
            logger.warning("Skipping malformed script %r: %s", entry.get("id"), e)
            return None

    def _write(self, scripts: List[Script]) -> bool:
        path = self._storage_path
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_suffix(".tmp")
            payload = json.dumps([s.to_dict() for s in scripts], ensure_ascii=False)
            tmp_path.write_text(payload, encoding="utf-8")
            tmp_path.replace(path)
            return True
        except OSError as e:
            logger.error("Could not write macro document %s: %s", path, e)
            return False
