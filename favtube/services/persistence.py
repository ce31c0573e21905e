"""
FavTube - Library Persistence
Repositories that load and save a whole UserLibrary per user.

Every repository follows the same contract:

- ``load_library(user_id)`` never fails for a missing or corrupt record; it
  returns an empty library instead.
- ``save_library(user_id, library)`` either writes the whole library or raises
  ``PersistenceError`` and leaves the previous record in place.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..errors import PersistenceError
from ..models import UserLibraryRecord
from ..schemas import UserLibrary

logger = logging.getLogger(__name__)


class LibraryRepository:
    """Persistence collaborator interface"""

    def load_library(self, user_id: str) -> UserLibrary:
        raise NotImplementedError

    def save_library(self, user_id: str, library: UserLibrary) -> None:
        raise NotImplementedError

    @staticmethod
    def _parse_document(user_id: str, raw: Optional[str]) -> UserLibrary:
        if not raw:
            return UserLibrary()
        try:
            document = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt library for %s (invalid JSON), starting empty", user_id)
            return UserLibrary()

        # The earlier Node server stored a bare list of playlists
        if isinstance(document, list):
            document = {"playlists": document}
        if not isinstance(document, dict):
            logger.warning("Corrupt library for %s (not an object), starting empty", user_id)
            return UserLibrary()

        try:
            return UserLibrary.from_document(document)
        except (PydanticValidationError, TypeError, AttributeError) as exc:
            logger.warning("Corrupt library for %s (%s), starting empty", user_id, exc)
            return UserLibrary()

    @staticmethod
    def _dump_document(library: UserLibrary) -> str:
        return json.dumps(library.to_document(), ensure_ascii=False, indent=2)


class JsonFileRepository(LibraryRepository):
    """One JSON file per user under ``<data_dir>/playlists``"""

    def __init__(self, data_dir: Path | str) -> None:
        self.base_dir = Path(data_dir) / "playlists"
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, user_id: str) -> Path:
        return self.base_dir / f"{user_id}.json"

    def load_library(self, user_id: str) -> UserLibrary:
        path = self.path_for(user_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return UserLibrary()
        except UnicodeDecodeError:
            logger.warning("Library file for %s is not UTF-8, starting empty", user_id)
            return UserLibrary()
        except OSError as exc:
            raise PersistenceError(f"Could not read library for {user_id}: {exc}") from exc
        return self._parse_document(user_id, raw)

    def save_library(self, user_id: str, library: UserLibrary) -> None:
        path = self.path_for(user_id)
        payload = self._dump_document(library)
        tmp_name = None
        try:
            # Write next to the target, then swap it in atomically
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self.base_dir,
                prefix=f".{user_id}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError as exc:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not save library for {user_id}: {exc}") from exc
        logger.debug("Saved library for %s to %s", user_id, path)


class DatabaseRepository(LibraryRepository):
    """One ``user_libraries`` row per user"""

    def __init__(self, session_factory: sessionmaker) -> None:
        self.session_factory = session_factory

    def load_library(self, user_id: str) -> UserLibrary:
        try:
            with self.session_factory() as db:
                record = (
                    db.query(UserLibraryRecord)
                    .filter(UserLibraryRecord.user_id == user_id)
                    .first()
                )
                raw = record.payload if record else None
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not read library for {user_id}: {exc}") from exc
        return self._parse_document(user_id, raw)

    def save_library(self, user_id: str, library: UserLibrary) -> None:
        payload = self._dump_document(library)
        try:
            with self.session_factory() as db:
                record = db.get(UserLibraryRecord, user_id)
                if record is None:
                    record = UserLibraryRecord(user_id=user_id, payload=payload)
                    db.add(record)
                else:
                    record.payload = payload
                record.updated_at = time.time()
                db.commit()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Could not save library for {user_id}: {exc}") from exc


class InMemoryRepository(LibraryRepository):
    """Dict-backed repository; hands out copies so callers never share state"""

    def __init__(self) -> None:
        self._libraries: Dict[str, Dict[str, Any]] = {}

    def load_library(self, user_id: str) -> UserLibrary:
        document = self._libraries.get(user_id)
        if document is None:
            return UserLibrary()
        return UserLibrary.from_document(copy.deepcopy(document))

    def save_library(self, user_id: str, library: UserLibrary) -> None:
        self._libraries[user_id] = library.to_document()
