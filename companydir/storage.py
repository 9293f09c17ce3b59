"""
Key-value storage port and its adapters.

The port is a flat, synchronous string -> string store with no multi-key
operations. Adapters raise StorageAccessError for every underlying failure;
deciding whether to degrade or propagate is left to the caller.

Several processes may open the same JSON file or SQLite database. Nothing
here locks across keys, so concurrent read-modify-write cycles can lose
updates (last writer wins).
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Dict, Iterator, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from .database import KVEntry, init_database, get_session
from .errors import StorageAccessError


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def keys(self) -> Iterator[str]:
        ...


class MemoryStore:
    """Process-local store; two instances never share state."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))


class JSONFileStore:
    """
    Whole store kept in one JSON object on disk: {key: string value}.

    Every call re-reads the file, so writes from other processes are
    visible immediately. Writes go to a temp file that replaces the target,
    which keeps readers from ever seeing a half-written file.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                content = f.read().strip()
        except OSError as e:
            raise StorageAccessError(f"Cannot read {self.path}: {e}") from e
        if not content:
            return {}
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise StorageAccessError(f"Store file {self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise StorageAccessError(f"Store file {self.path} does not hold an object")
        return data

    def _save(self, data: Dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise StorageAccessError(f"Cannot write {self.path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        if value is not None and not isinstance(value, str):
            raise StorageAccessError(f"Entry {key!r} is not a string", key=key)
        return value

    def set_item(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove_item(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def keys(self) -> Iterator[str]:
        return iter(list(self._load()))


class SQLStore:
    """Entries stored as rows of the kv_entries table in a SQLite file."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        try:
            init_database(self.db_path)
        except (OSError, SQLAlchemyError) as e:
            raise StorageAccessError(f"Cannot open database {self.db_path}: {e}") from e

    def get_item(self, key: str) -> Optional[str]:
        session = get_session(self.db_path)
        try:
            entry = session.get(KVEntry, key)
            return entry.value if entry is not None else None
        except SQLAlchemyError as e:
            raise StorageAccessError(f"Cannot read {key!r}: {e}", key=key) from e
        finally:
            session.close()

    def set_item(self, key: str, value: str) -> None:
        session = get_session(self.db_path)
        try:
            session.merge(KVEntry(key=key, value=value))
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageAccessError(f"Cannot write {key!r}: {e}", key=key) from e
        finally:
            session.close()

    def remove_item(self, key: str) -> None:
        session = get_session(self.db_path)
        try:
            session.query(KVEntry).filter_by(key=key).delete()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageAccessError(f"Cannot remove {key!r}: {e}", key=key) from e
        finally:
            session.close()

    def keys(self) -> Iterator[str]:
        session = get_session(self.db_path)
        try:
            return iter([row.key for row in session.query(KVEntry.key).all()])
        except SQLAlchemyError as e:
            raise StorageAccessError(f"Cannot list keys: {e}") from e
        finally:
            session.close()


def open_store(settings) -> KeyValueStore:
    """Build the store selected by ``settings.backend``."""
    if settings.backend == "sqlite":
        return SQLStore(Path(settings.db_path))
    if settings.backend == "memory":
        return MemoryStore()
    return JSONFileStore(Path(settings.store_path))
