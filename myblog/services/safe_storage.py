"""
Key/value storage that keeps working when the persistent backend does not.
"""
import json
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

from ..logging_config import client_logger

PROBE_KEY = "__storage_test__"


class MemoryStorage:
    """Process-local string storage."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def keys(self) -> Iterator[str]:
        return iter(list(self._data))

    def __len__(self) -> int:
        return len(self._data)


class FileStorage:
    """String storage persisted as one JSON object on disk. Raises OSError when unusable."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except ValueError:
            client_logger.warning("storage file is not valid JSON, starting empty", path=str(self.path))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = str(value)
        self._write(data)

    def remove_item(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def clear(self) -> None:
        self._write({})

    def keys(self) -> Iterator[str]:
        return iter(list(self._read()))

    def __len__(self) -> int:
        return len(self._read())


class SafeStorage:
    """
    Wraps a persistent backend with an in-memory fallback.

    The backend is probed once on construction. If the probe or any later
    call raises OSError the wrapper keeps serving from memory. Writes always
    go to memory too, so switching over loses nothing written here.
    """

    def __init__(self, backend=None, name: str = "storage"):
        self.name = name
        self.fallback = MemoryStorage()
        self.backend = None
        if backend is not None:
            try:
                backend.set_item(PROBE_KEY, "test")
                backend.remove_item(PROBE_KEY)
                self.backend = backend
            except OSError as e:
                client_logger.warning(f"{name} is unavailable, using memory storage", error_message=str(e))

    @property
    def persistent(self) -> bool:
        return self.backend is not None

    def _degrade(self, action: str, error: OSError) -> None:
        client_logger.warning(
            f"{self.name} {action} failed, using memory storage",
            error_message=str(error),
        )
        self.backend = None

    def get_item(self, key: str) -> Optional[str]:
        if self.backend is not None:
            try:
                return self.backend.get_item(key)
            except OSError as e:
                self._degrade("read", e)
        return self.fallback.get_item(key)

    def set_item(self, key: str, value: str) -> None:
        if self.backend is not None:
            try:
                self.backend.set_item(key, value)
            except OSError as e:
                self._degrade("write", e)
        self.fallback.set_item(key, value)

    def remove_item(self, key: str) -> None:
        if self.backend is not None:
            try:
                self.backend.remove_item(key)
            except OSError as e:
                self._degrade("remove", e)
        self.fallback.remove_item(key)

    def clear(self) -> None:
        if self.backend is not None:
            try:
                self.backend.clear()
            except OSError as e:
                self._degrade("clear", e)
        self.fallback.clear()
