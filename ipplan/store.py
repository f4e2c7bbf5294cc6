# store.py
"""
Registry of already assigned subnets (DATA.json).

The file is a flat JSON list of reservations. RangeStore reads it as a
snapshot carrying a content token and only writes back when the file still
matches that token, so a stale read can never overwrite a newer registry.
"""
import hashlib
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Dict, List, NamedTuple, Optional

from pydantic import TypeAdapter, ValidationError

from ipplan.errors import MalformedRegistry, RegistryConflict
from ipplan.models import SubnetReservation

logger = logging.getLogger(__name__)

_reservations = TypeAdapter(List[SubnetReservation])

# one lock per registry file, shared by every RangeStore on that path
_path_locks: Dict[str, threading.Lock] = {}
_path_locks_guard = threading.Lock()


def _lock_for(path: Path) -> threading.Lock:
    key = os.path.normcase(str(path.resolve()))
    with _path_locks_guard:
        return _path_locks.setdefault(key, threading.Lock())


class RegistrySnapshot(NamedTuple):
    reservations: List[SubnetReservation]
    token: Optional[str]  # None when the file does not exist


def _token(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def _decode(raw: bytes, path: Path) -> List[SubnetReservation]:
    try:
        return _reservations.validate_python(json.loads(raw.decode("utf-8")))
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
        raise MalformedRegistry(f"Registry {path} is not a valid reservation list: {exc}") from exc


def _encode(reservations: List[SubnetReservation]) -> bytes:
    data = [r.model_dump(by_alias=True) for r in reservations]
    return json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8")


class RangeStore:
    def __init__(self, path):
        self.path = Path(path)
        self._lock = _lock_for(self.path)

    def _read_raw(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise MalformedRegistry(f"Registry {self.path} cannot be read: {exc}") from exc

    def snapshot(self) -> RegistrySnapshot:
        raw = self._read_raw()
        if raw is None:
            return RegistrySnapshot([], None)
        return RegistrySnapshot(_decode(raw, self.path), _token(raw))

    def load(self) -> List[SubnetReservation]:
        return self.snapshot().reservations

    def commit(self, snapshot: RegistrySnapshot, reservations: List[SubnetReservation]) -> None:
        """Write reservations if the file is unchanged since snapshot was taken."""
        with self._lock:
            raw = self._read_raw()
            current = _token(raw) if raw is not None else None
            if current != snapshot.token:
                raise RegistryConflict(f"Registry {self.path} changed since it was read")
            self._write(reservations)

    def save(self, reservations: List[SubnetReservation]) -> None:
        with self._lock:
            self._write(reservations)

    def _write(self, reservations: List[SubnetReservation]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(_encode(reservations))
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise
        logger.debug("Registry %s written with %d reservations", self.path, len(reservations))


def load_ranges(path) -> List[SubnetReservation]:
    """Lenient read: a missing or broken registry counts as empty."""
    try:
        return RangeStore(path).load()
    except MalformedRegistry:
        logger.warning("Ignoring unreadable registry %s", path)
        return []


def save_ranges(path, reservations: List[SubnetReservation]) -> None:
    RangeStore(path).save(reservations)
