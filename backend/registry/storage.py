"""Durable key-value ledger, encrypted snapshots and the audit trail."""
from __future__ import annotations

import copy
import json
import os
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from hashlib import sha256
from pathlib import Path
from typing import Any, Callable, Iterator, Optional

from cryptography.fernet import Fernet, InvalidToken

from . import schemas
from .errors import StorageError


LEDGER_KEY_NAME = "ledger"


def _ensure_directory(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def stable_hash(*components: str) -> str:
    """Create a stable, reproducible hash for audit payloads."""

    payload = "|".join(components)
    return sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class AuditLogger:
    """Append-only audit trail with hash chaining.

    With ``audit_path`` set, events go to a JSON-lines file and only the last
    chained hash stays in memory. Without it, events are kept in ``events``.
    """

    audit_path: Optional[Path] = None
    events: list[schemas.AuditEvent] = field(default_factory=list)
    _last_hash: Optional[str] = field(default=None, init=False, repr=False)

    def _read_last_hash(self) -> str:
        if self.audit_path is None or not self.audit_path.exists():
            return ""
        with self.audit_path.open("rb") as handle:
            *_, last_line = handle.read().splitlines() or [b""]
        if not last_line:
            return ""
        return json.loads(last_line.decode("utf-8")).get("payload_hash", "")

    def append(self, event: schemas.AuditEvent) -> schemas.AuditEvent:
        try:
            if self._last_hash is None:
                self._last_hash = self._read_last_hash()
            chained_hash = sha256(
                f"{event.payload_hash}{self._last_hash}".encode("utf-8")
            ).hexdigest()
            chained = event.model_copy(update={"payload_hash": chained_hash})
            if self.audit_path is not None:
                _ensure_directory(self.audit_path.parent)
                with self.audit_path.open("ab") as handle:
                    handle.write(chained.model_dump_json().encode("utf-8"))
                    handle.write(b"\n")
        except OSError as error:
            raise StorageError(f"Cannot write audit log {self.audit_path}") from error
        if self.audit_path is None:
            self.events.append(chained)
        self._last_hash = chained_hash
        return chained


class Keyring:
    """Manages named encryption keys in a JSON file."""

    def __init__(self, key_path: Path) -> None:
        self.key_path = key_path
        _ensure_directory(self.key_path.parent)
        if not self.key_path.exists():
            self.key_path.write_text(json.dumps({}))

    def _load(self) -> dict:
        return json.loads(self.key_path.read_text())

    def _persist(self, keys: dict) -> None:
        self.key_path.write_text(json.dumps(keys))

    def get_key(self, name: str) -> bytes:
        keys = self._load()
        key = keys.get(name)
        if key is None:
            key = Fernet.generate_key().decode("utf-8")
            keys[name] = key
            self._persist(keys)
        return key.encode("utf-8")


@dataclass
class EncryptedSnapshot:
    """Fernet-encrypted JSON image of the whole ledger state."""

    path: Path
    key_provider: Callable[[str], bytes]

    def load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        fernet = Fernet(self.key_provider(LEDGER_KEY_NAME))
        try:
            decrypted = fernet.decrypt(self.path.read_bytes())
        except InvalidToken as error:
            raise StorageError(f"Cannot decrypt ledger snapshot {self.path}") from error
        return json.loads(decrypted.decode("utf-8"))

    def store(self, state: dict[str, Any]) -> None:
        _ensure_directory(self.path.parent)
        fernet = Fernet(self.key_provider(LEDGER_KEY_NAME))
        payload = json.dumps(state, sort_keys=True).encode("utf-8")
        staging = self.path.with_name(f"{self.path.name}.tmp")
        try:
            staging.write_bytes(fernet.encrypt(payload))
            os.replace(staging, self.path)
        except OSError as error:
            raise StorageError(f"Cannot write ledger snapshot {self.path}") from error


class Transaction:
    """Staged view over the committed state.

    Reads observe the snapshot taken when the transaction opened plus the
    transaction's own writes. Nothing is visible to other transactions until
    the store commits.
    """

    def __init__(self, base: dict[str, Any]) -> None:
        self._base = base
        self.writes: dict[str, Any] = {}
        self.audit_events: list[schemas.AuditEvent] = []

    def __contains__(self, key: str) -> bool:
        return key in self.writes or key in self._base

    def get(self, key: str, default: Any = None) -> Any:
        if key in self.writes:
            return copy.deepcopy(self.writes[key])
        if key in self._base:
            return copy.deepcopy(self._base[key])
        return default

    def put(self, key: str, value: Any) -> None:
        self.writes[key] = copy.deepcopy(value)

    def record(self, event: schemas.AuditEvent) -> None:
        """Stage an audit event; it is written only if the transaction commits."""
        self.audit_events.append(event)


class LedgerStore:
    """Key-value store that commits one operation at a time, all or nothing."""

    def __init__(self, snapshot: Optional[EncryptedSnapshot] = None) -> None:
        self._snapshot = snapshot
        self._lock = threading.Lock()
        self._state: dict[str, Any] = snapshot.load() if snapshot else {}

    @contextmanager
    def transaction(
        self, audit_logger: Optional[AuditLogger] = None
    ) -> Iterator[Transaction]:
        with self._lock:
            tx = Transaction(self._state)
            yield tx
            # Audit before the swap: a failed audit write aborts the operation.
            if audit_logger is not None:
                for event in tx.audit_events:
                    audit_logger.append(event)
            if not tx.writes:
                return
            committed = {**self._state, **tx.writes}
            if self._snapshot is not None:
                self._snapshot.store(committed)
            self._state = committed

    def export(self) -> dict[str, Any]:
        """Deep copy of the committed state."""
        with self._lock:
            return copy.deepcopy(self._state)
