"""Replicated state machine holding printers, filaments and print jobs."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol, TypeVar

from .models import (
    Filament,
    Printer,
    PrintJob,
    _dumps,
    deserialize_filament,
    deserialize_print_job,
    deserialize_printer,
)

logger = logging.getLogger(__name__)

ADD_PRINTER = "ADD_PRINTER"
ADD_FILAMENT = "ADD_FILAMENT"
ADD_PRINT_JOB = "ADD_PRINT_JOB"
# Accepted on the log but not acted on by the state machine.
UPDATE_PRINT_JOB = "UPDATE_PRINT_JOB"

_T = TypeVar("_T")


@dataclass
class Command:
    """A log entry: a command type and its raw JSON payload."""

    type: str = ""
    payload: bytes | None = None

    def to_json(self) -> bytes:
        payload = None if self.payload is None else json.loads(self.payload)
        return _dumps({"type": self.type, "payload": payload})

    @classmethod
    def from_json(cls, data: bytes | str) -> Command:
        document = json.loads(data)
        if document is None:
            return cls()
        if not isinstance(document, dict):
            raise ValueError("command must be a JSON object")
        kind = document.get("type")
        if kind is None:
            kind = ""
        if not isinstance(kind, str):
            raise ValueError("command type must be a string")
        payload = None
        if "payload" in document:
            payload = json.dumps(document["payload"], separators=(",", ":")).encode("utf-8")
        return cls(type=kind, payload=payload)


class SnapshotSink(Protocol):
    def write(self, data: bytes) -> Any: ...
    def close(self) -> Any: ...
    def cancel(self) -> Any: ...


@dataclass
class StoreSnapshot:
    """A point-in-time encoding of the store's state."""

    data: bytes
    released: bool = field(default=False, init=False, compare=False)

    def persist(self, sink: SnapshotSink) -> None:
        """Write the snapshot to *sink*, cancelling it if the write fails."""
        if self.released:
            raise RuntimeError("snapshot has been released")
        try:
            sink.write(self.data)
        except Exception:
            sink.cancel()
            raise
        sink.close()

    def release(self) -> None:
        """Mark the snapshot as released; it can no longer be persisted."""
        self.released = True


class RaftStore:
    """Thread-safe state machine fed by committed log entries."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._printers: dict[str, Printer] = {}
        self._filaments: dict[str, Filament] = {}
        self._print_jobs: dict[str, PrintJob] = {}

    def apply(self, data: bytes | str) -> None:
        """Apply one log entry; malformed entries are logged and skipped."""
        try:
            command = Command.from_json(data)
        except ValueError as exc:
            logger.warning("Failed to unmarshal command: %s", exc)
            return None

        handlers: dict[str, tuple[Callable[[bytes], Any], dict, str]] = {
            ADD_PRINTER: (deserialize_printer, self._printers, "printer"),
            ADD_FILAMENT: (deserialize_filament, self._filaments, "filament"),
            ADD_PRINT_JOB: (deserialize_print_job, self._print_jobs, "print job"),
        }
        with self._lock:
            entry = handlers.get(command.type)
            if entry is None:
                return None
            decode, table, label = entry
            if command.payload is None:
                logger.warning("Failed to unmarshal %s: empty payload", label)
                return None
            try:
                record = decode(command.payload)
            except ValueError as exc:
                logger.warning("Failed to unmarshal %s: %s", label, exc)
                return None
            table[record.id] = record
        return None

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            document = {
                "printers": _encode_table(self._printers),
                "filaments": _encode_table(self._filaments),
                "print_jobs": _encode_table(self._print_jobs),
            }
        return StoreSnapshot(_dumps(document))

    def restore(self, stream: Any) -> None:
        """Replace the state with the snapshot read from *stream*."""
        raw = stream.read()
        if isinstance(raw, (bytes, bytearray)):
            raw = bytes(raw).decode("utf-8")
        text = raw.lstrip()
        if not text:
            raise ValueError("snapshot is empty")
        document, _ = json.JSONDecoder().raw_decode(text)
        if document is None:
            document = {}
        if not isinstance(document, dict):
            raise ValueError("snapshot must be a JSON object")

        printers = _decode_table(document.get("printers"), Printer.from_dict)
        filaments = _decode_table(document.get("filaments"), Filament.from_dict)
        print_jobs = _decode_table(document.get("print_jobs"), PrintJob.from_dict)

        with self._lock:
            self._printers = printers
            self._filaments = filaments
            self._print_jobs = print_jobs

    def printers(self) -> list[Printer]:
        with self._lock:
            return list(self._printers.values())

    def filaments(self) -> list[Filament]:
        with self._lock:
            return list(self._filaments.values())

    def print_jobs(self) -> list[PrintJob]:
        with self._lock:
            return list(self._print_jobs.values())


def _encode_table(table: dict[str, Any]) -> dict[str, Any]:
    return {key: table[key].to_dict() for key in sorted(table)}


def _decode_table(section: Any, decode: Callable[[Any], _T]) -> dict[str, _T]:
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError("snapshot section must be a JSON object")
    return {key: decode(value) for key, value in section.items() if value is not None}