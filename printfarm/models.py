"""Domain records for printers, filament spools and print jobs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

_MISSING = object()

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _dumps(value: Any) -> bytes:
    """Encode *value* as compact JSON with HTML-sensitive characters escaped."""
    text = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text.encode("utf-8")


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, Enum) else value


def _lookup(data: dict, key: str) -> Any:
    """Find *key* in *data*, falling back to a case-insensitive match."""
    if key in data:
        return data[key]
    lowered = key.lower()
    for name, value in data.items():
        if isinstance(name, str) and name.lower() == lowered:
            return value
    return _MISSING


def _string_field(data: dict, key: str, owner: str) -> str:
    value = _lookup(data, key)
    if value is _MISSING or value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{owner}.{key}: expected a string, got {type(value).__name__}")
    return value


def _int_field(data: dict, key: str, owner: str) -> int:
    value = _lookup(data, key)
    if value is _MISSING or value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{owner}.{key}: expected an integer, got {value!r}")
    return value


def _object(data: Any, owner: str) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{owner}: expected a JSON object, got {type(data).__name__}")
    return data


def _coerce(enum_cls: type[Enum], value: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


class FilamentType(str, Enum):
    """Known filament materials."""

    PLA = "PLA"
    PETG = "PETG"
    ABS = "ABS"
    TPU = "TPU"


class PrintJobStatus(str, Enum):
    """Lifecycle states of a print job."""

    QUEUED = "Queued"
    RUNNING = "Running"
    DONE = "Done"
    CANCELLED = "Cancelled"


@dataclass
class Filament:
    """A spool of filament."""

    id: str = ""
    type: FilamentType | str = ""
    color: str = ""
    total_weight_in_grams: int = 0
    remaining_weight_in_grams: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": _plain(self.type),
            "color": self.color,
            "total_weight_in_grams": self.total_weight_in_grams,
            "remaining_weight_in_grams": self.remaining_weight_in_grams,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Filament:
        fields = _object(data, "Filament")
        return cls(
            id=_string_field(fields, "id", "Filament"),
            type=_coerce(FilamentType, _string_field(fields, "type", "Filament")),
            color=_string_field(fields, "color", "Filament"),
            total_weight_in_grams=_int_field(fields, "total_weight_in_grams", "Filament"),
            remaining_weight_in_grams=_int_field(
                fields, "remaining_weight_in_grams", "Filament"
            ),
        )

    def serialize(self) -> bytes:
        return _dumps(self.to_dict())


@dataclass
class Printer:
    """A 3D printer."""

    id: str = ""
    company: str = ""
    model: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "company": self.company, "model": self.model}

    @classmethod
    def from_dict(cls, data: Any) -> Printer:
        fields = _object(data, "Printer")
        return cls(
            id=_string_field(fields, "id", "Printer"),
            company=_string_field(fields, "company", "Printer"),
            model=_string_field(fields, "model", "Printer"),
        )

    def serialize(self) -> bytes:
        return _dumps(self.to_dict())


@dataclass
class PrintJob:
    """A job that prints a file on a printer with a given filament."""

    id: str = ""
    printer_id: str = ""
    filament_id: str = ""
    file_path: str = ""
    print_weight_in_grams: int = 0
    status: PrintJobStatus | str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "printer_id": self.printer_id,
            "filament_id": self.filament_id,
            "filepath": self.file_path,
            "print_weight_in_grams": self.print_weight_in_grams,
            "status": _plain(self.status),
        }

    @classmethod
    def from_dict(cls, data: Any) -> PrintJob:
        fields = _object(data, "PrintJob")
        return cls(
            id=_string_field(fields, "id", "PrintJob"),
            printer_id=_string_field(fields, "printer_id", "PrintJob"),
            filament_id=_string_field(fields, "filament_id", "PrintJob"),
            file_path=_string_field(fields, "filepath", "PrintJob"),
            print_weight_in_grams=_int_field(fields, "print_weight_in_grams", "PrintJob"),
            status=_coerce(PrintJobStatus, _string_field(fields, "status", "PrintJob")),
        )

    def serialize(self) -> bytes:
        return _dumps(self.to_dict())

    def is_valid_status_transition(self, new_status: PrintJobStatus | str) -> bool:
        """Tell whether the job may move from its current status to *new_status*."""
        if new_status == PrintJobStatus.RUNNING:
            return self.status == PrintJobStatus.QUEUED
        if new_status == PrintJobStatus.DONE:
            return self.status == PrintJobStatus.RUNNING
        if new_status == PrintJobStatus.CANCELLED:
            return self.status in (PrintJobStatus.QUEUED, PrintJobStatus.RUNNING)
        return False


def deserialize_filament(data: bytes | str) -> Filament:
    """Decode a filament from JSON; raises ValueError on malformed input."""
    return Filament.from_dict(json.loads(data))


def deserialize_printer(data: bytes | str) -> Printer:
    """Decode a printer from JSON; raises ValueError on malformed input."""
    return Printer.from_dict(json.loads(data))


def deserialize_print_job(data: bytes | str) -> PrintJob:
    """Decode a print job from JSON; raises ValueError on malformed input."""
    return PrintJob.from_dict(json.loads(data))