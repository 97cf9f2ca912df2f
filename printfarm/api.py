"""HTTP interface for printers, filaments and print jobs."""

from __future__ import annotations

import json
import threading
import uuid
from typing import Any, Protocol

from flask import Flask, jsonify, request

from .models import Filament, Printer, PrintJob, PrintJobStatus, _dumps
from .store import (
    ADD_FILAMENT,
    ADD_PRINT_JOB,
    ADD_PRINTER,
    UPDATE_PRINT_JOB,
    Command,
    RaftStore,
)

RAFT_APPLY_TIMEOUT = 5.0
API_PREFIX = "/api/v1"


class ApplyError(Exception):
    """Raised when a command cannot be committed to the log."""


class Applier(Protocol):
    def apply(self, data: bytes, timeout: float) -> Any: ...


class LocalApplier:
    """Commits commands straight to a single in-process store."""

    def __init__(self, store: RaftStore) -> None:
        self._store = store
        self._lock = threading.Lock()

    def apply(self, data: bytes, timeout: float) -> Any:
        """Apply *data* to the store, waiting at most *timeout* seconds to enqueue it."""
        wait = timeout if timeout and timeout > 0 else -1
        if not self._lock.acquire(timeout=wait):
            raise ApplyError("timed out enqueuing operation")
        try:
            return self._store.apply(data)
        except Exception as exc:
            raise ApplyError(str(exc)) from exc
        finally:
            self._lock.release()


def generate_unique_id() -> str:
    """Return a fresh random identifier."""
    return str(uuid.uuid4())


def _bind_json() -> Any:
    """Decode the first JSON value of the request body; raises ValueError."""
    text = request.get_data().decode("utf-8").lstrip()
    if not text:
        raise ValueError("EOF")
    document, _ = json.JSONDecoder().raw_decode(text)
    return document


def _error(message: str, status: int):
    return jsonify({"error": message}), status


def _listing(records: list) -> Any:
    # An empty collection is reported as null, not as an empty array.
    return jsonify([record.to_dict() for record in records] if records else None)


class Handlers:
    """Request handlers that turn API calls into replicated commands."""

    def __init__(self, raft_server: Applier, store: RaftStore) -> None:
        self.raft_server = raft_server
        self.store = store

    def _submit(self, kind: str, payload: bytes):
        data = Command(type=kind, payload=payload).to_json()
        try:
            self.raft_server.apply(data, RAFT_APPLY_TIMEOUT)
        except ApplyError as exc:
            return _error(str(exc), 500)
        return None

    def create_printer(self):
        try:
            printer = Printer.from_dict(_bind_json())
        except ValueError as exc:
            return _error(str(exc), 400)
        if not printer.id:
            printer.id = generate_unique_id()
        failure = self._submit(ADD_PRINTER, printer.serialize())
        if failure is not None:
            return failure
        return jsonify(printer.to_dict()), 201

    def get_printers(self):
        return _listing(self.store.printers()), 200

    def create_filament(self):
        try:
            filament = Filament.from_dict(_bind_json())
        except ValueError as exc:
            return _error(str(exc), 400)
        if not filament.id:
            filament.id = generate_unique_id()
        if filament.remaining_weight_in_grams == 0:
            filament.remaining_weight_in_grams = filament.total_weight_in_grams
        failure = self._submit(ADD_FILAMENT, filament.serialize())
        if failure is not None:
            return failure
        return jsonify(filament.to_dict()), 201

    def get_filaments(self):
        return _listing(self.store.filaments()), 200

    def create_print_job(self):
        try:
            job = PrintJob.from_dict(_bind_json())
        except ValueError as exc:
            return _error(str(exc), 400)
        job.status = PrintJobStatus.QUEUED
        if not job.id:
            job.id = generate_unique_id()
        failure = self._submit(ADD_PRINT_JOB, job.serialize())
        if failure is not None:
            return failure
        return jsonify(job.to_dict()), 201

    def get_print_jobs(self):
        return _listing(self.store.print_jobs()), 200

    def update_print_job_status(self, job_id: str):
        try:
            body = _bind_json()
        except ValueError as exc:
            return _error(str(exc), 400)
        if body is None:
            body = {}
        if not isinstance(body, dict):
            return _error("request body must be a JSON object", 400)
        status = body.get("status")
        if status is None:
            status = ""
        if not isinstance(status, str):
            return _error("status must be a string", 400)
        failure = self._submit(UPDATE_PRINT_JOB, _dumps({"id": job_id, "status": status}))
        if failure is not None:
            return failure
        return jsonify({"message": "Print job status updated successfully"}), 200


def initialize_routes(app: Flask, raft_server: Applier, store: RaftStore) -> Handlers:
    """Register the API endpoints on *app*."""
    handlers = Handlers(raft_server, store)
    routes = [
        ("/printers", "create_printer", handlers.create_printer, "POST"),
        ("/printers", "get_printers", handlers.get_printers, "GET"),
        ("/filaments", "create_filament", handlers.create_filament, "POST"),
        ("/filaments", "get_filaments", handlers.get_filaments, "GET"),
        ("/print_jobs", "create_print_job", handlers.create_print_job, "POST"),
        ("/print_jobs", "get_print_jobs", handlers.get_print_jobs, "GET"),
        (
            "/print_jobs/<job_id>/status",
            "update_print_job_status",
            handlers.update_print_job_status,
            "POST",
        ),
    ]
    for path, endpoint, view, method in routes:
        app.add_url_rule(API_PREFIX + path, endpoint=endpoint, view_func=view, methods=[method])
    return handlers


def create_app(raft_server: Applier, store: RaftStore) -> Flask:
    """Build a Flask application serving the API."""
    app = Flask(__name__)
    initialize_routes(app, raft_server, store)
    return app