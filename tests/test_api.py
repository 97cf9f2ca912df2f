import json
import uuid

import pytest

from printfarm.api import (
    ApplyError,
    LocalApplier,
    create_app,
    generate_unique_id,
)
from printfarm.store import UPDATE_PRINT_JOB, Command, RaftStore


class RecordingApplier:
    def __init__(self):
        self.calls = []

    def apply(self, data, timeout):
        self.calls.append((data, timeout))


class FailingApplier:
    def apply(self, data, timeout):
        raise ApplyError("not leader")


@pytest.fixture
def store():
    return RaftStore()


@pytest.fixture
def client(store):
    app = create_app(LocalApplier(store), store)
    return app.test_client()


def test_create_printer_keeps_given_id(client, store):
    body = {"id": "p1", "company": "Acme", "model": "X1"}
    response = client.post("/api/v1/printers", json=body)
    assert response.status_code == 201
    assert response.get_json() == body
    assert [p.to_dict() for p in store.printers()] == [body]


def test_create_printer_generates_id(client):
    response = client.post("/api/v1/printers", json={"company": "Acme"})
    assert response.status_code == 201
    assert uuid.UUID(response.get_json()["id"]).version == 4


def test_create_printer_rejects_malformed_json(client):
    response = client.post("/api/v1/printers", data="{not json", content_type="application/json")
    assert response.status_code == 400
    assert "error" in response.get_json()


def test_create_printer_rejects_empty_body(client):
    response = client.post("/api/v1/printers", data="", content_type="application/json")
    assert response.status_code == 400


def test_create_printer_rejects_wrong_field_type(client, store):
    response = client.post("/api/v1/printers", json={"company": 5})
    assert response.status_code == 400
    assert store.printers() == []


def test_empty_listings_are_null(client):
    for path in ("/api/v1/printers", "/api/v1/filaments", "/api/v1/print_jobs"):
        response = client.get(path)
        assert response.status_code == 200
        assert response.get_json() is None


def test_get_printers_lists_created(client):
    client.post("/api/v1/printers", json={"id": "a", "company": "C", "model": "M"})
    response = client.get("/api/v1/printers")
    assert response.get_json() == [{"id": "a", "company": "C", "model": "M"}]


def test_filament_remaining_defaults_to_total(client):
    response = client.post(
        "/api/v1/filaments", json={"type": "PLA", "color": "red", "total_weight_in_grams": 1000}
    )
    assert response.status_code == 201
    body = response.get_json()
    assert body["remaining_weight_in_grams"] == body["total_weight_in_grams"]


def test_filament_remaining_kept_when_given(client, store):
    client.post(
        "/api/v1/filaments",
        json={"id": "f1", "total_weight_in_grams": 1000, "remaining_weight_in_grams": 250},
    )
    [filament] = store.filaments()
    assert filament.remaining_weight_in_grams == 250
    assert client.get("/api/v1/filaments").get_json()[0]["id"] == "f1"


def test_print_job_status_forced_to_queued(client, store):
    response = client.post(
        "/api/v1/print_jobs",
        json={"id": "j1", "printer_id": "p1", "filament_id": "f1", "filepath": "a.gcode",
              "print_weight_in_grams": 20, "status": "Done"},
    )
    assert response.status_code == 201
    assert response.get_json()["status"] == "Queued"
    [job] = store.print_jobs()
    assert job.status == "Queued"
    assert job.file_path == "a.gcode"
    assert client.get("/api/v1/print_jobs").get_json()[0]["id"] == "j1"


def test_update_status_submits_command(store):
    applier = RecordingApplier()
    client = create_app(applier, store).test_client()
    response = client.post("/api/v1/print_jobs/job-7/status", json={"status": "Running"})
    assert response.status_code == 200
    assert response.get_json() == {"message": "Print job status updated successfully"}
    [(data, timeout)] = applier.calls
    assert timeout == 5
    command = Command.from_json(data)
    assert command.type == UPDATE_PRINT_JOB
    assert json.loads(command.payload) == {"id": "job-7", "status": "Running"}


def test_update_status_payload_stays_valid_json(store):
    applier = RecordingApplier()
    client = create_app(applier, store).test_client()
    client.post('/api/v1/print_jobs/a"b/status', json={"status": 'x"y'})
    command = Command.from_json(applier.calls[0][0])
    assert json.loads(command.payload) == {"id": 'a"b', "status": 'x"y'}


def test_update_status_rejects_non_string(client):
    response = client.post("/api/v1/print_jobs/j/status", json={"status": 3})
    assert response.status_code == 400


def test_apply_failure_is_server_error(store):
    client = create_app(FailingApplier(), store).test_client()
    response = client.post("/api/v1/printers", json={"id": "p"})
    assert response.status_code == 500
    assert response.get_json() == {"error": "not leader"}
    assert store.printers() == []


def test_local_applier_applies_to_store(store):
    applier = LocalApplier(store)
    data = Command(type="ADD_PRINTER", payload=b'{"id":"z","company":"Q"}').to_json()
    applier.apply(data, 5.0)
    assert [p.company for p in store.printers()] == ["Q"]


def test_local_applier_wraps_errors(store):
    with pytest.raises(ApplyError):
        LocalApplier(store).apply(12345, 5.0)


def test_generate_unique_id_is_unique_uuid():
    ids = {generate_unique_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(str(uuid.UUID(value)) == value for value in ids)