# printfarm

A small HTTP service for keeping track of a 3D-printing farm: the printers,
the filament spools, and the print jobs queued on them.

Every change is encoded as a `printfarm.store.Command` (a type and a JSON
payload) and handed to an applier, which feeds it into a state machine,
`printfarm.store.RaftStore`. The store holds the current state, can take a
JSON snapshot of it (`RaftStore.snapshot()`, giving a `StoreSnapshot`) and
can restore from one (`RaftStore.restore(stream)`).

## Installing

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Running a node

```
printfarm-node
```

Options:

- `--host` – interface to listen on (default `0.0.0.0`)
- `--port` – port to listen on (default `8080`)

The node builds an empty `RaftStore`, wraps it in a `LocalApplier`, and
serves the API with Flask's built-in server.

## API

All endpoints live under `/api/v1` and speak JSON.

| Method | Path                          | Purpose                          |
|--------|-------------------------------|----------------------------------|
| POST   | `/printers`                   | register a printer               |
| GET    | `/printers`                   | list printers                    |
| POST   | `/filaments`                  | register a filament spool        |
| GET    | `/filaments`                  | list filament spools             |
| POST   | `/print_jobs`                 | queue a print job                |
| GET    | `/print_jobs`                 | list print jobs                  |
| POST   | `/print_jobs/<job_id>/status` | submit a status change for a job |

A record posted without an `id` is given a fresh UUID. A filament posted
with `remaining_weight_in_grams` missing or zero starts with its full
`total_weight_in_grams`. A new print job always starts as `Queued`,
whatever status was posted. Successful creations answer `201` with the
stored record; a body that is not valid JSON or has fields of the wrong
type answers `400` with `{"error": ...}`; a command the applier cannot
commit answers `500`.

The list endpoints return a JSON array, or `null` when there is nothing to
list.

Example records:

```json
{"company": "Acme", "model": "Mk4"}
{"type": "PLA", "color": "red", "total_weight_in_grams": 1000}
{"printer_id": "...", "filament_id": "...", "filepath": "/prints/part.gcode", "print_weight_in_grams": 42}
```

A status change is posted as `{"status": "Running"}`.

Filament types (`FilamentType`) are `PLA`, `PETG`, `ABS` and `TPU`. Job
statuses (`PrintJobStatus`) are `Queued`, `Running`, `Done` and
`Cancelled`; `PrintJob.is_valid_status_transition` allows Queued → Running,
Running → Done, and Queued or Running → Cancelled.

## Using it as a library

```python
from printfarm.api import LocalApplier, create_app
from printfarm.store import RaftStore

store = RaftStore()
app = create_app(LocalApplier(store), store)
```

`create_app` returns a Flask application with the routes above;
`initialize_routes(app, applier, store)` adds them to an application you
already have. Any object with an `apply(data, timeout)` method that raises
`printfarm.api.ApplyError` on failure can stand in for `LocalApplier`.

The records in `printfarm.models` (`Printer`, `Filament`, `PrintJob`) have
`to_dict`, `from_dict` and `serialize`; `deserialize_printer`,
`deserialize_filament` and `deserialize_print_job` decode them from JSON.

## What it does not do

- There is no replication or consensus between nodes. `LocalApplier`
  applies each command directly to one in-process store; several nodes run
  side by side do not share state.
- State lives in memory only. Nothing is written to disk unless you
  persist a `StoreSnapshot` yourself through a sink with `write`, `close`
  and `cancel`.
- The status endpoint submits an `UPDATE_PRINT_JOB` command, but the store
  does not act on it: a job's stored status stays as it was.