from unittest.mock import patch

from flask import Flask

from printfarm.node import main


def test_main_serves_on_default_port(capsys):
    with patch.object(Flask, "run", autospec=True) as run:
        assert main([]) == 0
    app = run.call_args.args[0]
    assert run.call_args.kwargs["port"] == 8080
    assert "Node is running on port 8080" in capsys.readouterr().out
    client = app.test_client()
    created = client.post("/api/v1/printers", json={"id": "n1", "model": "M"})
    assert created.status_code == 201
    assert client.get("/api/v1/printers").get_json()[0]["id"] == "n1"


def test_main_accepts_port_option(capsys):
    with patch.object(Flask, "run", autospec=True) as run:
        assert main(["--port", "9090", "--host", "127.0.0.1"]) == 0
    assert run.call_args.kwargs == {"host": "127.0.0.1", "port": 9090}
    assert "9090" in capsys.readouterr().out


def test_main_reports_server_failure(capsys):
    with patch.object(Flask, "run", autospec=True, side_effect=OSError("address in use")):
        assert main([]) == 1
    assert "Server failed: address in use" in capsys.readouterr().err