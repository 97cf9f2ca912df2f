"""Command that runs one node of the print farm service."""

from __future__ import annotations

import argparse
import sys

from .api import LocalApplier, create_app
from .store import RaftStore

DEFAULT_PORT = 8080


def main(argv: list[str] | None = None) -> int:
    """Start the HTTP server for one node; returns the exit status."""
    parser = argparse.ArgumentParser(prog="printfarm-node", description=__doc__)
    parser.add_argument("--host", default="0.0.0.0", help="interface to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    store = RaftStore()
    app = create_app(LocalApplier(store), store)

    print(f"Node is running on port {args.port}")
    try:
        app.run(host=args.host, port=args.port)
    except OSError as exc:
        print(f"Server failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())