"""Console script entrypoint (`fleet`).

The commands themselves live in `agent_fleet.orchestrator.main`.
"""

from __future__ import annotations

from agent_fleet.orchestrator.main import main

__all__ = ["main"]


if __name__ == "__main__":
    raise SystemExit(main())
