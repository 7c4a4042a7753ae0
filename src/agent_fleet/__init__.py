"""Agent fleet.

Local tooling for a fleet of coding agents:
- idempotent, ordered bring-up of the supervisory tmux sessions
- submission of worker branches to the beads-backed merge queue
"""

__version__ = "0.1.0"

from agent_fleet.orchestrator.config import FleetSettings

__all__ = ["__version__", "FleetSettings"]
