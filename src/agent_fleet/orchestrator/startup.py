"""Bring up the supervisory sessions.

The Mayor (global coordinator) starts first, then the Deacon (health monitor).
The Deacon's first health check expects to find the Mayor already up, so the
order is fixed and steps never overlap.

Each step walks an explicit per-session state machine:

    not_checked -> running                      (already up, nothing to do)
    not_checked -> absent -> starting -> started
                                      -> failed (abort; later steps are skipped)

Running `start()` again once everything is up performs no starts at all.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from agent_fleet.orchestrator.config import FleetSettings
from agent_fleet.orchestrator.errors import StartupError
from agent_fleet.orchestrator.sessions.tmux import LaunchSpec

logger = logging.getLogger(__name__)

MAYOR = "Mayor"
DEACON = "Deacon"


class SessionState(str, Enum):
    NOT_CHECKED = "not_checked"
    RUNNING = "running"
    ABSENT = "absent"
    STARTING = "starting"
    STARTED = "started"
    FAILED = "failed"


ALLOWED_TRANSITIONS: dict[SessionState, set[SessionState]] = {
    SessionState.NOT_CHECKED: {SessionState.RUNNING, SessionState.ABSENT},
    SessionState.ABSENT: {SessionState.STARTING},
    SessionState.STARTING: {SessionState.STARTED, SessionState.FAILED},
    SessionState.RUNNING: set(),
    SessionState.STARTED: set(),
    SessionState.FAILED: set(),
}

UP_STATES = frozenset({SessionState.RUNNING, SessionState.STARTED})


class IllegalTransitionError(ValueError):
    pass


class SessionHost(Protocol):
    def has_session(self, name: str) -> bool: ...

    def start_session(self, spec: LaunchSpec) -> None: ...


@dataclass(frozen=True, slots=True)
class StartupStep:
    """One session to bring up, in order."""

    label: str
    launch: LaunchSpec

    @property
    def session(self) -> str:
        return self.launch.session


@dataclass(frozen=True, slots=True)
class SessionOutcome:
    label: str
    session: str
    state: SessionState

    @property
    def is_up(self) -> bool:
        return self.state in UP_STATES


@dataclass(frozen=True, slots=True)
class StartupReport:
    outcomes: tuple[SessionOutcome, ...]

    @property
    def all_up(self) -> bool:
        return bool(self.outcomes) and all(o.is_up for o in self.outcomes)

    @property
    def started(self) -> list[str]:
        return [o.session for o in self.outcomes if o.state == SessionState.STARTED]

    def to_json(self) -> dict[str, object]:
        return {
            "all_up": self.all_up,
            "sessions": [
                {"label": o.label, "session": o.session, "state": o.state.value}
                for o in self.outcomes
            ],
        }


def transition(current: SessionState, to: SessionState) -> SessionState:
    allowed = ALLOWED_TRANSITIONS.get(current, set())
    if to not in allowed:
        raise IllegalTransitionError(f"Illegal transition: {current.value} -> {to.value}")
    return to


def default_steps(settings: FleetSettings, town_root: Path) -> list[StartupStep]:
    """Mayor then Deacon, each in its own directory under the town root."""

    def _step(label: str, session: str, home: str) -> StartupStep:
        return StartupStep(
            label=label,
            launch=LaunchSpec(
                session=session,
                working_dir=town_root / home,
                command=settings.agent_command,
                env={"GT_ROLE": home, "GT_TOWN_ROOT": str(town_root)},
            ),
        )

    return [
        _step(MAYOR, settings.mayor_session, "mayor"),
        _step(DEACON, settings.deacon_session, "deacon"),
    ]


class StartupOrchestrator:
    """Runs startup steps strictly in order, skipping sessions that are up."""

    def __init__(
        self,
        host: SessionHost,
        steps: Sequence[StartupStep],
        *,
        on_event: Callable[[SessionOutcome], None] | None = None,
    ) -> None:
        self._host = host
        self._steps = list(steps)
        self._on_event = on_event

    def _emit(self, step: StartupStep, state: SessionState) -> SessionOutcome:
        outcome = SessionOutcome(label=step.label, session=step.session, state=state)
        if self._on_event is not None:
            self._on_event(outcome)
        return outcome

    def _check(self, step: StartupStep) -> SessionState:
        try:
            running = self._host.has_session(step.session)
        except Exception as e:  # noqa: BLE001 - unknown counts as absent
            logger.warning(
                "Session query failed; assuming absent",
                extra={"session": step.session, "error": str(e)},
            )
            running = False
        return transition(
            SessionState.NOT_CHECKED,
            SessionState.RUNNING if running else SessionState.ABSENT,
        )

    def _bring_up(self, step: StartupStep) -> SessionOutcome:
        state = self._check(step)
        if state == SessionState.RUNNING:
            logger.info("Session already running", extra={"session": step.session})
            return self._emit(step, state)

        state = transition(state, SessionState.STARTING)
        self._emit(step, state)
        try:
            self._host.start_session(step.launch)
        except Exception as e:
            transition(state, SessionState.FAILED)
            self._emit(step, SessionState.FAILED)
            logger.error(
                "Session failed to start",
                extra={"session": step.session, "error": str(e)},
            )
            raise StartupError(session=step.label, cause=e) from e

        return self._emit(step, transition(state, SessionState.STARTED))

    def start(self) -> StartupReport:
        """Bring every step's session up.

        Raises:
            StartupError: on the first session that fails to start; sessions
                after it are not attempted.
        """

        outcomes = [self._bring_up(step) for step in self._steps]
        return StartupReport(outcomes=tuple(outcomes))

    def probe(self) -> StartupReport:
        """Report which sessions are up without starting anything."""

        outcomes = [
            SessionOutcome(label=step.label, session=step.session, state=self._check(step))
            for step in self._steps
        ]
        return StartupReport(outcomes=tuple(outcomes))
