"""Configuration for the fleet CLI.

Configuration is loaded from:
- environment variables
- and a local `.env` file (if present)

Nothing is required: every field has a default that matches a stock workspace.
"""

from __future__ import annotations

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Used when neither --priority nor the source issue provide one.
DEFAULT_PRIORITY = 2

DEFAULT_AGENT_COMMAND = "claude --dangerously-skip-permissions"


class FleetSettings(BaseSettings):
    """Settings for the fleet CLI.

    Environment variables:
    - LOG_LEVEL                  (optional)
    - FLEET_TRUNK_BRANCH         (optional)
    - FLEET_DEFAULT_PRIORITY     (optional)
    - FLEET_ISSUE_PREFIXES       (optional, comma-separated)
    - FLEET_INTEGRATION_PREFIX   (optional)
    - FLEET_BEADS_COMMAND        (optional)
    - FLEET_AGENT_COMMAND        (optional)
    - FLEET_MAYOR_SESSION        (optional)
    - FLEET_DEACON_SESSION       (optional)

    Notes:
        Pydantic-settings supports overriding the env file in tests via:
        `FleetSettings(_env_file=path_to_env)`.
    """

    log_level: str = Field(
        default="WARNING",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )

    trunk_branch: str = Field(
        default="main",
        validation_alias="FLEET_TRUNK_BRANCH",
        description="Default merge target when no integration branch applies",
    )

    default_priority: int = Field(
        default=DEFAULT_PRIORITY,
        ge=0,
        le=4,
        validation_alias="FLEET_DEFAULT_PRIORITY",
        description="Merge-request priority used when the source issue can't be read",
    )

    issue_prefixes: str = Field(
        default="",
        validation_alias="FLEET_ISSUE_PREFIXES",
        description=(
            "Comma-separated issue id prefixes recognised in branch names, e.g. 'gt,bd'. "
            "Empty means any short lowercase prefix, so hand-made branches such as "
            "'fix-typo' are read as issue ids."
        ),
    )

    integration_branch_prefix: str = Field(
        default="integration/",
        validation_alias="FLEET_INTEGRATION_PREFIX",
        description="Prefix of per-epic integration branches",
    )

    beads_command: str = Field(
        default="bd",
        validation_alias="FLEET_BEADS_COMMAND",
        description="Executable of the issue tracker CLI",
    )

    agent_command: str = Field(
        default=DEFAULT_AGENT_COMMAND,
        validation_alias="FLEET_AGENT_COMMAND",
        description="Command typed into a freshly created supervisory session",
    )

    mayor_session: str = Field(
        default="gt-mayor",
        validation_alias="FLEET_MAYOR_SESSION",
        description="tmux session name of the Mayor",
    )

    deacon_session: str = Field(
        default="gt-deacon",
        validation_alias="FLEET_DEACON_SESSION",
        description="tmux session name of the Deacon",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @model_validator(mode="after")
    def _check_names(self) -> FleetSettings:
        if not self.trunk_branch.strip():
            raise ValueError("FLEET_TRUNK_BRANCH must not be empty")
        if self.mayor_session.strip() == self.deacon_session.strip():
            raise ValueError("FLEET_MAYOR_SESSION and FLEET_DEACON_SESSION must differ")
        return self

    @property
    def issue_prefix_list(self) -> list[str]:
        """Configured issue prefixes, normalised and without blanks."""

        parts = [p.strip().lower() for p in self.issue_prefixes.split(",")]
        return [p for p in parts if p]
