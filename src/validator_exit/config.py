"""
Configuration for the validator exit tool.

Values resolve in this order, later sources winning:

1. Built-in defaults
2. Environment variables (``VALIDATOR_EXIT_*``)
3. A YAML config file passed with ``--config``
4. Command line flags

The resolved value is immutable and passed explicitly to the session.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

import yaml
from pydantic import Field

from validator_exit.subsystems.beacon.client import DEFAULT_TIMEOUT
from validator_exit.subsystems.exit.broadcast import DEFAULT_BROADCAST_TIMEOUT, DEFAULT_IMAGE
from validator_exit.subsystems.exit.orchestrator import DEFAULT_EXIT_DELAY
from validator_exit.types import StrictBaseModel

DEFAULT_BEACON_URL: Final = "http://localhost:5052"
DEFAULT_KEYSTORE_DIR: Final = Path("./managed-keystores")
DEFAULT_CONSENSUS_DIR: Final = Path("../config/metadata")

ENV_PREFIX: Final = "VALIDATOR_EXIT_"
"""Prefix of environment variables that override defaults."""

_ENV_FIELDS: Final[dict[str, str]] = {
    "BEACON_URL": "beacon_url",
    "KEYSTORE_DIR": "keystore_dir",
    "CONSENSUS_DIR": "consensus_dir",
    "IMAGE": "lighthouse_image",
}
"""Environment variable suffix to config field."""


class ExitToolConfig(StrictBaseModel):
    """Settings for one run of the exit tool."""

    beacon_url: str = DEFAULT_BEACON_URL
    """Beacon node API endpoint. Offered as the default at the prompt."""

    keystore_dir: Path = DEFAULT_KEYSTORE_DIR
    """Keystore root with validators/ and secrets/. Offered at the prompt."""

    consensus_dir: Path = DEFAULT_CONSENSUS_DIR
    """Network definition directory passed to the signer."""

    lighthouse_image: str = DEFAULT_IMAGE
    """Container image providing the lighthouse binary."""

    request_timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    """Timeout in seconds for each beacon API request."""

    broadcast_timeout: float = Field(default=DEFAULT_BROADCAST_TIMEOUT, gt=0)
    """Timeout in seconds for one exit broadcast."""

    exit_delay_seconds: float = Field(default=DEFAULT_EXIT_DELAY, ge=0)
    """Pause between two exit broadcasts."""

    confirmation_phrase: str = Field(default="yes", min_length=1)
    """Exact text the operator must type to proceed."""

    currency_symbol: str = "LAB"
    """Ticker shown next to balances."""

    explorer_url: str | None = "https://explorer.labchain.la"
    """Block explorer mentioned in the post-exit instructions."""

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ, **overrides: Any) -> ExitToolConfig:
        """
        Build a config from defaults and ``VALIDATOR_EXIT_*`` variables.

        Args:
            environ: Environment mapping to read.
            overrides: Field values that take precedence over the environment.
        """
        values: dict[str, Any] = {}
        for suffix, field_name in _ENV_FIELDS.items():
            value = environ.get(f"{ENV_PREFIX}{suffix}")
            if value:
                values[field_name] = value
        return cls.model_validate(values | overrides)

    @classmethod
    def from_yaml_file(
        cls,
        path: Path | str,
        environ: Mapping[str, str] = os.environ,
        **overrides: Any,
    ) -> ExitToolConfig:
        """
        Load settings from a YAML file on top of the environment.

        Keys are field names, e.g. ``beacon_url: http://node:5052``.

        Raises:
            FileNotFoundError: If the file does not exist.
            yaml.YAMLError: If the file is not valid YAML.
            pydantic.ValidationError: If the data fails validation.
        """
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return cls.from_env(environ, **(data | overrides))
