"""Configuration for the sequence table."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from typing import Any

from sequencer.errors import ConfigurationError

ENV_PREFIX = "SEQUENCER_"


@dataclass
class SequencerConfig:
    """Configuration for a sequence table and its DynamoDB client."""

    table_name: str = "sequencer"
    read_units: int = 10
    write_units: int = 5
    region: str | None = None
    endpoint_url: str | None = None
    request_timeout_s: float = 10.0
    activation_timeout_s: float = 120.0
    poll_interval_s: float = 1.0
    batch_delete_size: int = 25
    max_attempts: int | None = None
    backoff_base_s: float = 0.01
    backoff_max_s: float = 1.0

    def __post_init__(self) -> None:
        if not self.table_name:
            raise ConfigurationError("table_name must not be empty")
        if self.read_units < 1 or self.write_units < 1:
            raise ConfigurationError("read_units and write_units must be >= 1")
        if not 1 <= self.batch_delete_size <= 25:
            raise ConfigurationError("batch_delete_size must be between 1 and 25")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ConfigurationError("max_attempts must be >= 1 when set")
        if self.activation_timeout_s <= 0 or self.poll_interval_s <= 0:
            raise ConfigurationError("activation_timeout_s and poll_interval_s must be > 0")
        if self.backoff_base_s < 0 or self.backoff_max_s < self.backoff_base_s:
            raise ConfigurationError("backoff_max_s must be >= backoff_base_s >= 0")

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None, **overrides: Any) -> SequencerConfig:
        """Build a config from ``SEQUENCER_*`` variables; explicit overrides win."""
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            values[f.name] = _coerce(f.name, raw, f.default)
        # AWS_REGION is honoured when no sequencer-specific region is given.
        if "region" not in values and env.get("AWS_REGION"):
            values["region"] = env["AWS_REGION"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _coerce(name: str, raw: str, default: Any) -> Any:
    try:
        if name == "max_attempts":
            return int(raw)
        if isinstance(default, int):
            return int(raw)
        if isinstance(default, float):
            return float(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e
    return raw
