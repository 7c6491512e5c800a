# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run settings model for a single pystaged invocation."""

from __future__ import annotations

import math
import os
from pathlib import Path
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigError


def default_parallel_jobs() -> int:
    """Return a CPU count scaled down for concurrent rule dispatch.

    Returns:
        int: Roughly 75% of available CPU cores, never less than one.
    """

    cores = os.cpu_count() or 1
    return max(1, math.floor(cores * 0.75))


class RunSettings(BaseModel):
    """Options controlling discovery, dispatch, and console output."""

    model_config = ConfigDict(validate_assignment=True)

    cwd: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None
    jobs: int = Field(default_factory=default_parallel_jobs, ge=1)
    timeout: Annotated[float, Field(gt=0)] | None = None
    quiet: bool = False
    debug: bool = False
    emoji: bool = True
    color: bool = True

    @field_validator("cwd")
    @classmethod
    def _resolve_cwd(cls, value: Path) -> Path:
        return value.expanduser().resolve()

    @classmethod
    def build(cls, **values: Any) -> RunSettings:
        """Validate ``values`` and return settings, mapping failures to ``ConfigError``.

        Args:
            **values: Field values; ``None`` entries fall back to defaults.

        Returns:
            RunSettings: Validated settings.

        Raises:
            ConfigError: If any value fails validation.
        """

        payload = {key: value for key, value in values.items() if value is not None}
        try:
            return cls(**payload)
        except ValidationError as exc:
            details = "; ".join(
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
            )
            raise ConfigError(f"Invalid run settings: {details}") from exc


__all__ = ["RunSettings", "default_parallel_jobs"]
