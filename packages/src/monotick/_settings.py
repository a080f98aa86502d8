"""Application configuration via pydantic-settings.

Configuration is loaded from environment variables and/or ``.env``
files.  Variables carry the ``MONOTICK_`` prefix and nested models use
``__`` as the delimiter, e.g. ``MONOTICK_MEASURE__DELAY=0.25``.

Two concerns are configurable:

* **Logging** — level, format, optional file sink, rotation.
* **Measure** — default delay, repetition count and output unit for
  ``monotick measure``.

All durations are in **seconds**.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

UnitName = Literal["ns", "us", "ms", "s", "m", "h"]

# -------------------------------------------------------------------
# Sub-models (BaseModel, NOT BaseSettings — nested via composition)
# -------------------------------------------------------------------


class LoggingSettings(BaseModel):
    """Logging configuration.

    When ``file`` is set, logs are also written to a rotating file
    (size-based rotation, ``backup_count`` generations kept).  When
    ``None``, logs go to stderr only.

    The ``format`` field selects the output format:

    - ``"text"`` (default) — human-readable timestamped lines; the CLI
      is mostly run interactively.
    - ``"json"`` — one JSON object per line for log aggregators.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="WARNING",
        description="Root log level.",
    )
    format: Literal["json", "text"] = Field(
        default="text",
        description=(
            "Log output format. "
            "'json' emits structured JSON lines; "
            "'text' emits human-readable timestamped lines."
        ),
    )
    file: str | None = Field(
        default=None,
        description="Optional log file path. ``None`` means stderr only.",
    )
    max_file_size_mb: Annotated[int, Field(ge=1)] = Field(
        default=10,
        description=(
            "Maximum log file size in megabytes before rotation. "
            "Only applies when ``file`` is set."
        ),
    )
    backup_count: Annotated[int, Field(ge=0)] = Field(
        default=3,
        description="Number of rotated log files to keep.",
    )


class MeasureSettings(BaseModel):
    """Defaults for ``monotick measure``.

    Environment variables (with ``__`` nesting)::

        MONOTICK_MEASURE__DELAY=0.5
        MONOTICK_MEASURE__COUNT=5
        MONOTICK_MEASURE__UNIT=us
    """

    delay: Annotated[float, Field(ge=0, allow_inf_nan=False)] = Field(
        default=1.0,
        description="Seconds to wait between the two clock readings.",
    )
    count: Annotated[int, Field(ge=1)] = Field(
        default=1,
        description="How many read-wait-read cycles to run.",
    )
    unit: UnitName = Field(
        default="ms",
        description="Unit used when printing elapsed times.",
    )


# -------------------------------------------------------------------
# Root settings
# -------------------------------------------------------------------


class Settings(BaseSettings):
    """Root settings for monotick.

    Example ``.env``::

        MONOTICK_LOGGING__LEVEL=DEBUG
        MONOTICK_LOGGING__FORMAT=json
        MONOTICK_MEASURE__DELAY=0.1
        MONOTICK_MEASURE__COUNT=10
    """

    model_config = SettingsConfigDict(
        env_prefix="MONOTICK_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
    """``extra="ignore"`` lets a shared ``.env`` file carry variables
    for other tools without failing validation here."""

    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration.",
    )
    measure: MeasureSettings = Field(
        default_factory=MeasureSettings,
        description="Measurement defaults.",
    )
