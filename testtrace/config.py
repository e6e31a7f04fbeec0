"""Settings for the exporter pipeline, with an optional YAML settings file.

Precedence, lowest first: model defaults, the settings file, then explicit
overrides (environment variables and command-line options, resolved by
the CLI).
"""

import os
import platform
from pathlib import Path
from typing import Any, Optional, Union

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator,
    model_validator,
)

from testtrace.model.errors import ConfigError
from testtrace.telemetry.encoding import OutputFormat

APP_NAME = "testtrace"

_home = os.path.expanduser("~")

xdg_config_home = os.environ.get("XDG_CONFIG_HOME") or os.path.join(_home, ".config")

if platform.system() == "Darwin":
    # macOS
    config_dir = Path("~/Library/Application Support/testtrace").expanduser()
else:
    # Linux or others
    config_dir = Path(os.path.join(xdg_config_home, APP_NAME))


def get_config_file() -> Path:
    return config_dir / f"{APP_NAME}.yaml"


class TraceSettings(BaseModel):
    """Validated exporter settings."""

    model_config = ConfigDict(extra="forbid")

    service_name: str = Field("TestTracesService", description="Resource service.name")
    max_batch_size: int = Field(512, ge=1, description="Spans per batch (size trigger)")
    flush_interval: float = Field(
        1.0, gt=0, description="Seconds between timed flushes (time trigger)"
    )
    max_queue_size: Optional[int] = Field(
        None, ge=1, description="Bound on buffered spans; oldest are dropped when full"
    )
    output_format: OutputFormat = Field(OutputFormat.jsonl, description="Record layout")
    package_spans: bool = Field(
        True, description="Emit spans for package-level output lines"
    )

    @field_validator("service_name")
    @classmethod
    def validate_service_name(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must be a non-empty string")
        return v

    @model_validator(mode="after")
    def validate_queue_size(self) -> "TraceSettings":
        if self.max_queue_size is not None and self.max_queue_size < self.max_batch_size:
            raise ValueError(
                f"max_queue_size ({self.max_queue_size}) must not be smaller "
                f"than max_batch_size ({self.max_batch_size})"
            )
        return self


def _format_validation_error(error: PydanticValidationError) -> str:
    parts = []
    for err in error.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "settings"
        parts.append(f"{field}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def read_settings_file(path: Union[str, Path]) -> dict[str, Any]:
    """Read a YAML settings file into a dict. An empty file yields ``{}``."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"cannot read settings file: {e.strerror}", str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"YAML format error: {e}", str(path)) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError("settings file must contain a mapping", str(path))
    return data


def load_settings(
    config_path: Optional[Union[str, Path]] = None, **overrides: Any
) -> TraceSettings:
    """
    Build settings from the settings file and explicit overrides.

    Args:
        config_path: Settings file to read. If None, the default file is
            read when it exists; an explicitly named file must exist.
        **overrides: Field values that win over the file. ``None`` values
            are ignored so unset CLI options fall through.

    Raises:
        ConfigError: The file is unreadable or a value is invalid.
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        data.update(read_settings_file(config_path))
    elif get_config_file().is_file():
        config_path = get_config_file()
        data.update(read_settings_file(config_path))

    data.update({key: value for key, value in overrides.items() if value is not None})

    try:
        return TraceSettings.model_validate(data)
    except PydanticValidationError as e:
        raise ConfigError(
            _format_validation_error(e),
            str(config_path) if config_path is not None else None,
        ) from e
