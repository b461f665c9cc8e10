from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
import tempfile
import tomllib
from typing import Any, Protocol
import uuid

from .errors import ConfigurationError
from .raster.color import RGBA, parse_color


LOGGER = logging.getLogger(__name__)


def default_output_dir() -> Path:
    return Path(tempfile.gettempdir())


@dataclass(frozen=True)
class LayerConfig:
    width: int
    height: int
    background: RGBA = (0, 0, 0, 0)
    output_dir: Path = field(default_factory=default_output_dir)
    job_timeout_s: float | None = None
    save_timeout_s: float | None = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError("layer width and height must be > 0")
        for label in ("job_timeout_s", "save_timeout_s"):
            value = getattr(self, label)
            if value is not None and value <= 0:
                raise ConfigurationError(f"{label} must be > 0 when set")


class OutputPathAllocator(Protocol):
    def allocate(self, name: str) -> Path:
        ...


class UniquePathAllocator:
    """Hands out `<directory>/<uuid4>.png`; the directory is created on first use."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def allocate(self, name: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.directory / f"{uuid.uuid4().hex}.png"
        LOGGER.debug("Allocated output path %s for layer %r", path, name)
        return path


def load_layer_config(path: str | Path) -> LayerConfig:
    """Read the `[layer]` table of a TOML file into a LayerConfig."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"layer config not found: {config_path}")
    with config_path.open("rb") as f:
        try:
            raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigurationError(f"invalid TOML in {config_path}: {exc}") from exc
    table = raw.get("layer")
    if not isinstance(table, dict):
        raise ConfigurationError(f"{config_path} is missing a [layer] table")
    try:
        width = _coerce_int(table["width"], "width")
        height = _coerce_int(table["height"], "height")
    except KeyError as exc:
        raise ConfigurationError(f"layer config missing required field: {exc.args[0]}") from exc
    kwargs: dict[str, Any] = {}
    if "background" in table:
        kwargs["background"] = parse_color(table["background"])
    if "output_dir" in table:
        output_dir = Path(_coerce_str(table["output_dir"], "output_dir")).expanduser()
        if not output_dir.is_absolute():
            output_dir = config_path.parent / output_dir
        kwargs["output_dir"] = output_dir
    kwargs["job_timeout_s"] = _coerce_optional_float(table.get("job_timeout_s"), "job_timeout_s")
    kwargs["save_timeout_s"] = _coerce_optional_float(table.get("save_timeout_s"), "save_timeout_s")
    return LayerConfig(width=width, height=height, **kwargs)


def _coerce_int(value: object, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{field_name} must be an integer")
    return value


def _coerce_str(value: object, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{field_name} must be a non-empty string")
    return value


def _coerce_optional_float(value: object, field_name: str) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{field_name} must be a number")
    return float(value)
