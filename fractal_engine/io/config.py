"""
Configuration file handling.

A job file is JSON of the form::

    {
        "shape": "julia",
        "width": 800,
        "height": 600,
        "config": {"iterations": 80, "zoom": 1.5, "julia_c": [-0.8, 0.156]}
    }

Every key is optional except ``shape``. Values can further be overridden by
``FRACTAL_ENGINE_<FIELD>`` environment variables.
"""

import json
import os
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from ..api import DEFAULT_HEIGHT, DEFAULT_WIDTH, FractalConfig, default_config
from ..core.fractal_types import FractalShape, JULIA_PRESETS
from ..errors import FractalEngineError, InvalidConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "FRACTAL_ENGINE_"


@dataclass
class RenderJob:
    """A fully resolved generation request."""

    shape: FractalShape
    config: FractalConfig
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "shape": self.shape.value,
            "width": self.width,
            "height": self.height,
            "config": self.config.to_dict(),
        }


PRESETS: Dict[str, Dict[str, Any]] = {
    "snowflake": {"shape": "koch", "config": {"iterations": 4}},
    "gasket": {"shape": "sierpinski", "config": {"iterations": 6}},
    "tree": {"shape": "tree", "config": {"iterations": 8}},
    "wide-tree": {"shape": "tree", "config": {"iterations": 8, "branch_angle": 0.7}},
    "classic-mandelbrot": {"shape": "mandelbrot", "config": {"iterations": 100}},
    "seahorse-valley": {
        "shape": "mandelbrot",
        "config": {"iterations": 100, "zoom": 5.0, "offset_x": -75.0, "offset_y": -10.0},
    },
}
PRESETS.update({
    f"julia-{name.replace('_', '-')}": {
        "shape": "julia",
        "config": {"iterations": 100, "julia_c": list(params.to_tuple())},
    }
    for name, params in JULIA_PRESETS.items()
})


class ConfigManager:
    """Loads, validates and saves job configurations."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initialize the manager.

        Args:
            environ: Environment used for overrides (``os.environ`` if None)
        """
        self.environ = os.environ if environ is None else environ

    def load_config(self, filepath: Union[str, Path]) -> Dict[str, Any]:
        """Read a JSON job file."""
        filepath = Path(filepath)
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise FractalEngineError(f"Invalid JSON in {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise FractalEngineError(f"{filepath} must contain a JSON object")
        logger.info(f"Loaded configuration: {filepath}")
        return data

    def save_config(self, job: RenderJob, filepath: Union[str, Path]) -> Path:
        """Write a job to a JSON file."""
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(job.to_dict(), f, indent=2)
            f.write("\n")
        logger.info(f"Saved configuration: {filepath}")
        return filepath

    def validate_config(self, data: Dict[str, Any]) -> List[str]:
        """
        Check a job dictionary without raising.

        Returns:
            Human-readable error messages, empty when the job is valid
        """
        errors = []
        unknown = sorted(set(data) - {"shape", "width", "height", "config"})
        if unknown:
            errors.append(f"Unknown top-level keys: {', '.join(unknown)}")
        if "shape" not in data:
            errors.append("Missing required key 'shape'")
            return errors

        try:
            self.create_job(data, apply_environment=False)
        except (InvalidConfigurationError, TypeError) as e:
            errors.append(str(e))
        return errors

    def create_job(self, data: Dict[str, Any], apply_environment: bool = True) -> RenderJob:
        """
        Resolve a job dictionary into a validated RenderJob.

        Shape defaults are applied first, then the file's ``config`` section,
        then environment overrides.
        """
        if "shape" not in data:
            raise InvalidConfigurationError("shape", None, "is required")
        shape = FractalShape.parse(data["shape"])

        merged = default_config(shape).to_dict()
        section = data.get("config", {})
        if not isinstance(section, dict):
            raise InvalidConfigurationError("config", section, "must be an object")
        merged.update(section)
        if apply_environment:
            merged.update(self.environment_overrides())

        config = FractalConfig.from_dict(merged)
        config.validate(shape)

        job = RenderJob(
            shape=shape,
            config=config,
            width=data.get("width", DEFAULT_WIDTH),
            height=data.get("height", DEFAULT_HEIGHT),
        )
        for name in ("width", "height"):
            value = getattr(job, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfigurationError(name, value, "must be a positive integer")
        return job

    def load_job(self, filepath: Union[str, Path]) -> RenderJob:
        return self.create_job(self.load_config(filepath))

    def preset_job(self, name: str) -> RenderJob:
        """Resolve a built-in preset by name."""
        if name not in PRESETS:
            available = ', '.join(sorted(PRESETS))
            raise InvalidConfigurationError("preset", name, f"unknown preset. Available: {available}")
        return self.create_job(PRESETS[name])

    def environment_overrides(self) -> Dict[str, Any]:
        """Collect ``FRACTAL_ENGINE_<FIELD>`` overrides, converted to field types."""
        overrides: Dict[str, Any] = {}
        for f in fields(FractalConfig):
            raw = self.environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            overrides[f.name] = _parse_env_value(f.name, raw)
            logger.debug(f"Environment override {f.name}={overrides[f.name]!r}")
        return overrides


def _parse_env_value(name: str, raw: str) -> Any:
    try:
        if name == "iterations":
            return int(raw)
        if name == "color":
            return raw
        if name == "julia_c":
            parts = [float(part) for part in raw.split(",")]
            if len(parts) != 2:
                raise ValueError("expected 'real,imag'")
            return parts
        return float(raw)
    except ValueError as e:
        raise InvalidConfigurationError(ENV_PREFIX + name.upper(), raw, str(e)) from e


def list_presets() -> Dict[str, str]:
    """Preset names mapped to a one-line summary."""
    return {name: f"{preset['shape']} {preset.get('config', {})}"
            for name, preset in sorted(PRESETS.items())}
