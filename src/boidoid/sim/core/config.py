from __future__ import annotations

import math
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict

import yaml

PLACEMENTS = ("full", "centered")


class ConfigError(ValueError):
    """Raised when a configuration value would make the simulation ill-defined."""


@dataclass(frozen=True)
class FlockConfig:
    separation_factor: float = 0.05
    alignment_factor: float = 0.05
    cohesion_factor: float = 0.0008
    turn_impulse: float = 0.2
    margin: float = 25.0
    separation_threshold: float = 2.0
    max_speed: float = 2.5
    min_speed: float = 1.0

    def __post_init__(self) -> None:
        for item in fields(self):
            _require_finite(item.name, getattr(self, item.name))
        if self.min_speed > self.max_speed:
            raise ConfigError(
                f"min_speed ({self.min_speed}) must not exceed max_speed ({self.max_speed})"
            )


@dataclass
class TerminalConfig:
    glyph: str = "o"
    quit_key: str = "q"
    # curses.halfdelay() takes tenths of a second.
    half_delay_tenths: int = 1

    def __post_init__(self) -> None:
        if len(self.glyph) != 1:
            raise ConfigError(f"glyph must be a single character, got {self.glyph!r}")
        if len(self.quit_key) != 1:
            raise ConfigError(f"quit_key must be a single character, got {self.quit_key!r}")
        if not 1 <= self.half_delay_tenths <= 255:
            raise ConfigError(f"half_delay_tenths must be in [1, 255], got {self.half_delay_tenths}")


@dataclass
class SimulationConfig:
    perception_radius: float = 20.0
    population: int = 250
    bounds_height: int = 50
    bounds_width: int = 200
    seed: int = 42
    placement: str = "full"
    flock: FlockConfig = field(default_factory=FlockConfig)

    def __post_init__(self) -> None:
        validate_world(
            self.perception_radius,
            self.population,
            self.bounds_height,
            self.bounds_width,
            self.placement,
        )

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    terminal: TerminalConfig = field(default_factory=TerminalConfig)


def _require_finite(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{name} must be a number, got {value!r}")
    if not math.isfinite(value) or value < 0:
        raise ConfigError(f"{name} must be finite and >= 0, got {value!r}")


def validate_world(radius: float, population: int, bounds_height: float, bounds_width: float, placement: str) -> None:
    _require_finite("perception radius", radius)
    if isinstance(population, bool) or not isinstance(population, int):
        raise ConfigError(f"population must be an integer, got {population!r}")
    if population < 0:
        raise ConfigError(f"population must be >= 0, got {population}")
    _require_finite("bounds height", bounds_height)
    _require_finite("bounds width", bounds_width)
    if placement not in PLACEMENTS:
        raise ConfigError(f"Unknown placement {placement!r}; expected one of {', '.join(PLACEMENTS)}")


PRESETS: Dict[str, SimulationConfig] = {
    "terminal": SimulationConfig(),
    "window": SimulationConfig(
        perception_radius=60.0,
        population=1500,
        bounds_height=720,
        bounds_width=1280,
        flock=FlockConfig(
            separation_factor=0.1,
            alignment_factor=0.05,
            cohesion_factor=0.0008,
            turn_impulse=0.1,
            margin=300.0,
            separation_threshold=10.0,
            max_speed=3.0,
            min_speed=1.0,
        ),
    ),
}


def preset(name: str) -> SimulationConfig:
    try:
        base = PRESETS[name]
    except KeyError:
        raise ConfigError(f"Unknown preset {name!r}; expected one of {', '.join(sorted(PRESETS))}") from None
    return replace(base)


def _build(cls: type, raw: Dict[str, Any], section: str) -> Any:
    if not isinstance(raw, dict):
        raise ConfigError(f"{section} must be a mapping, got {type(raw).__name__}")
    known = {item.name for item in fields(cls)}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ConfigError(f"Unknown {section} keys: {', '.join(unknown)}")
    return cls(**raw)


def load_config(raw: dict) -> SimulationConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"configuration must be a mapping, got {type(raw).__name__}")
    flock = _build(FlockConfig, raw.get("flock", {}) or {}, "flock")
    sim_values = {k: v for k, v in raw.items() if k not in {"flock", "terminal"}}
    return _build(SimulationConfig, dict(sim_values, flock=flock), "simulation")


def load_app_config(raw: dict) -> AppConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f"configuration must be a mapping, got {type(raw).__name__}")
    terminal = _build(TerminalConfig, raw.get("terminal", {}) or {}, "terminal")
    return AppConfig(simulation=load_config(raw), terminal=terminal)


def load_app_config_file(path: Path) -> AppConfig:
    data = yaml.safe_load(Path(path).read_text()) or {}
    return load_app_config(data)
