"""TOML config loading for wattle.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

CONFIG_NAME = "wattle.toml"


@dataclass
class CheckConfig:
    max_depth: int | None = None


@dataclass
class OutputConfig:
    color: bool = True


@dataclass
class WattleConfig:
    check: CheckConfig = field(default_factory=CheckConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find wattle.toml. Raises FileNotFoundError."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        parent = path.parent
        if parent == path:
            raise FileNotFoundError(f"No {CONFIG_NAME} found in any parent directory")
        path = parent


def load_config(path: Path) -> WattleConfig:
    """Parse a wattle.toml file into a WattleConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = WattleConfig()

    if "check" in data:
        chk = data["check"]
        config.check = CheckConfig(max_depth=chk.get("max_depth"))

    if "output" in data:
        out = data["output"]
        config.output = OutputConfig(color=out.get("color", True))

    return config


def config_for(start_path: Path | None = None) -> WattleConfig:
    """Load the nearest wattle.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return WattleConfig()
