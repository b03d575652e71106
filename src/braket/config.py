"""TOML config loading for braket.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from braket.printer import PrinterOptions

CONFIG_NAME = "braket.toml"


@dataclass
class FormatConfig:
    paren_threshold: int = 10
    free_prefix: str = "$"
    lambda_symbol: str = "λ"
    wrap_variable_args: bool = False

    def printer_options(self) -> PrinterOptions:
        return PrinterOptions(
            paren_threshold=self.paren_threshold,
            free_prefix=self.free_prefix,
            lambda_symbol=self.lambda_symbol,
            wrap_variable_args=self.wrap_variable_args,
        )


@dataclass
class BraketConfig:
    format: FormatConfig = field(default_factory=FormatConfig)


def find_config(start_path: Path | None = None) -> Path:
    """Walk up directories to find braket.toml. Raises FileNotFoundError."""
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


def _expect_type(path: Path, table: dict, key: str, kind: type, default: object) -> object:
    value = table.get(key, default)
    if not isinstance(value, kind):
        raise ValueError(f"{path}: format.{key} must be a {kind.__name__}")
    return value


def load_config(path: Path) -> BraketConfig:
    """Parse a braket.toml file into a BraketConfig."""
    with open(path, "rb") as f:
        data = tomllib.load(f)

    config = BraketConfig()

    if "format" in data:
        fmt = data["format"]
        threshold = fmt.get("paren_threshold", 10)
        if isinstance(threshold, bool) or not isinstance(threshold, int) or threshold < 0:
            raise ValueError(f"{path}: format.paren_threshold must be a non-negative integer")
        config.format = FormatConfig(
            paren_threshold=threshold,
            free_prefix=_expect_type(path, fmt, "free_prefix", str, "$"),
            lambda_symbol=_expect_type(path, fmt, "lambda_symbol", str, "λ"),
            wrap_variable_args=_expect_type(path, fmt, "wrap_variable_args", bool, False),
        )

    return config


def discover_config(start_path: Path | None = None) -> BraketConfig:
    """Load the nearest braket.toml, or defaults when there is none."""
    try:
        return load_config(find_config(start_path))
    except FileNotFoundError:
        return BraketConfig()
