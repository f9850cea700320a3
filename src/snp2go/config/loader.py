"""Read the pipeline YAML and layer command-line values on top of it."""

from pathlib import Path
from typing import Any

import pydantic_yaml

from .schema import PipelineConfig


def load_config(config_path: Path | str) -> PipelineConfig:
    """
    Parse and validate a pipeline YAML file.

    Raises:
        FileNotFoundError: If config_path doesn't exist
        pydantic.ValidationError: If a section fails validation
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    return pydantic_yaml.parse_yaml_raw_as(PipelineConfig, config_path.read_text())


def nest_overrides(overrides: dict[str, Any]) -> dict[str, Any]:
    """
    Expand dotted keys into nested sections, dropping unset values.

    {"window.window_bp": 500, "enrichment.obo_path": None} becomes
    {"window": {"window_bp": 500}}.
    """
    nested: dict[str, Any] = {}
    for key, value in overrides.items():
        if value is None:
            continue
        *sections, leaf = key.split(".")
        target = nested
        for section in sections:
            target = target.setdefault(section, {})
        target[leaf] = value
    return nested


def _merge(base: dict[str, Any], updates: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_overrides(config: PipelineConfig, overrides: dict[str, Any]) -> PipelineConfig:
    """
    Return a re-validated copy of config with overrides applied.

    Args:
        config: Loaded configuration
        overrides: Flag values keyed by dotted path (e.g. "window.window_bp");
                   None means the flag was not given

    Raises:
        KeyError: If a dotted path names an unknown section
        pydantic.ValidationError: If an override value is invalid
    """
    nested = nest_overrides(overrides)
    current = config.model_dump()
    for section, value in nested.items():
        if isinstance(value, dict) and not isinstance(current.get(section), dict):
            raise KeyError(f"Unknown config section: {section}")
    return PipelineConfig.model_validate(_merge(current, nested))


def load_config_with_overrides(
    config_path: Path | str,
    overrides: dict[str, Any],
) -> PipelineConfig:
    """load_config followed by apply_overrides; used by the CLI commands."""
    return apply_overrides(load_config(config_path), overrides)
