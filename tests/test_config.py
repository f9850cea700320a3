"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from snp2go.config import apply_overrides, load_config, load_config_with_overrides
from snp2go.config.loader import nest_overrides
from snp2go.config.schema import EnrichmentConfig, PipelineConfig, WindowConfig

DEFAULT_CONFIG = Path(__file__).parent.parent / "config" / "default.yaml"


def test_load_valid_config():
    """Test loading valid default configuration."""
    config = load_config(DEFAULT_CONFIG)

    assert isinstance(config, PipelineConfig)
    assert config.annotation.feature_type == "gene"
    assert config.annotation.go_delimiter == ","
    assert config.window.window_bp == 10000
    assert config.enrichment.namespaces == ["BP", "MF", "CC"]
    assert config.enrichment.method == "fdr_bh"
    assert config.enrichment.propagate_counts is False


def test_missing_config_file(tmp_path):
    """Test that a missing file raises FileNotFoundError."""
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "nope.yaml")


def test_invalid_config_missing_field(tmp_path):
    """Test that missing required field raises ValidationError."""
    invalid_config = tmp_path / "invalid.yaml"
    invalid_config.write_text("""
output_dir: results
window:
  window_bp: 100
""")

    with pytest.raises(ValidationError) as exc_info:
        load_config(invalid_config)

    assert "duckdb_path" in str(exc_info.value)


def test_negative_window_rejected():
    with pytest.raises(ValidationError):
        WindowConfig(window_bp=-1)


def test_workers_bounds():
    assert WindowConfig(workers=64).workers == 64
    with pytest.raises(ValidationError):
        WindowConfig(workers=0)


def test_namespaces_deduplicated_and_validated():
    assert EnrichmentConfig(namespaces=["MF", "BP", "MF"]).namespaces == ["MF", "BP"]

    with pytest.raises(ValidationError):
        EnrichmentConfig(namespaces=[])

    with pytest.raises(ValidationError):
        EnrichmentConfig(namespaces=["XX"])


def test_alpha_bounds():
    with pytest.raises(ValidationError):
        EnrichmentConfig(alpha=0.0)
    with pytest.raises(ValidationError):
        EnrichmentConfig(alpha=1.5)


def test_output_dir_created(tmp_path):
    """Test that output_dir is created on load."""
    out = tmp_path / "nested" / "out"
    PipelineConfig(output_dir=out, duckdb_path=out / "db.duckdb")

    assert out.is_dir()


def test_config_hash_deterministic(tmp_path):
    """Test that the same config gives the same hash."""
    config1 = PipelineConfig(output_dir=tmp_path, duckdb_path=tmp_path / "a.duckdb")
    config2 = PipelineConfig(output_dir=tmp_path, duckdb_path=tmp_path / "a.duckdb")

    assert config1.config_hash() == config2.config_hash()
    assert len(config1.config_hash()) == 64


def test_config_hash_changes():
    """Test that different settings give different hashes."""
    config1 = load_config(DEFAULT_CONFIG)
    config2 = load_config_with_overrides(DEFAULT_CONFIG, {"window.window_bp": 500})

    assert config1.config_hash() != config2.config_hash()


def test_config_with_overrides(tmp_path):
    """Test dotted-key overrides and ignored None values."""
    config = load_config_with_overrides(DEFAULT_CONFIG, {
        "window.window_bp": 250,
        "enrichment.propagate_counts": True,
        "enrichment.min_query_count": None,
        "output_dir": tmp_path / "override",
    })

    assert config.window.window_bp == 250
    assert config.enrichment.propagate_counts is True
    assert config.enrichment.min_query_count == 1
    assert config.output_dir == tmp_path / "override"


def test_override_revalidates():
    with pytest.raises(ValidationError):
        load_config_with_overrides(DEFAULT_CONFIG, {"window.window_bp": -5})


def test_nest_overrides():
    nested = nest_overrides({
        "window.window_bp": 500,
        "window.workers": None,
        "enrichment.alpha": 0.01,
        "output_dir": "out",
    })

    assert nested == {
        "window": {"window_bp": 500},
        "enrichment": {"alpha": 0.01},
        "output_dir": "out",
    }


def test_apply_overrides_keeps_other_fields():
    config = load_config(DEFAULT_CONFIG)

    updated = apply_overrides(config, {"window.workers": 4})

    assert updated.window.workers == 4
    assert updated.window.window_bp == config.window.window_bp
    assert updated.enrichment == config.enrichment
    assert config.window.workers == 1


def test_apply_overrides_unknown_section():
    config = load_config(DEFAULT_CONFIG)

    with pytest.raises(KeyError, match="nosuch"):
        apply_overrides(config, {"nosuch.value": 1})
