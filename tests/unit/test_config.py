"""Unit tests for generation config loading and date helpers."""

from datetime import date, datetime

import pytest
from omegaconf.errors import ReadonlyConfigError

from cvsmith.utils.config import read_generation_config
from cvsmith.utils.timestamp import months_between, to_date


@pytest.mark.unit
def test_packaged_defaults():
    """Test the packaged policy defaults."""
    config = read_generation_config()

    assert config.selection.max_experiences == 5
    assert config.compiler.num_passes == 2
    assert config.ats.weights.keyword_match == 0.4


@pytest.mark.unit
def test_override_merges_over_defaults(tmp_path):
    """Test that an override file replaces only the keys it names."""
    override = tmp_path / "override.yaml"
    override.write_text("selection:\n  max_skills: 8\ncompiler:\n  timeout_s: 90\n")

    config = read_generation_config(override)

    assert config.selection.max_skills == 8
    assert config.selection.max_projects == 3
    assert config.compiler.timeout_s == 90


@pytest.mark.unit
def test_missing_override(tmp_path):
    """Test error for an override path that does not exist."""
    with pytest.raises(FileNotFoundError):
        read_generation_config(tmp_path / "nope.yaml")


@pytest.mark.unit
def test_config_is_readonly():
    """Test that loaded config cannot be mutated."""
    config = read_generation_config()

    with pytest.raises(ReadonlyConfigError):
        config.selection.max_skills = 99


@pytest.mark.unit
@pytest.mark.parametrize(
    "value, expected",
    [
        ("2024-03-15", date(2024, 3, 15)),
        ("2024-03-15T10:00:00Z", date(2024, 3, 15)),
        (datetime(2024, 3, 15, 9, 30), date(2024, 3, 15)),
        (None, None),
    ],
)
def test_to_date(value, expected):
    """Test coercion of stored date values."""
    assert to_date(value) == expected


@pytest.mark.unit
def test_months_between_uses_thirty_day_months():
    """Test month arithmetic."""
    assert months_between(date(2024, 1, 1), date(2024, 1, 31)) == 1.0
    assert months_between(date(2024, 1, 31), date(2024, 1, 1)) == -1.0
