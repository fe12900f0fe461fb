"""Tests for configuration settings."""
import pytest

from hanzidrill.config import (
    BASE_DIR,
    BUCKET_DELAYS_MINUTES,
    PracticeSettings,
    Settings,
    settings,
)


def test_base_directory() -> None:
    """Test that the base directory is the project root."""
    assert (BASE_DIR / "pyproject.toml").exists()


def test_settings_defaults() -> None:
    """Test default settings values."""
    assert settings.practice.bucket_delays_minutes == BUCKET_DELAYS_MINUTES
    assert settings.practice.bucket_delays_minutes[-1] == 30 * 24 * 60
    assert settings.practice.max_bucket == 8
    assert settings.practice.jitter_min == 0.75
    assert settings.practice.jitter_max == 1.25
    assert settings.practice.default_session_size == 10
    assert settings.practice.missing_rank_sentinel == 999999
    assert settings.database.url.startswith("sqlite:///")


def test_settings_validate() -> None:
    """Test that the default settings are valid."""
    Settings().validate()


@pytest.mark.parametrize(
    "practice",
    [
        PracticeSettings(bucket_delays_minutes=[]),
        PracticeSettings(bucket_delays_minutes=[0, 5, 1]),
        PracticeSettings(jitter_min=0),
        PracticeSettings(jitter_min=1.5, jitter_max=1.25),
        PracticeSettings(default_session_size=0),
    ],
)
def test_settings_validate_rejects(practice: PracticeSettings) -> None:
    """Test that invalid practice settings are rejected."""
    with pytest.raises(ValueError):
        Settings(practice=practice).validate()


def test_max_bucket_follows_table() -> None:
    """Test that the mastered bucket is the last table entry."""
    assert PracticeSettings(bucket_delays_minutes=[0, 1, 10]).max_bucket == 2
