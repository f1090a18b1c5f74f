"""Unit tests for configuration layering."""

from __future__ import annotations

from pathlib import Path

import pytest

from emobattles.config import TourConfig, load_config
from emobattles.errors import ConfigError

pytestmark = pytest.mark.unit


def test_defaults() -> None:
    cfg = load_config(environ={})

    assert cfg == TourConfig()
    assert cfg.filtered_path == Path("outputs") / "emosim_filtered.json"
    assert cfg.chart_path == Path("outputs") / "battles_by_region.png"


def test_environment_then_overrides() -> None:
    env = {"EMOBATTLES_THRESHOLD": "0.7", "EMOBATTLES_OUTPUT_DIR": "/tmp/x", "EMOBATTLES_FILTER_BY": "twitterSenseAll"}

    cfg = load_config({"threshold": 0.8, "output_dir": None}, environ=env)

    assert cfg.threshold == pytest.approx(0.8)
    assert cfg.output_dir == Path("/tmp/x")
    assert cfg.filter_by == "twitterSenseAll"


@pytest.mark.parametrize(
    "overrides",
    [{"threshold": 1.5}, {"threshold": "abc"}, {"filter_by": "vibes"}, {"log_level": "LOUD"}, {"colour": "red"}],
)
def test_invalid_values(overrides: dict) -> None:
    with pytest.raises(ConfigError):
        load_config(overrides, environ={})
