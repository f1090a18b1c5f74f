"""Unit tests for counting and summary statistics."""

from __future__ import annotations

import math
from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from emobattles import data_prep, metrics
from emobattles.records import SIMILARITY_METRICS, Battle

pytestmark = pytest.mark.unit


def _battle(region: str, won: bool = True, att: int = 0, dfn: int = 0) -> Battle:
    return Battle(name="b", year=299, attacker_won=won, attacker_size=att, defender_size=dfn, region=region)


def test_count_by_attribute_sorted_desc_then_key() -> None:
    battles = [_battle("North"), _battle("Riverlands"), _battle("Riverlands"), _battle("Reach"), _battle("North")]

    counts = metrics.count_by(battles, "region")

    assert counts.index.tolist() == ["North", "Riverlands", "Reach"]
    assert counts.tolist() == [2, 2, 1]
    assert counts.name == "count"
    assert counts.index.name == "region"
    assert counts.sum() == len(battles)


def test_count_by_callable() -> None:
    counts = metrics.count_by(["apple", "avocado", "banana"], lambda s: s[0])

    assert counts.to_dict() == {"a": 2, "b": 1}


def test_count_by_empty() -> None:
    counts = metrics.count_by([], "region")

    assert counts.empty
    assert counts.dtype == np.int64


def test_five_number_summary() -> None:
    s = metrics.five_number_summary([1, 2, 3, 4, 5, float("nan")])

    assert s.index.tolist() == ["min", "q1", "median", "q3", "max"]
    assert s.tolist() == pytest.approx([1.0, 2.0, 3.0, 4.0, 5.0])


def test_five_number_summary_interpolates() -> None:
    s = metrics.five_number_summary([10, 20, 30, 40])

    assert s["q1"] == pytest.approx(17.5)
    assert s["median"] == pytest.approx(25.0)
    assert s.is_monotonic_increasing


def test_five_number_summary_empty_raises() -> None:
    with pytest.raises(ValueError):
        metrics.five_number_summary([float("nan")])


def test_describe_frame_numeric_only() -> None:
    df = pd.DataFrame({"a": [1, 2, 3], "b": ["x", "y", "z"], "c": [0.5, 0.5, 0.5]})

    d = metrics.describe_frame(df)

    assert list(d.columns) == ["a", "c"]
    assert d.loc["mean", "a"] == pytest.approx(2.0)
    assert d.loc["count", "c"] == 3


def test_describe_frame_subset_and_missing() -> None:
    df = pd.DataFrame({"a": [1, 2], "b": [3, 4]})

    assert list(metrics.describe_frame(df, ["b"]).columns) == ["b"]
    with pytest.raises(ValueError, match="missing columns"):
        metrics.describe_frame(df, ["zzz"])
    with pytest.raises(ValueError, match="No numeric"):
        metrics.describe_frame(pd.DataFrame({"s": ["x"]}))


def test_similarity_summary_rows(emoji_file: Path) -> None:
    pairs = data_prep.load_emoji_pairs(emoji_file)

    summary = metrics.similarity_summary(pairs)

    assert summary.index.tolist() == [*SIMILARITY_METRICS, "agreement"]
    assert summary.loc["agreement", "max"] == pytest.approx(0.9)
    assert summary.loc["agreement", "min"] == pytest.approx(0.1)
    assert summary.loc["googleSenseLabel", "median"] == pytest.approx(0.4)


def test_top_pairs(emoji_file: Path) -> None:
    pairs = data_prep.load_emoji_pairs(emoji_file)

    top = metrics.top_pairs(pairs, n=2)

    assert top["emoji_one"].tolist() == ["joy", "smile"]
    assert top["agreement"].tolist() == pytest.approx([0.9, 0.5])


def test_win_rate_by_region() -> None:
    battles = [
        _battle("Riverlands", True),
        _battle("Riverlands", False),
        _battle("Riverlands", True),
        _battle("North", False),
    ]

    rates = metrics.win_rate_by(battles)

    assert rates["region"].tolist() == ["Riverlands", "North"]
    assert rates["battles"].tolist() == [3, 1]
    assert rates["attacker_wins"].tolist() == [2, 0]
    assert rates["win_rate"].tolist() == pytest.approx([2 / 3, 0.0])


def test_win_rate_by_empty() -> None:
    rates = metrics.win_rate_by([])

    assert rates.empty
    assert list(rates.columns) == ["region", "battles", "attacker_wins", "win_rate"]


def test_army_size_summary_ignores_unknown(battles_file: Path) -> None:
    battles = data_prep.load_battles(battles_file)

    sizes = metrics.army_size_summary(battles)

    assert sizes.loc["attacker_size", "min"] == 15000
    assert sizes.loc["attacker_size", "max"] == 18000
    assert sizes.loc["defender_size", "min"] == 120


def test_army_size_summary_all_unknown() -> None:
    sizes = metrics.army_size_summary([_battle("North")])

    assert all(math.isnan(v) for v in sizes.loc["attacker_size"])


def test_count_by_empty_keeps_index_name() -> None:
    assert metrics.count_by([], "region").index.name == "region"
