"""Shared fixtures: small EmoSim508 and battles.csv files on disk."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pytest

from emobattles.records import SIMILARITY_METRICS

BATTLES_HEADER = [
    "name", "year", "battle_number", "attacker_king", "defender_king",
    "attacker_1", "attacker_2", "attacker_3", "attacker_4",
    "defender_1", "defender_2", "defender_3", "defender_4",
    "attacker_outcome", "battle_type", "major_death", "major_capture",
    "attacker_size", "defender_size", "attacker_commander", "defender_commander",
    "summer", "location", "region", "note",
]


def emoji_entry(one: str, two: str, agreement: float, base: float = 0.5) -> dict:
    return {
        "emojiPair": {
            "emojiOne": {"longCode": f"U+{one.upper()}", "shortCode": one, "title": f"{one} title"},
            "emojiTwo": {"longCode": f"U+{two.upper()}", "shortCode": two, "title": f"{two} title"},
        },
        "emojiPairSimilarity": {m: round(base + i * 0.01, 2) for i, m in enumerate(SIMILARITY_METRICS)},
        "humanAnnotatorAgreement": agreement,
    }


def battle_row(name, year, outcome, att, dfn, region) -> list:
    row = [""] * len(BATTLES_HEADER)
    row[0], row[1], row[13], row[17], row[18], row[23] = name, year, outcome, att, dfn, region
    return row


@pytest.fixture
def emoji_entries() -> list:
    return [
        emoji_entry("joy", "sob", 0.9, base=0.6),
        emoji_entry("heart", "fire", 0.3, base=0.2),
        emoji_entry("smile", "grin", 0.5, base=0.8),
        emoji_entry("cat", "dog", 0.1, base=0.1),
    ]


@pytest.fixture
def emoji_file(tmp_path: Path, emoji_entries: list) -> Path:
    p = tmp_path / "EmoSim508.json"
    p.write_text(json.dumps(emoji_entries), encoding="utf-8")
    return p


@pytest.fixture
def battle_rows() -> list:
    return [
        battle_row("Battle of the Golden Tooth", "298", "win", "15000", "4000", "The Westerlands"),
        battle_row("Battle at the Mummer's Ford", "298", "win", "", "120", "The Riverlands"),
        battle_row("Battle of Riverrun", "298", "win", "15000", "10000", "The Riverlands"),
        battle_row("Battle of the Green Fork", "298", "loss", "18000", "20000", "The Riverlands"),
        battle_row("Sack of Winterfell", "299", "win", "", "", "The North"),
    ]


@pytest.fixture
def battles_file(tmp_path: Path, battle_rows: list) -> Path:
    p = tmp_path / "battles.csv"
    with p.open("w", encoding="utf-8", newline="") as fh:
        w = csv.writer(fh)
        w.writerow(BATTLES_HEADER)
        w.writerows(battle_rows)
    return p
