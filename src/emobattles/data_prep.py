from __future__ import annotations
import csv
import json
import logging
import math
import re
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Sequence, Tuple, Union

import pandas as pd

from .errors import DatasetFormatError
from .records import AGREEMENT_KEY, SIMILARITY_METRICS, Battle, Emoji, EmojiPair

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# battles.csv has no documented schema beyond its column order
COL_NAME = 0
COL_YEAR = 1
COL_ATTACKER_OUTCOME = 13
COL_ATTACKER_SIZE = 17
COL_DEFENDER_SIZE = 18
COL_REGION = 23
MIN_BATTLE_COLUMNS = COL_REGION + 1

BATTLE_COLUMNS = ["name", "year", "attacker_won", "attacker_size", "defender_size", "region"]


def normalize_cell(s: Any) -> str:
    s = "" if s is None else str(s)
    # zero-width / BOM residue shows up in hand-edited exports
    s = re.sub(r"[\u200b\u200e\ufeff]", "", s)
    return s.strip()


# ----------------------------
# EmoSim508 (JSON)
# ----------------------------
def _parse_emoji(obj: Mapping[str, Any]) -> Emoji:
    return Emoji(
        long_code=str(obj["longCode"]),
        short_code=str(obj["shortCode"]),
        title=str(obj["title"]),
    )


def _as_score(v: Any, name: str) -> float:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"{name} is not a number: {v!r}")
    return float(v)


def parse_emoji_pair(obj: Mapping[str, Any]) -> EmojiPair:
    """
    Build an EmojiPair from one decoded EmoSim508 element.
    Raises KeyError / TypeError / ValueError on malformed input.
    """
    pair = obj["emojiPair"]
    sims = obj["emojiPairSimilarity"]
    missing = [m for m in SIMILARITY_METRICS if m not in sims]
    if missing:
        raise KeyError(f"similarity metrics missing: {missing}")
    return EmojiPair(
        first=_parse_emoji(pair["emojiOne"]),
        second=_parse_emoji(pair["emojiTwo"]),
        similarity={m: _as_score(sims[m], m) for m in SIMILARITY_METRICS},
        agreement=_as_score(obj["humanAnnotatorAgreement"], "humanAnnotatorAgreement"),
    )


def load_emoji_pairs(path: PathLike) -> List[EmojiPair]:
    """
    Decode an EmoSim508 JSON array into EmojiPair records.
    The whole file must be a list; any malformed element fails the load
    with DatasetFormatError pointing at its index.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as fh:
        try:
            data = json.load(fh)
        except json.JSONDecodeError as e:
            raise DatasetFormatError(f"Invalid JSON: {e.msg}", path, f"line {e.lineno}") from e
        except UnicodeDecodeError as e:
            raise DatasetFormatError(f"File is not valid UTF-8: {e.reason}", path, f"byte {e.start}") from e

    if not isinstance(data, list):
        raise DatasetFormatError(f"Expected a JSON array at top level, got {type(data).__name__}", path)

    pairs = []
    for i, obj in enumerate(data):
        try:
            pairs.append(parse_emoji_pair(obj))
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetFormatError(f"Malformed emoji pair: {e}", path, f"pair {i}") from e
    logger.debug("Loaded %d emoji pairs from %s", len(pairs), path)
    return pairs


def emoji_pairs_frame(pairs: Iterable[EmojiPair]) -> pd.DataFrame:
    rows = []
    for p in pairs:
        row = {
            "emoji_one": p.first.short_code,
            "emoji_two": p.second.short_code,
            "title_one": p.first.title,
            "title_two": p.second.title,
        }
        row.update(p.similarity)
        row[AGREEMENT_KEY] = p.agreement
        rows.append(row)
    cols = ["emoji_one", "emoji_two", "title_one", "title_two", *SIMILARITY_METRICS, AGREEMENT_KEY]
    return pd.DataFrame(rows, columns=cols)


def filter_pairs(
    pairs: Sequence[EmojiPair],
    threshold: float,
    by: str = AGREEMENT_KEY,
    strict: bool = False,
) -> List[EmojiPair]:
    """Keep pairs scoring >= threshold on `by` (> when strict), preserving order."""
    if by != AGREEMENT_KEY and by not in SIMILARITY_METRICS:
        raise KeyError(f"Unknown score {by!r}; expected {AGREEMENT_KEY!r} or one of {list(SIMILARITY_METRICS)}")
    if strict:
        return [p for p in pairs if p.score(by) > threshold]
    return [p for p in pairs if p.score(by) >= threshold]


def write_pairs_json(pairs: Iterable[EmojiPair], path: PathLike) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump([p.to_dict() for p in pairs], fh, indent=2, ensure_ascii=False)
    return path


# ----------------------------
# War of the Five Kings (CSV)
# ----------------------------
def read_battle_rows(path: PathLike) -> Tuple[List[str], List[List[str]]]:
    """Return (header, data rows) exactly as csv.reader yields them."""
    path = Path(path)
    with path.open("r", encoding="utf-8-sig", newline="") as fh:
        try:
            rows = list(csv.reader(fh))
        except UnicodeDecodeError as e:
            raise DatasetFormatError(f"File is not valid UTF-8: {e.reason}", path, f"byte {e.start}") from e
        except csv.Error as e:
            raise DatasetFormatError(f"Unreadable CSV: {e}", path) from e
    if not rows:
        raise DatasetFormatError("CSV file is empty", path)
    return rows[0], rows[1:]


def coerce_int(raw: Any, column: str = "value") -> int:
    """
    Blank -> 0, "1234" / "1234.0" -> 1234.
    Anything else non-numeric raises ValueError.
    """
    s = normalize_cell(raw)
    if not s:
        return 0
    try:
        v = float(s)
    except ValueError:
        raise ValueError(f"{column} is not numeric: {s!r}") from None
    if math.isnan(v):
        return 0
    if math.isinf(v):
        raise ValueError(f"{column} is not finite: {s!r}")
    if not v.is_integer():
        raise ValueError(f"{column} is not a whole number: {s!r}")
    return int(v)


def project_battle(row: Sequence[str]) -> Battle:
    """Pick the six fields we care about out of a raw battles.csv row."""
    if len(row) < MIN_BATTLE_COLUMNS:
        raise DatasetFormatError(f"Row has {len(row)} columns, need at least {MIN_BATTLE_COLUMNS}")
    try:
        return Battle(
            name=normalize_cell(row[COL_NAME]),
            year=coerce_int(row[COL_YEAR], "year"),
            attacker_won=normalize_cell(row[COL_ATTACKER_OUTCOME]).lower() == "win",
            attacker_size=coerce_int(row[COL_ATTACKER_SIZE], "attacker_size"),
            defender_size=coerce_int(row[COL_DEFENDER_SIZE], "defender_size"),
            region=normalize_cell(row[COL_REGION]),
        )
    except ValueError as e:
        raise DatasetFormatError(str(e)) from e


def load_battles(path: PathLike, skip_bad_rows: bool = True) -> List[Battle]:
    """
    Read battles.csv and project every data row into a Battle.

    With skip_bad_rows, rows that fail projection are logged and dropped;
    otherwise the first failure propagates (with path and row number).
    """
    path = Path(path)
    _, rows = read_battle_rows(path)
    battles = []
    for i, row in enumerate(rows, start=2):  # 1-based, header is line 1
        if not any(normalize_cell(c) for c in row):
            continue
        try:
            battles.append(project_battle(row))
        except DatasetFormatError as e:
            if not skip_bad_rows:
                raise DatasetFormatError(str(e), path, f"row {i}") from e
            logger.warning("Skipping row %d of %s: %s", i, path, e)
    logger.debug("Loaded %d battles from %s", len(battles), path)
    return battles


def battles_frame(battles: Iterable[Battle]) -> pd.DataFrame:
    rows = [
        {
            "name": b.name,
            "year": b.year,
            "attacker_won": b.attacker_won,
            "attacker_size": b.attacker_size,
            "defender_size": b.defender_size,
            "region": b.region,
        }
        for b in battles
    ]
    return pd.DataFrame(rows, columns=BATTLE_COLUMNS)


def load_battles_frame(path: PathLike) -> pd.DataFrame:
    """
    Load the raw battles CSV (all columns) for profiling and normalize the
    column names we rely on (case-insensitive):
      name, year, attacker_outcome, attacker_size, defender_size, region
    """
    try:
        df = pd.read_csv(path)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise DatasetFormatError(f"Unreadable CSV: {e}", path) from e
    cols = {str(c).strip().lower(): c for c in df.columns}
    required = ["name", "year", "attacker_outcome", "attacker_size", "defender_size", "region"]
    missing = [r for r in required if r not in cols]
    if missing:
        raise DatasetFormatError(
            f"CSV is missing required columns: {missing}. Found: {list(df.columns)}", path
        )
    return df.rename(columns={cols[r]: r for r in required})
