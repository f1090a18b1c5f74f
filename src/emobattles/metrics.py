from __future__ import annotations
from typing import Any, Callable, Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .records import AGREEMENT_KEY, SIMILARITY_METRICS, Battle, EmojiPair

FIVE_NUMBER_INDEX = ["min", "q1", "median", "q3", "max"]


def count_by(items: Iterable[Any], key: Union[str, Callable[[Any], Any]]) -> pd.Series:
    """
    Frequency of key(item) across items, most common first (ties by key).
    `key` may be an attribute name or a callable.
    """
    getter = (lambda it: getattr(it, key)) if isinstance(key, str) else key
    keys = pd.Series([getter(it) for it in items], dtype=object)
    counts = keys.value_counts(sort=False, dropna=False)
    if counts.empty:
        out = pd.Series(dtype="int64", name="count")
    else:
        df = counts.rename("count").rename_axis("key").reset_index()
        df["key_str"] = df["key"].astype(str)
        df = df.sort_values(["count", "key_str"], ascending=[False, True])
        out = pd.Series(df["count"].astype("int64").to_numpy(), index=df["key"].tolist(), name="count")
    if isinstance(key, str):
        out.index.name = key
    return out


def five_number_summary(values: Iterable[float]) -> pd.Series:
    """min, q1, median, q3, max (linear interpolation, NaN dropped)."""
    arr = pd.Series(list(values), dtype=float).dropna().to_numpy()
    if arr.size == 0:
        raise ValueError("five_number_summary needs at least one non-NaN value")
    q = np.quantile(arr, [0.0, 0.25, 0.5, 0.75, 1.0])
    return pd.Series(q, index=FIVE_NUMBER_INDEX, dtype=float)


def describe_frame(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    if columns is not None:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise ValueError(f"DataFrame is missing columns: {missing}. Found: {list(df.columns)}")
        df = df[list(columns)]
    numeric = df.select_dtypes(include="number")
    if numeric.shape[1] == 0:
        raise ValueError("No numeric columns to describe")
    return numeric.describe()


def similarity_summary(pairs: Sequence[EmojiPair]) -> pd.DataFrame:
    # one row per metric (+ agreement), five-number columns
    rows = {}
    for m in (*SIMILARITY_METRICS, AGREEMENT_KEY):
        rows[m] = five_number_summary(p.score(m) for p in pairs)
    return pd.DataFrame(rows).T[FIVE_NUMBER_INDEX]


def top_pairs(pairs: Sequence[EmojiPair], n: int = 10, by: str = AGREEMENT_KEY) -> pd.DataFrame:
    """Highest scoring pairs on `by`, ties keep file order."""
    scored = [(p.score(by), i, p) for i, p in enumerate(pairs)]
    scored.sort(key=lambda t: (-t[0], t[1]))
    rows = [
        {
            "emoji_one": p.first.short_code,
            "emoji_two": p.second.short_code,
            "title_one": p.first.title,
            "title_two": p.second.title,
            by: s,
        }
        for s, _, p in scored[:n]
    ]
    return pd.DataFrame(rows, columns=["emoji_one", "emoji_two", "title_one", "title_two", by])


def win_rate_by(battles: Sequence[Battle], key: str = "region") -> pd.DataFrame:
    df = pd.DataFrame(
        {key: [getattr(b, key) for b in battles], "won": [b.attacker_won for b in battles]}
    )
    if df.empty:
        return pd.DataFrame(columns=[key, "battles", "attacker_wins", "win_rate"])
    agg = df.groupby(key).agg(
        battles=("won", "size"),
        attacker_wins=("won", "sum"),
    ).reset_index()
    agg["attacker_wins"] = agg["attacker_wins"].astype("int64")
    agg["win_rate"] = agg["attacker_wins"] / agg["battles"]
    return agg.sort_values(["battles", key], ascending=[False, True]).reset_index(drop=True)


def army_size_summary(battles: Sequence[Battle]) -> pd.DataFrame:
    """Five-number summary of attacker/defender sizes; unknown (0) sizes excluded."""
    out = {}
    for side in ("attacker_size", "defender_size"):
        known = [getattr(b, side) for b in battles if getattr(b, side) > 0]
        if known:
            out[side] = five_number_summary(known)
        else:
            out[side] = pd.Series(np.nan, index=FIVE_NUMBER_INDEX)
    return pd.DataFrame(out).T[FIVE_NUMBER_INDEX]
