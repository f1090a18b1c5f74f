from __future__ import annotations
import os
from typing import Optional, Tuple

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def _ensure_dir(p: Optional[str]) -> None:
    if p:
        d = os.path.dirname(p)
        if d and not os.path.exists(d):
            os.makedirs(d, exist_ok=True)


def _label(k) -> str:
    s = str(k) if k is not None and str(k) else "(blank)"
    # a literal "$" would otherwise start mathtext
    return s.replace("$", r"\$")


def _finish(fig: plt.Figure, out_path: Optional[str], show: bool) -> Optional[str]:
    fig.tight_layout()
    saved = None
    if out_path:
        out_path = os.fspath(out_path)
        _ensure_dir(out_path)
        fig.savefig(out_path, dpi=150, bbox_inches="tight", format="png")
        saved = out_path
    if show:
        plt.show()
    else:
        plt.close(fig)
    return saved


def plot_bar_counts(
    counts: pd.Series,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    title: str = "Battles by region",
    xlabel: str = "Region",
    ylabel: str = "Battles",
    color: str = "tab:blue",
    rotate: int = 45,
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Vertical bar chart of a count Series (index -> bar labels).
    Bars are annotated with their value; saved as PNG when out_path is given.
    """
    if counts is None or len(counts) == 0:
        raise ValueError("Nothing to plot: counts is empty")

    labels = [_label(k) for k in counts.index]
    vals = counts.to_numpy()
    x = np.arange(len(vals))

    fig, ax = plt.subplots(figsize=(max(6, 0.7 * len(vals) + 2), 4.5))
    bars = ax.bar(x, vals, color=color)
    ax.set_xticks(x)
    ax.set_xticklabels(labels, rotation=rotate, ha="right" if rotate else "center")
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    ax.bar_label(bars, fmt="%g", padding=2, fontsize=8)
    ax.margins(y=0.1)

    saved = _finish(fig, out_path, show)
    return fig, ax, saved


def plot_win_rates(
    rates: pd.DataFrame,
    out_path: Optional[str] = None,
    show: bool = False,
    *,
    key: str = "region",
) -> Tuple[plt.Figure, plt.Axes, Optional[str]]:
    """
    Horizontal bars of attacker win rate per key.
    Expects columns: [key, 'battles', 'win_rate'] (see metrics.win_rate_by).
    """
    required = {key, "battles", "win_rate"}
    missing = required - set(rates.columns)
    if missing:
        raise ValueError(f"rates is missing columns: {missing}")
    if rates.empty:
        raise ValueError("Nothing to plot: rates is empty")

    r = rates.sort_values("win_rate")
    labels = [f"{_label(k)} (n={n})" for k, n in zip(r[key], r["battles"])]
    fig, ax = plt.subplots(figsize=(8, max(3, 0.45 * len(r) + 1)))
    ax.barh(labels, r["win_rate"].to_numpy(), color="tab:red")
    ax.set_xlim(0, 1)
    ax.set_xlabel("Attacker win rate")
    ax.set_title(f"Attacker win rate by {key}")

    saved = _finish(fig, out_path, show)
    return fig, ax, saved
