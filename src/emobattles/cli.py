from __future__ import annotations
import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pandas as pd

from . import data_prep, metrics, viz
from .config import TourConfig, configure_logging, load_config
from .errors import ConfigError, DatasetError
from .records import AGREEMENT_KEY, SIMILARITY_METRICS

logger = logging.getLogger(__name__)


@dataclass
class TourReport:
    pairs_loaded: int = 0
    pairs_kept: int = 0
    battles_loaded: int = 0
    region_counts: Optional[pd.Series] = None
    similarity_summary: Optional[pd.DataFrame] = None
    battles_summary: Optional[pd.DataFrame] = None
    raw_battles_summary: Optional[pd.DataFrame] = None
    outputs: List[Path] = field(default_factory=list)
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _emoji_stage(cfg: TourConfig, report: TourReport) -> None:
    pairs = data_prep.load_emoji_pairs(cfg.emoji_path)
    report.pairs_loaded = len(pairs)
    logger.info("Loaded %d emoji pairs from %s", len(pairs), cfg.emoji_path)
    if not pairs:
        logger.warning("No emoji pairs in %s; nothing to filter", cfg.emoji_path)
    else:
        df = data_prep.emoji_pairs_frame(pairs)
        logger.info("Similarity metrics:\n%s", metrics.describe_frame(df).to_string())
        report.similarity_summary = metrics.similarity_summary(pairs)
        logger.info("Five-number summary per metric:\n%s", report.similarity_summary.to_string())
        logger.info("Top pairs by %s:\n%s", cfg.filter_by,
                    metrics.top_pairs(pairs, n=5, by=cfg.filter_by).to_string(index=False))

    kept = data_prep.filter_pairs(pairs, cfg.threshold, by=cfg.filter_by)
    report.pairs_kept = len(kept)
    out = data_prep.write_pairs_json(kept, cfg.filtered_path)
    report.outputs.append(out)
    logger.info("Kept %d/%d pairs with %s >= %g -> %s",
                len(kept), len(pairs), cfg.filter_by, cfg.threshold, out)


def _battles_stage(cfg: TourConfig, report: TourReport) -> None:
    battles = data_prep.load_battles(cfg.battles_path)
    report.battles_loaded = len(battles)
    logger.info("Loaded %d battles from %s", len(battles), cfg.battles_path)
    if not battles:
        raise DatasetError(f"No battles in {cfg.battles_path}")

    report.battles_summary = metrics.describe_frame(data_prep.battles_frame(battles))
    logger.info("Projected battles:\n%s", report.battles_summary.to_string())
    # the raw profile needs named headers; projection above only needs column order
    try:
        report.raw_battles_summary = metrics.describe_frame(data_prep.load_battles_frame(cfg.battles_path))
        logger.info("Raw battles table:\n%s", report.raw_battles_summary.to_string())
    except ValueError as e:
        logger.warning("Skipping raw battles profile: %s", e)

    counts = metrics.count_by(battles, "region")
    report.region_counts = counts
    logger.info("Battles by region:\n%s", counts.to_string())
    logger.info("Army sizes (unknown excluded):\n%s", metrics.army_size_summary(battles).to_string())

    rates = metrics.win_rate_by(battles, "region")
    logger.info("Attacker win rate by region:\n%s", rates.to_string(index=False))

    _, _, saved = viz.plot_bar_counts(counts, out_path=str(cfg.chart_path))
    report.outputs.append(Path(saved))
    _, _, saved = viz.plot_win_rates(rates, out_path=str(cfg.win_rate_chart_path))
    report.outputs.append(Path(saved))
    logger.info("Charts written to %s", cfg.output_dir)


STAGES = (("emoji", _emoji_stage), ("battles", _battles_stage))


def run_tour(cfg: TourConfig) -> TourReport:
    """
    Run every stage in order. A stage that fails is logged and recorded in
    report.errors; later stages still run.
    """
    report = TourReport()
    for name, stage in STAGES:
        try:
            stage(cfg, report)
        except (DatasetError, OSError) as e:
            logger.error("%s stage failed: %s", name, e)
            report.errors[name] = str(e)
    return report


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="emobattles",
        description="Profile EmoSim508 emoji similarity and War of the Five Kings battles.",
    )
    ap.add_argument("--emoji", dest="emoji_path", help="EmoSim508 JSON file")
    ap.add_argument("--battles", dest="battles_path", help="battles CSV file")
    ap.add_argument("--out", dest="output_dir", help="directory for the filtered JSON and charts")
    ap.add_argument("--threshold", type=float, help="keep pairs scoring at least this (0..1)")
    ap.add_argument("--by", dest="filter_by", choices=[AGREEMENT_KEY, *SIMILARITY_METRICS],
                    help="score used for filtering")
    ap.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING, ...")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        cfg = load_config(vars(args))
    except ConfigError as e:
        configure_logging("INFO")
        logger.error("Invalid configuration: %s", e)
        return 2
    configure_logging(cfg.log_level)
    report = run_tour(cfg)
    return 0 if report.ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
