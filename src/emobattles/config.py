from __future__ import annotations
import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

from .errors import ConfigError
from .records import AGREEMENT_KEY, SIMILARITY_METRICS

ENV_PREFIX = "EMOBATTLES_"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class TourConfig:
    emoji_path: Path = Path("data/EmoSim508.json")
    battles_path: Path = Path("data/battles.csv")
    output_dir: Path = Path("outputs")
    threshold: float = 0.5
    filter_by: str = AGREEMENT_KEY
    chart_name: str = "battles_by_region.png"
    win_rate_chart_name: str = "win_rate_by_region.png"
    filtered_name: str = "emosim_filtered.json"
    log_level: str = "INFO"

    @property
    def chart_path(self) -> Path:
        return self.output_dir / self.chart_name

    @property
    def win_rate_chart_path(self) -> Path:
        return self.output_dir / self.win_rate_chart_name

    @property
    def filtered_path(self) -> Path:
        return self.output_dir / self.filtered_name

    def validate(self) -> "TourConfig":
        if not 0.0 <= self.threshold <= 1.0:
            raise ConfigError(f"threshold must be within [0, 1], got {self.threshold}")
        if self.filter_by != AGREEMENT_KEY and self.filter_by not in SIMILARITY_METRICS:
            raise ConfigError(
                f"filter_by must be {AGREEMENT_KEY!r} or one of {list(SIMILARITY_METRICS)}, got {self.filter_by!r}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Unknown log level {self.log_level!r}")
        return self


def _coerce(name: str, raw: Any) -> Any:
    if name.endswith("_path") or name == "output_dir":
        return Path(raw)
    if name == "threshold":
        try:
            return float(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"threshold must be a number, got {raw!r}") from None
    return str(raw)


def load_config(
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> TourConfig:
    """
    Defaults, then EMOBATTLES_<FIELD> environment variables, then explicit
    overrides (None values in overrides are ignored).
    """
    environ = os.environ if environ is None else environ
    values = {}
    for f in fields(TourConfig):
        env_key = ENV_PREFIX + f.name.upper()
        if env_key in environ:
            values[f.name] = _coerce(f.name, environ[env_key])
    for k, v in (overrides or {}).items():
        if v is None:
            continue
        if k not in {f.name for f in fields(TourConfig)}:
            raise ConfigError(f"Unknown config option {k!r}")
        values[k] = _coerce(k, v)
    return replace(TourConfig(), **values).validate()


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    # replace only our own handler so repeated calls don't duplicate output
    for h in list(root.handlers):
        if h.get_name() == "emobattles":
            root.removeHandler(h)
    handler = logging.StreamHandler()
    handler.set_name("emobattles")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level.upper())
