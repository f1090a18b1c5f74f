"""Load, profile and chart the EmoSim508 and War of the Five Kings datasets."""

from .errors import ConfigError, DatasetError, DatasetFormatError
from .records import AGREEMENT_KEY, SIMILARITY_METRICS, Battle, Emoji, EmojiPair

__all__ = [
    "AGREEMENT_KEY",
    "SIMILARITY_METRICS",
    "Battle",
    "ConfigError",
    "DatasetError",
    "DatasetFormatError",
    "Emoji",
    "EmojiPair",
]

__version__ = "0.1.0"
