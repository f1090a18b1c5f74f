from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

# EmoSim508: nine model-derived similarity scores per pair, in file order
SIMILARITY_METRICS: Tuple[str, ...] = (
    "googleSenseLabel",
    "googleSenseDef",
    "googleSenseAll",
    "twitterSenseLabel",
    "twitterSenseDef",
    "twitterSenseAll",
    "combinedSenseLabel",
    "combinedSenseDef",
    "combinedSenseAll",
)
AGREEMENT_KEY = "agreement"


@dataclass(frozen=True)
class Emoji:
    long_code: str
    short_code: str
    title: str

    def to_dict(self) -> Dict[str, str]:
        return {"longCode": self.long_code, "shortCode": self.short_code, "title": self.title}


@dataclass(frozen=True)
class EmojiPair:
    """
    One EmoSim508 entry: two emoji, nine similarity metrics and the
    human annotator agreement score.
    """
    first: Emoji
    second: Emoji
    similarity: Dict[str, float] = field(default_factory=dict)
    agreement: float = 0.0

    def score(self, name: str) -> float:
        """Agreement for "agreement", else the named similarity metric (KeyError if unknown)."""
        if name == AGREEMENT_KEY:
            return self.agreement
        if name not in SIMILARITY_METRICS:
            raise KeyError(f"Unknown score {name!r}; expected 'agreement' or one of {list(SIMILARITY_METRICS)}")
        return self.similarity[name]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emojiPair": {"emojiOne": self.first.to_dict(), "emojiTwo": self.second.to_dict()},
            "emojiPairSimilarity": {m: self.similarity[m] for m in SIMILARITY_METRICS},
            "humanAnnotatorAgreement": self.agreement,
        }


@dataclass(frozen=True)
class Battle:
    name: str
    year: int
    attacker_won: bool
    attacker_size: int   # 0 when unknown
    defender_size: int   # 0 when unknown
    region: str
