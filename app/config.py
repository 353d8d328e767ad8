import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Tuple

# Benign accessories that never count as spoofing props
DEFAULT_ALLOWED_WEARABLES = frozenset({
    "headphones", "hat", "cap", "glasses", "sunglasses",
    "earrings", "necklace", "bracelet", "watch",
})

# Substrings of object labels that indicate a replay or photo attack
DEFAULT_SUSPICIOUS_KEYWORDS = ("phone", "screen", "tablet", "laptop", "paper")

DEFAULT_MIN_PRESENCE_RATIO = 0.8
DEFAULT_MAX_POSITION_JUMP = 0.1


def _split_labels(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class LivenessConfig:
    """
    Tunable parameters of the liveness evaluator.

    Args:
        allowed_wearables: Object labels excluded from the suspicious-object check.
        suspicious_keywords: Label substrings that mark an object as a spoofing prop.
        min_presence_ratio: Minimum share of the face's time span that must be tracked.
        max_position_jump: Largest normalized move of the face between consecutive positions.
    """
    allowed_wearables: FrozenSet[str] = DEFAULT_ALLOWED_WEARABLES
    suspicious_keywords: Tuple[str, ...] = DEFAULT_SUSPICIOUS_KEYWORDS
    min_presence_ratio: float = DEFAULT_MIN_PRESENCE_RATIO
    max_position_jump: float = DEFAULT_MAX_POSITION_JUMP

    def __post_init__(self) -> None:
        # Labels arrive in arbitrary case, so everything is compared casefolded
        object.__setattr__(
            self, "allowed_wearables",
            frozenset(label.casefold() for label in self.allowed_wearables),
        )
        object.__setattr__(
            self, "suspicious_keywords",
            tuple(keyword.casefold() for keyword in self.suspicious_keywords),
        )
        object.__setattr__(self, "min_presence_ratio", float(self.min_presence_ratio))
        object.__setattr__(self, "max_position_jump", float(self.max_position_jump))

        if not 0.0 <= self.min_presence_ratio <= 1.0:
            raise ValueError(
                f"min_presence_ratio must be between 0 and 1, got {self.min_presence_ratio}"
            )
        if self.max_position_jump < 0.0:
            raise ValueError(
                f"max_position_jump must not be negative, got {self.max_position_jump}"
            )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "LivenessConfig":
        """
        Builds a configuration from LIVENESS_* environment variables.
        Unset variables keep their defaults.
        """
        env = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}

        if env.get("LIVENESS_ALLOWED_WEARABLES"):
            overrides["allowed_wearables"] = frozenset(
                _split_labels(env["LIVENESS_ALLOWED_WEARABLES"])
            )
        if env.get("LIVENESS_SUSPICIOUS_KEYWORDS"):
            overrides["suspicious_keywords"] = _split_labels(env["LIVENESS_SUSPICIOUS_KEYWORDS"])
        if env.get("LIVENESS_MIN_PRESENCE_RATIO"):
            overrides["min_presence_ratio"] = float(env["LIVENESS_MIN_PRESENCE_RATIO"])
        if env.get("LIVENESS_MAX_POSITION_JUMP"):
            overrides["max_position_jump"] = float(env["LIVENESS_MAX_POSITION_JUMP"])

        return cls(**overrides)

    def is_allowed(self, label: str) -> bool:
        return label.casefold() in self.allowed_wearables

    def matching_keywords(self, label: str) -> List[str]:
        folded = label.casefold()
        return [keyword for keyword in self.suspicious_keywords if keyword in folded]

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["allowed_wearables"] = sorted(self.allowed_wearables)
        data["suspicious_keywords"] = list(self.suspicious_keywords)
        return data
