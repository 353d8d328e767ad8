from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict


class VerdictReason(Enum):
    """
    The fixed set of reasons a liveness verdict can carry.
    The value is the machine-readable reason code.
    """
    NO_FACE_DETECTED = "no_face_detected"
    INCONSISTENT_PRESENCE_OR_MOVEMENT = "inconsistent_presence_or_movement"
    MALICIOUS_OBJECT_DETECTED = "malicious_object_detected"
    EVALUATION_ERROR = "evaluation_error"
    PASSED = "passed"

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    VerdictReason.NO_FACE_DETECTED: "No face detected. Liveness check failed.",
    VerdictReason.INCONSISTENT_PRESENCE_OR_MOVEMENT: (
        "Inconsistent face presence or unnatural movements detected. Liveness check failed."
    ),
    VerdictReason.MALICIOUS_OBJECT_DETECTED: "Malicious attempt detected. Liveness check failed.",
    VerdictReason.EVALUATION_ERROR: "An error occurred during liveness validation.",
    VerdictReason.PASSED: "Liveness check passed.",
}


@dataclass(frozen=True)
class Verdict:
    passed: bool
    reason: VerdictReason

    @classmethod
    def success(cls) -> "Verdict":
        return cls(True, VerdictReason.PASSED)

    @classmethod
    def failure(cls, reason: VerdictReason) -> "Verdict":
        return cls(False, reason)

    @property
    def message(self) -> str:
        return self.reason.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "passed": self.passed,
            "reason": self.reason.value,
            "message": self.message,
        }


@dataclass(frozen=True)
class EvaluationFault:
    """
    Malformed or partially absent annotation data.

    The detail is meant for logs only; callers see the opaque
    evaluation_error verdict produced by ``to_verdict``.
    """
    detail: str

    def to_verdict(self) -> Verdict:
        return Verdict.failure(VerdictReason.EVALUATION_ERROR)
