"""Outcome estimate data models."""

from dataclasses import dataclass


EVIDENCE_CONFIDENCE_RANGE = (10, 100)
MERCHANT_RESPONSE_HOURS_RANGE = (12, 72)


@dataclass(frozen=True)
class SliderInputs:
    """
    Slider positions feeding the outcome estimator.

    Attributes:
        evidence_confidence: How strong the customer rates their evidence (10-100)
        merchant_response_hours: Hours the merchant took to respond (12-72)
    """
    evidence_confidence: float = 60
    merchant_response_hours: float = 36


@dataclass(frozen=True)
class EstimatorOutputs:
    """
    Derived estimates, recomputed on every read.

    Attributes:
        resolution_days: Expected resolution window in days (2-14)
        approval_probability: Approval likelihood in percent (24-96)
        expedite_score: Priority score for fast-tracking (10-100)
    """
    resolution_days: int
    approval_probability: int
    expedite_score: int

    def to_dict(self) -> dict:
        return {
            "resolutionDays": self.resolution_days,
            "approvalProbability": self.approval_probability,
            "expediteScore": self.expedite_score,
        }
