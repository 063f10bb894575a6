"""Outcome estimates derived from the two slider inputs."""

import math

from ..models.estimate import (
    EVIDENCE_CONFIDENCE_RANGE,
    MERCHANT_RESPONSE_HOURS_RANGE,
    EstimatorOutputs,
    SliderInputs,
)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _round_half_up(value: float) -> int:
    # .5 rounds up, unlike round()
    return int(math.floor(value + 0.5))


def clamp_inputs(inputs: SliderInputs) -> SliderInputs:
    """Pull both slider values into their ranges."""
    return SliderInputs(
        evidence_confidence=_clamp(float(inputs.evidence_confidence), *EVIDENCE_CONFIDENCE_RANGE),
        merchant_response_hours=_clamp(
            float(inputs.merchant_response_hours), *MERCHANT_RESPONSE_HOURS_RANGE
        ),
    )


def estimate_outcome(inputs: SliderInputs) -> EstimatorOutputs:
    """
    Compute the resolution window, approval probability and expedite score.

    Inputs outside the slider ranges are clamped to them first.

    Args:
        inputs: Evidence confidence (10-100) and merchant response hours (12-72)

    Returns:
        EstimatorOutputs within their documented ranges
    """
    clamped = clamp_inputs(inputs)
    evidence = clamped.evidence_confidence
    hours = clamped.merchant_response_hours

    response_modifier = 1 - min(hours / 72, 1)

    resolution_days = _clamp(
        _round_half_up(12 - (evidence / 100) * 5 - response_modifier * 4), 2, 14
    )
    approval_probability = _clamp(
        _round_half_up(45 + (evidence / 100) * 40 + response_modifier * 8), 24, 96
    )
    expedite_score = _clamp(
        _round_half_up(evidence * 0.55 + response_modifier * 45), 10, 100
    )

    return EstimatorOutputs(
        resolution_days=int(resolution_days),
        approval_probability=int(approval_probability),
        expedite_score=int(expedite_score),
    )
