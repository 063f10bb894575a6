"""Tests for the outcome estimator."""

import pytest

from refunddesk.engine.estimator import clamp_inputs, estimate_outcome
from refunddesk.models.estimate import SliderInputs
from refunddesk.models.highlights import INSIGHT_KEYS, build_insights

EVIDENCE_GRID = range(10, 101, 5)
HOURS_GRID = range(12, 73, 6)


def test_default_inputs():
    outputs = estimate_outcome(SliderInputs())
    assert outputs.resolution_days == 7
    assert outputs.approval_probability == 73
    assert outputs.expedite_score == 56


def test_halves_round_up():
    # 12 - 1.5 = 10.5
    outputs = estimate_outcome(SliderInputs(evidence_confidence=30, merchant_response_hours=72))
    assert outputs.resolution_days == 11


def test_strong_evidence_fast_response():
    outputs = estimate_outcome(SliderInputs(evidence_confidence=100, merchant_response_hours=12))
    assert outputs.resolution_days == 4
    assert outputs.approval_probability == 92


def test_outputs_stay_in_range():
    for evidence in EVIDENCE_GRID:
        for hours in HOURS_GRID:
            outputs = estimate_outcome(SliderInputs(evidence, hours))
            assert 2 <= outputs.resolution_days <= 14
            assert 24 <= outputs.approval_probability <= 96
            assert 10 <= outputs.expedite_score <= 100


def test_more_evidence_never_hurts():
    for hours in HOURS_GRID:
        previous = None
        for evidence in EVIDENCE_GRID:
            outputs = estimate_outcome(SliderInputs(evidence, hours))
            if previous is not None:
                assert outputs.resolution_days <= previous.resolution_days
                assert outputs.approval_probability >= previous.approval_probability
                assert outputs.expedite_score >= previous.expedite_score
            previous = outputs


def test_slower_merchant_never_helps():
    for evidence in EVIDENCE_GRID:
        previous = None
        for hours in HOURS_GRID:
            outputs = estimate_outcome(SliderInputs(evidence, hours))
            if previous is not None:
                assert outputs.resolution_days >= previous.resolution_days
                assert outputs.approval_probability <= previous.approval_probability
                assert outputs.expedite_score <= previous.expedite_score
            previous = outputs


@pytest.mark.parametrize(
    "raw,clamped",
    [
        (SliderInputs(500, 36), SliderInputs(100, 36)),
        (SliderInputs(0, 36), SliderInputs(10, 36)),
        (SliderInputs(60, 1), SliderInputs(60, 12)),
        (SliderInputs(60, 200), SliderInputs(60, 72)),
    ],
)
def test_out_of_range_inputs_are_clamped(raw, clamped):
    assert clamp_inputs(raw) == clamped
    assert estimate_outcome(raw) == estimate_outcome(clamped)


def test_estimate_is_recomputed_from_inputs():
    assert estimate_outcome(SliderInputs(40, 48)) == estimate_outcome(SliderInputs(40, 48))


def test_insight_widgets_cover_every_key():
    widgets = build_insights(estimate_outcome(SliderInputs()))
    assert tuple(w["key"] for w in widgets) == INSIGHT_KEYS
    assert widgets[0]["value"] == "7 days"
    assert widgets[1]["value"] == "73%"
