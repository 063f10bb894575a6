"""Highlight cards and insight widgets shown beside the form."""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from .estimate import EstimatorOutputs


@dataclass(frozen=True)
class HighlightCard:
    """
    A reassurance card in the highlight rotation group.

    Attributes:
        title: Card title, also its key in the rotation group
        description: Supporting text exposed for the active card
        icon: Icon name for the shell to render
    """
    title: str
    description: str
    icon: str


HIGHLIGHT_CARDS: Tuple[HighlightCard, ...] = (
    HighlightCard(
        title="Secure evidence handling",
        description="All uploaded proof is encrypted and routed only to the specialists assigned to your case.",
        icon="shield",
    ),
    HighlightCard(
        title="Response within 48 hours",
        description="Real-time routing ensures our compliance team reviews every submission in under two business days.",
        icon="clock",
    ),
    HighlightCard(
        title="Dedicated dispute guidance",
        description="Chat with our agents for tailored next steps while your investigation is progressing.",
        icon="conversation",
    ),
)

INSIGHT_KEYS: Tuple[str, ...] = ("resolution", "approval", "expedite")


def find_card(title: str) -> HighlightCard:
    for card in HIGHLIGHT_CARDS:
        if card.title == title:
            return card
    raise KeyError(title)


def build_insights(outputs: EstimatorOutputs) -> List[Dict[str, Any]]:
    """Render estimator outputs as insight widgets, one per INSIGHT_KEYS entry."""
    return [
        {
            "key": "resolution",
            "label": "Estimated resolution",
            "value": f"{outputs.resolution_days} days",
            "caption": "Stronger evidence and faster merchant replies shorten the window",
            "accent": "#0ea5e9",
        },
        {
            "key": "approval",
            "label": "Approval likelihood",
            "value": f"{outputs.approval_probability}%",
            "caption": "Based on similar disputes with comparable evidence",
            "accent": "#10b981" if outputs.approval_probability >= 70 else "#f59e0b",
        },
        {
            "key": "expedite",
            "label": "Expedite score",
            "value": outputs.expedite_score,
            "caption": "Scores above 70 qualify for priority review",
            "accent": "#6366f1",
        },
    ]
