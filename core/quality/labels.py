#!/usr/bin/env python3
"""
Label Classifier - Map a final AQS onto an ordered quality label.
"""

from enum import Enum
from typing import Optional

from core.config_loader import LabelThresholds


class QualityLabel(str, Enum):
    NORMAL = 'NORMAL'
    USEFUL = 'USEFUL'
    PRO = 'PRO'
    STAR = 'STAR'

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {
    QualityLabel.NORMAL: 0,
    QualityLabel.USEFUL: 1,
    QualityLabel.PRO: 2,
    QualityLabel.STAR: 3,
}


def classify(aqs: float, thresholds: Optional[LabelThresholds] = None) -> QualityLabel:
    """
    Return the highest label whose threshold `aqs` reaches.

    Thresholds are checked from the top down, so the mapping is exhaustive
    and monotonic in `aqs`.
    """
    thresholds = thresholds or LabelThresholds()

    if aqs >= thresholds.star:
        return QualityLabel.STAR
    if aqs >= thresholds.pro:
        return QualityLabel.PRO
    if aqs >= thresholds.useful:
        return QualityLabel.USEFUL
    return QualityLabel.NORMAL
