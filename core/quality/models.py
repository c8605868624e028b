#!/usr/bin/env python3
"""
Quality Models - Data structures for signals, breakdowns and results.

One record per signal family, one per family's bonus/penalty breakdown,
and the combined QualityDetails persisted as the metrics `details` column.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, Optional

from core.quality.labels import QualityLabel


class RecomputeTrigger(str, Enum):
    """Domain event that caused a recompute. Provenance only."""
    SUBMIT = 'SUBMIT'
    REACTION = 'REACTION'
    ACCEPT = 'ACCEPT'
    EDIT = 'EDIT'
    FLAG = 'FLAG'
    MANUAL = 'MANUAL'
    PROFILE_UPDATE = 'PROFILE_UPDATE'
    CRON = 'CRON'


# ============= Raw signals =============

@dataclass(frozen=True)
class ContentSignals:
    char_count: int = 0
    word_count: int = 0
    has_bullets: bool = False
    has_paragraphs: bool = False
    has_example: bool = False
    has_steps: bool = False
    domain_keyword_density: float = 0.0
    has_domain_keywords: bool = False
    is_generic: bool = False


@dataclass(frozen=True)
class BehaviorSignals:
    asker_helpful: bool = False
    asker_not_helpful: bool = False
    total_helpful: int = 0
    total_not_helpful: int = 0
    is_accepted: bool = False
    total_flags: int = 0
    followup_count: int = 0


@dataclass(frozen=True)
class ExpertSignals:
    profile_strength: float = 0.0
    author_acceptance_rate: float = 0.0
    author_total_answers: int = 0
    author_expert_level: str = 'newcomer'
    has_profile: bool = False


@dataclass(frozen=True)
class TrustSignals:
    response_time_minutes: Optional[float] = None
    edit_count: int = 0
    has_been_edited: bool = False


@dataclass(frozen=True)
class RawSignals:
    content: ContentSignals = field(default_factory=ContentSignals)
    behavior: BehaviorSignals = field(default_factory=BehaviorSignals)
    expert: ExpertSignals = field(default_factory=ExpertSignals)
    trust: TrustSignals = field(default_factory=TrustSignals)


# ============= Breakdowns =============
# Penalties are stored as non-positive numbers so that a sub-score is the
# plain sum of its breakdown (before clamping).

@dataclass(frozen=True)
class ContentBreakdown:
    length_score: float = 0.0
    structure_score: float = 0.0
    example_bonus: float = 0.0
    steps_bonus: float = 0.0
    domain_bonus: float = 0.0
    generic_penalty: float = 0.0


@dataclass(frozen=True)
class EngagementBreakdown:
    asker_helpful_bonus: float = 0.0
    accepted_bonus: float = 0.0
    followup_bonus: float = 0.0


@dataclass(frozen=True)
class ExpertBreakdown:
    base_score: float = 0.0
    profile_multiplier: float = 1.0
    acceptance_rate_bonus: float = 0.0
    flag_penalty: float = 0.0


@dataclass(frozen=True)
class TrustBreakdown:
    base_score: float = 0.0
    response_time_bonus: float = 0.0
    edit_penalty: float = 0.0


@dataclass(frozen=True)
class QualityDetails:
    content: ContentBreakdown
    engagement: EngagementBreakdown
    expert: ExpertBreakdown
    trust: TrustBreakdown
    raw_signals: RawSignals

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form stored in AnswerQualityMetrics.details."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'QualityDetails':
        raw = data.get('raw_signals') or {}
        return cls(
            content=ContentBreakdown(**(data.get('content') or {})),
            engagement=EngagementBreakdown(**(data.get('engagement') or {})),
            expert=ExpertBreakdown(**(data.get('expert') or {})),
            trust=TrustBreakdown(**(data.get('trust') or {})),
            raw_signals=RawSignals(
                content=ContentSignals(**(raw.get('content') or {})),
                behavior=BehaviorSignals(**(raw.get('behavior') or {})),
                expert=ExpertSignals(**(raw.get('expert') or {})),
                trust=TrustSignals(**(raw.get('trust') or {})),
            ),
        )


# ============= Results =============

@dataclass(frozen=True)
class SubScores:
    content: float = 0.0
    engagement: float = 0.0
    expert: float = 0.0
    trust: float = 0.0


@dataclass(frozen=True)
class AQSResult:
    """Output of the combiner and classifier for one answer."""
    aqs: int
    label: QualityLabel
    scores: SubScores
    expert_multiplier: float
    details: QualityDetails


@dataclass
class RecomputeResult:
    """Outcome of a single orchestrated recompute."""
    answer_id: Any
    aqs: int
    label: QualityLabel
    trigger: RecomputeTrigger
    previous_aqs: Optional[int] = None
    previous_label: Optional[str] = None
    changed: bool = True
