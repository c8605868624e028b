#!/usr/bin/env python3
"""
Score Combiner - Sub-scores and the final Answer Quality Score.

Each family's raw signals become a 0-100 sub-score through fixed
bonus/penalty rules from QualityConfig. The four sub-scores are blended:

    composite = clamp(0, 100, content*w_c + engagement*w_e + expert*w_x + trust*w_t)
    aqs = clamp(0, 100, round_half_up(composite * expert_multiplier))

The expert multiplier is derived from the author's profile strength and
scales the whole composite, not only the expert quarter of it.
"""

import logging
import math
from typing import Optional, Tuple

from core.config_loader import (
    QualityConfig, ContentRules, EngagementRules, ExpertRules, TrustRules,
    DEFAULT_QUALITY_CONFIG
)
from core.quality.labels import classify
from core.quality.models import (
    ContentSignals, BehaviorSignals, ExpertSignals, TrustSignals, RawSignals,
    ContentBreakdown, EngagementBreakdown, ExpertBreakdown, TrustBreakdown,
    QualityDetails, SubScores, AQSResult
)

logger = logging.getLogger(__name__)

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def clamp(value: float, low: float = SCORE_MIN, high: float = SCORE_MAX) -> float:
    return max(low, min(high, value))


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def _r(value: float) -> float:
    # Two decimals keeps persisted breakdowns stable across recomputes
    return round(value, 2)


def calculate_content_score(
    signals: ContentSignals,
    rules: ContentRules
) -> Tuple[float, ContentBreakdown]:
    """
    Content sub-score: saturating length credit plus structure bonuses,
    minus the generic penalty.

    Returns: (score, breakdown)
    """
    span = rules.length_saturation_chars - rules.length_floor_chars
    length_fraction = clamp((signals.char_count - rules.length_floor_chars) / span, 0.0, 1.0)
    length_score = _r(rules.length_max_score * length_fraction)

    structure_score = 0.0
    if signals.has_bullets:
        structure_score += rules.bullets_bonus
    if signals.has_paragraphs:
        structure_score += rules.paragraphs_bonus

    breakdown = ContentBreakdown(
        length_score=length_score,
        structure_score=structure_score,
        example_bonus=rules.example_bonus if signals.has_example else 0.0,
        steps_bonus=rules.steps_bonus if signals.has_steps else 0.0,
        domain_bonus=rules.domain_bonus if signals.has_domain_keywords else 0.0,
        generic_penalty=-rules.generic_penalty if signals.is_generic else 0.0,
    )

    raw = (
        breakdown.length_score + breakdown.structure_score + breakdown.example_bonus
        + breakdown.steps_bonus + breakdown.domain_bonus + breakdown.generic_penalty
    )
    return _r(clamp(raw)), breakdown


def calculate_engagement_score(
    signals: BehaviorSignals,
    rules: EngagementRules
) -> Tuple[float, EngagementBreakdown]:
    """
    Engagement sub-score.

    Only the asker's helpful reaction, acceptance and follow-ups count;
    reactions from other users are reported in the raw signals but do not
    feed the score.
    """
    breakdown = EngagementBreakdown(
        asker_helpful_bonus=rules.asker_helpful_bonus if signals.asker_helpful else 0.0,
        accepted_bonus=rules.accepted_bonus if signals.is_accepted else 0.0,
        followup_bonus=min(signals.followup_count * rules.followup_bonus, rules.followup_max_bonus),
    )

    raw = breakdown.asker_helpful_bonus + breakdown.accepted_bonus + breakdown.followup_bonus
    return _r(clamp(raw)), breakdown


def calculate_expert_multiplier(signals: ExpertSignals, rules: ExpertRules) -> float:
    """Map profile strength (0-100) onto [multiplier_min, multiplier_max]; 1.0 without a profile."""
    if not signals.has_profile:
        return 1.0
    strength = clamp(signals.profile_strength) / SCORE_MAX
    return _r(rules.multiplier_min + (rules.multiplier_max - rules.multiplier_min) * strength)


def calculate_expert_score(
    signals: ExpertSignals,
    behavior: BehaviorSignals,
    rules: ExpertRules
) -> Tuple[float, float, ExpertBreakdown]:
    """
    Expert sub-score and multiplier.

    Consumes the behavior family's flag count: community flags weigh on the
    author's standing whichever answer triggered the recompute.

    Returns: (score, multiplier, breakdown)
    """
    multiplier = calculate_expert_multiplier(signals, rules)

    flag_penalty = 0.0
    if behavior.total_flags > 0:
        flag_penalty = -min(behavior.total_flags * rules.flag_penalty, rules.flag_max_penalty)

    breakdown = ExpertBreakdown(
        base_score=rules.base_score,
        profile_multiplier=multiplier,
        acceptance_rate_bonus=_r(rules.acceptance_rate_max_bonus * clamp(signals.author_acceptance_rate, 0.0, 1.0)),
        flag_penalty=flag_penalty,
    )

    raw = breakdown.base_score + breakdown.acceptance_rate_bonus + breakdown.flag_penalty
    return _r(clamp(raw)), multiplier, breakdown


def _response_time_bonus(minutes: Optional[float], rules: TrustRules) -> float:
    if minutes is None:
        return 0.0
    if minutes < rules.instant_max_minutes:
        return rules.instant_bonus
    if minutes < rules.fast_max_minutes:
        return rules.fast_bonus
    if minutes < rules.medium_max_minutes:
        return rules.medium_bonus
    return 0.0


def calculate_trust_score(
    signals: TrustSignals,
    rules: TrustRules
) -> Tuple[float, TrustBreakdown]:
    """
    Trust sub-score: response-time band bonus minus the edit penalty.

    Near-instant answers earn less than fast ones, very slow ones earn
    nothing; edits beyond the free allowance cost trust.
    """
    excess_edits = max(0, signals.edit_count - rules.free_edits)
    edit_penalty = -min(excess_edits * rules.edit_penalty, rules.edit_max_penalty) if excess_edits else 0.0

    breakdown = TrustBreakdown(
        base_score=rules.base_score,
        response_time_bonus=_response_time_bonus(signals.response_time_minutes, rules),
        edit_penalty=edit_penalty,
    )

    raw = breakdown.base_score + breakdown.response_time_bonus + breakdown.edit_penalty
    return _r(clamp(raw)), breakdown


def combine_scores(scores: SubScores, multiplier: float, config: QualityConfig) -> int:
    """Weighted composite scaled by the expert multiplier, as an integer in [0, 100]."""
    w = config.weights
    composite = clamp(
        scores.content * w.content
        + scores.engagement * w.engagement
        + scores.expert * w.expert
        + scores.trust * w.trust
    )
    return int(clamp(round_half_up(composite * multiplier)))


def compute_aqs(signals: RawSignals, config: Optional[QualityConfig] = None) -> AQSResult:
    """
    Compute the Answer Quality Score from all four signal families.

    Pure and deterministic: identical signals and config always give an
    identical result.
    """
    config = config or DEFAULT_QUALITY_CONFIG

    content_score, content_breakdown = calculate_content_score(signals.content, config.content)
    engagement_score, engagement_breakdown = calculate_engagement_score(signals.behavior, config.engagement)
    expert_score, multiplier, expert_breakdown = calculate_expert_score(
        signals.expert, signals.behavior, config.expert
    )
    trust_score, trust_breakdown = calculate_trust_score(signals.trust, config.trust)

    scores = SubScores(
        content=content_score,
        engagement=engagement_score,
        expert=expert_score,
        trust=trust_score,
    )
    aqs = combine_scores(scores, multiplier, config)
    label = classify(aqs, config.labels)

    logger.debug(
        f"AQS={aqs} ({label.value}): content={content_score}, engagement={engagement_score}, "
        f"expert={expert_score}, trust={trust_score}, multiplier={multiplier}"
    )

    return AQSResult(
        aqs=aqs,
        label=label,
        scores=scores,
        expert_multiplier=multiplier,
        details=QualityDetails(
            content=content_breakdown,
            engagement=engagement_breakdown,
            expert=expert_breakdown,
            trust=trust_breakdown,
            raw_signals=signals,
        ),
    )
