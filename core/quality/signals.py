#!/usr/bin/env python3
"""
Signal Extractors - Deterministic raw signals for answer quality scoring.

Four independent, side-effect free extractors:
- extract_content_signals: lexical/structural analysis of the answer body
- extract_behavior_signals: reactions, acceptance, flags and follow-ups
- extract_expert_signals: the author's expertise profile
- extract_trust_signals: response latency and edit history

Missing inputs never raise; every extractor falls back to a neutral record.
"""

import re
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from core.config_loader import ContentRules
from core.quality.keywords import count_keyword_hits
from core.quality.models import ContentSignals, BehaviorSignals, ExpertSignals, TrustSignals

HELPFUL = 'helpful'
NOT_HELPFUL = 'not_helpful'

# Unordered or numbered list markers at the start of a line
_BULLET_RE = re.compile(r'^[ \t]*(?:[-*+•●○◦▪▫]|\d+[.)])[ \t]+\S', re.MULTILINE)

_EXAMPLE_CUES = (
    'for example',
    'for instance',
    'e.g.',
    'example:',
    'as an example',
    'suppose',
    'imagine',
    'let\'s say',
    'say you',
    'such as:',
)

# Numeric walkthrough, e.g. "15,000 x 1.4 = 21,000"
_WALKTHROUGH_RE = re.compile(r'\d[\d,.]*\s*[x×*/÷+\-]\s*\d[\d,.]*(?:\s*[x×*/÷+\-]\s*\d[\d,.]*)*\s*=\s*\d')

_STEP_PATTERNS = (
    re.compile(r'^[ \t]*\d+[.)][ \t]+\S', re.MULTILINE),
    re.compile(r'\bstep\s*\d+', re.IGNORECASE),
    re.compile(r'^[ \t]*(?:first|second|third|next|then|finally)\b\s*[,:]', re.IGNORECASE | re.MULTILINE),
    re.compile(r'\b(?:firstly|secondly|thirdly)\b', re.IGNORECASE),
)


# ============= Content =============

def extract_content_signals(
    body: Optional[str],
    category: Optional[str] = None,
    rules: Optional[ContentRules] = None
) -> ContentSignals:
    """
    Extract content-related signals from an answer body.

    Args:
        body: Raw answer text
        category: Optional question category selecting the domain vocabulary
        rules: Content thresholds (generic length, keyword density floor)

    Returns:
        ContentSignals
    """
    rules = rules or ContentRules()
    text = (body or '').strip()

    if not text:
        return ContentSignals(is_generic=True)

    char_count = len(text)
    word_count = len(text.split())

    has_bullets = bool(_BULLET_RE.search(text))
    has_paragraphs = '\n\n' in text or text.count('\n') >= 2

    lowered = text.lower()
    has_example = any(cue in lowered for cue in _EXAMPLE_CUES) or bool(_WALKTHROUGH_RE.search(text))
    has_steps = any(pattern.search(text) for pattern in _STEP_PATTERNS)

    hits = count_keyword_hits(text, category)
    density = hits / word_count if word_count else 0.0
    has_domain_keywords = hits >= rules.domain_min_hits and density >= rules.domain_density_floor

    is_generic = (
        char_count < rules.generic_max_chars
        and not (has_bullets or has_steps or has_example or has_domain_keywords)
    )

    return ContentSignals(
        char_count=char_count,
        word_count=word_count,
        has_bullets=has_bullets,
        has_paragraphs=has_paragraphs,
        has_example=has_example,
        has_steps=has_steps,
        domain_keyword_density=round(density, 4),
        has_domain_keywords=has_domain_keywords,
        is_generic=is_generic,
    )


# ============= Behavior =============

def extract_behavior_signals(
    reactions: Optional[Iterable[Any]],
    asker_id: Any,
    is_accepted: bool,
    flags: Optional[Iterable[Any]] = None,
    followup_count: int = 0
) -> BehaviorSignals:
    """
    Extract behavior signals from reactions, acceptance and flags.

    `reactions` items need `user_id` and `type`; `flags` is only counted.
    The asker is the question's author; their reaction is reported apart
    from the totals.
    """
    reactions = list(reactions or [])
    flags = list(flags or [])

    asker_reaction = None
    if asker_id is not None:
        asker_reaction = next((r for r in reactions if r.user_id == asker_id), None)
    asker_type = getattr(asker_reaction, 'type', None)

    return BehaviorSignals(
        asker_helpful=asker_type == HELPFUL,
        asker_not_helpful=asker_type == NOT_HELPFUL,
        total_helpful=sum(1 for r in reactions if r.type == HELPFUL),
        total_not_helpful=sum(1 for r in reactions if r.type == NOT_HELPFUL),
        is_accepted=bool(is_accepted),
        total_flags=len(flags),
        followup_count=max(0, int(followup_count or 0)),
    )


# ============= Expert =============

def extract_expert_signals(profile: Optional[Any]) -> ExpertSignals:
    """
    Extract expert signals from an AuthorExpertiseProfile.

    An absent profile yields the neutral record (has_profile=False), which
    the combiner turns into a multiplier of exactly 1.0.
    """
    if profile is None:
        return ExpertSignals()

    strength = float(profile.profile_strength or 0)
    total_answers = int(profile.total_answers or 0)
    accepted = int(getattr(profile, 'accepted_answers', 0) or 0)
    acceptance_rate = min(1.0, accepted / total_answers) if total_answers > 0 else 0.0

    return ExpertSignals(
        profile_strength=max(0.0, min(100.0, strength)),
        author_acceptance_rate=round(acceptance_rate, 4),
        author_total_answers=total_answers,
        author_expert_level=profile.expert_level or 'newcomer',
        has_profile=True,
    )


# ============= Trust =============

def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def extract_trust_signals(
    answer_created_at: Optional[datetime],
    question_created_at: Optional[datetime],
    edit_count: int = 0
) -> TrustSignals:
    """
    Extract trust signals from timestamps and edit history.

    Response time is None when either timestamp is missing; an answer
    timestamped before its question counts as 0 minutes.
    """
    answered = _as_utc(answer_created_at)
    asked = _as_utc(question_created_at)
    edit_count = max(0, int(edit_count or 0))

    response_time_minutes = None
    if answered is not None and asked is not None:
        response_time_minutes = round(max(0.0, (answered - asked).total_seconds() / 60.0), 2)

    return TrustSignals(
        response_time_minutes=response_time_minutes,
        edit_count=edit_count,
        has_been_edited=edit_count > 0,
    )
