#!/usr/bin/env python3
"""
Domain Keywords - Fixed career-domain vocabularies per question category.

Used by the content extractor to measure how much of an answer talks in the
vocabulary of the question's domain.
"""

import re
from functools import lru_cache
from typing import Dict, List, Optional, Pattern, Tuple

DOMAIN_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    'salary': (
        'salary', 'wage', 'wages', 'payroll', 'gross', 'net', 'bonus',
        'overtime', 'allowance', 'raise', 'compensation', 'hourly',
        'minimum wage', 'base pay', 'deduction', 'deductions',
    ),
    'tax': (
        'tax', 'taxes', 'taxable', 'withholding', 'exemption', 'bracket',
        'deduction', 'deductions', 'income', 'return', 'filing', 'rate',
        'tax-free', 'liability',
    ),
    'insurance': (
        'insurance', 'premium', 'premiums', 'contribution', 'contributions',
        'pension', 'retirement', 'coverage', 'social security', 'disability',
        'unemployment', 'benefits', 'claim',
    ),
    'labor_law': (
        'contract', 'employer', 'employee', 'severance', 'termination',
        'notice period', 'probation', 'labor law', 'labour law', 'dismissal',
        'leave', 'overtime', 'working hours', 'clause', 'court',
    ),
    'career': (
        'career', 'promotion', 'skills', 'mentor', 'manager', 'role',
        'seniority', 'growth', 'experience', 'portfolio', 'networking',
        'certification', 'transition',
    ),
    'interview': (
        'interview', 'interviewer', 'recruiter', 'offer', 'negotiation',
        'negotiate', 'behavioral', 'technical', 'assessment', 'hiring',
        'follow-up', 'reference', 'references',
    ),
    'resume': (
        'resume', 'cv', 'cover letter', 'achievements', 'ats', 'keywords',
        'experience', 'education', 'skills', 'summary', 'portfolio',
        'linkedin', 'format',
    ),
}


def _all_keywords() -> Tuple[str, ...]:
    seen = {}
    for terms in DOMAIN_KEYWORDS.values():
        for term in terms:
            seen.setdefault(term, None)
    return tuple(seen)


def category_key(category: Optional[str]) -> Optional[str]:
    """Known vocabulary key for a free-text category, or None."""
    if category:
        key = category.strip().lower()
        if key in DOMAIN_KEYWORDS:
            return key
    return None


def vocabulary_for(category: Optional[str]) -> Tuple[str, ...]:
    """Vocabulary for a category, or the union of all categories when unknown."""
    key = category_key(category)
    if key is not None:
        return DOMAIN_KEYWORDS[key]
    return _all_keywords()


# Keyed by category_key(), so at most one entry per known category plus None
@lru_cache(maxsize=None)
def _compiled(category: Optional[str]) -> List[Pattern]:
    return [
        re.compile(r'(?<![\w-])' + re.escape(term) + r'(?![\w-])', re.IGNORECASE)
        for term in vocabulary_for(category)
    ]


def count_keyword_hits(text: str, category: Optional[str] = None) -> int:
    """Number of vocabulary term occurrences in `text`."""
    if not text:
        return 0
    return sum(len(pattern.findall(text)) for pattern in _compiled(category_key(category)))
