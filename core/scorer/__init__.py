#!/usr/bin/env python3
"""
Scoring Module - weighted overlap between job requirements and repository skills.

Public API:
- score_match: pure scoring function (0-100)
- explain_match: score plus per-requirement breakdown

- models.py: Data structures (MatchBreakdown, RequirementContribution)
- coverage.py: Weighted overlap formula
"""

from core.scorer.models import MatchBreakdown, RequirementContribution
from core.scorer.coverage import score_match, explain_match

__all__ = [
    'score_match',
    'explain_match',
    'MatchBreakdown',
    'RequirementContribution',
]
