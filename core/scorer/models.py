#!/usr/bin/env python3
"""
Scoring Models - Data structures for scoring results.
"""

from typing import List, Dict, Any
from dataclasses import dataclass, field

RATIONALE_VERSION = "match-rationale-v1"


@dataclass(frozen=True)
class RequirementContribution:
    """How one required technology contributed to the score."""
    requirement: str
    weight: float
    strength: float
    matched: float  # weight * min(strength, 1)


@dataclass
class MatchBreakdown:
    """Score plus the per-requirement breakdown it was computed from."""
    score: float = 0.0
    coverage: float = 0.0
    breakdown: List[RequirementContribution] = field(default_factory=list)

    def to_rationale(self) -> Dict[str, Any]:
        """Serialize for the job_match.rationale JSONB column."""
        return {
            'version': RATIONALE_VERSION,
            'score': self.score,
            'coverage': self.coverage,
            'breakdown': [
                {
                    'requirement': item.requirement,
                    'weight': item.weight,
                    'strength': item.strength,
                    'matched': item.matched,
                }
                for item in self.breakdown
            ],
        }
