#!/usr/bin/env python3
"""
Weighted Overlap - compatibility score between a job and an analyzed repository.

For each required technology with weight w, the candidate strength s
(0 when absent) contributes w * min(s, 1) to the numerator and w to the
denominator:

    score = clamp(100 * sum(w * min(s, 1)) / sum(w), 0, 100)

A job without requirements scores 0. Technology names are compared as exact,
case-sensitive strings.
"""

from typing import Mapping

from core.scorer.models import MatchBreakdown, RequirementContribution


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def explain_match(
    requirements: Mapping[str, float],
    skills: Mapping[str, float]
) -> MatchBreakdown:
    """
    Score a requirement vector against a skill vector and keep the breakdown.

    Args:
        requirements: Technology -> required weight
        skills: Technology -> strength (normally 0.0-1.0)

    Returns:
        MatchBreakdown with score (0.0-100.0), coverage (0.0-1.0) and one
        RequirementContribution per required technology, in requirement order
    """
    numerator = 0.0
    denominator = 0.0
    covered = 0
    breakdown = []

    for tech, weight in requirements.items():
        weight = float(weight)
        strength = float(skills.get(tech, 0.0))
        matched = weight * min(strength, 1.0)

        numerator += matched
        denominator += weight
        if strength > 0:
            covered += 1

        breakdown.append(RequirementContribution(
            requirement=tech,
            weight=weight,
            strength=strength,
            matched=matched,
        ))

    if denominator <= 0:
        score = 0.0
    else:
        score = _clamp(numerator / denominator * 100, 0.0, 100.0)

    coverage = covered / len(requirements) if requirements else 0.0

    return MatchBreakdown(score=score, coverage=coverage, breakdown=breakdown)


def score_match(
    requirements: Mapping[str, float],
    skills: Mapping[str, float]
) -> float:
    """Return the weighted overlap score (0.0-100.0)."""
    return explain_match(requirements, skills).score
