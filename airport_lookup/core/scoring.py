"""Confidence scoring and best-match selection.

Pure functions over plain ``LookupResult`` candidates, no store or network
access.
"""
from typing import List, Optional, Sequence
from airport_lookup.core.models import LookupResult, METRO
from airport_lookup.core.config import TIE_EPSILON, DEFAULT_MAX_RESULTS

# Lowest confidence any similarity maps to
CONFIDENCE_FLOOR = 0.001


def calculate_confidence(similarity: float) -> float:
    """
    Map a raw similarity score to a confidence in (0, 1].

    Monotonic non-decreasing; 1.0 maps to 1.0 and nothing maps above it.
    Similarities at or below zero map to CONFIDENCE_FLOOR.

    Args:
        similarity: Raw similarity (values outside [0, 1] are clamped)

    Returns:
        Confidence score
    """
    s = max(0.0, min(1.0, float(similarity)))
    return max(CONFIDENCE_FLOOR, min(1.0, s ** 0.8))


def boost_confidence(confidence: float, bonus: float) -> float:
    """Add a bonus to a confidence without leaving [0, 1]."""
    return max(0.0, min(1.0, confidence + bonus))


def _sort_key(candidate: LookupResult):
    return (
        -candidate.confidence,
        0 if candidate.type == METRO else 1,
        -(candidate.passenger_count or 0),
        len(candidate.name or ""),
    )


def rank_candidates(candidates: Sequence[LookupResult]) -> List[LookupResult]:
    """Sort by confidence, then metro over airport, traffic, shorter name."""
    return sorted(candidates, key=_sort_key)


def select_best_match(
    candidates: Sequence[LookupResult],
    original_query: str = "",
    max_results: int = DEFAULT_MAX_RESULTS,
    epsilon: float = TIE_EPSILON
) -> Optional[LookupResult]:
    """
    Pick the best candidate and attach near-tie alternatives.

    Args:
        candidates: Candidates produced by one tier
        original_query: Query the candidates were produced for
        max_results: Maximum number of alternatives to keep
        epsilon: Confidence distance from the top score counted as a near tie

    Returns:
        New LookupResult with ``alternatives`` set, or None if no candidates
    """
    if not candidates:
        return None

    ranked = rank_candidates(candidates)
    best = ranked[0]

    seen = {(best.type, best.iata_code)}
    alternatives = []
    for candidate in ranked[1:]:
        key = (candidate.type, candidate.iata_code)
        if key in seen:
            continue
        seen.add(key)
        # Small tolerance so 0.95 vs 0.90 still counts as within 0.05
        if best.confidence - candidate.confidence <= epsilon + 1e-9:
            alternatives.append(candidate.with_changes(alternatives=()))

    return best.with_changes(alternatives=tuple(alternatives[:max_results]))
