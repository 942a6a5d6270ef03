"""Tests for confidence scoring and best-match selection."""
import pytest
from airport_lookup.core.models import LookupResult, AIRPORT, METRO
from airport_lookup.core.scoring import (
    calculate_confidence, boost_confidence, select_best_match, CONFIDENCE_FLOOR
)


def airport(code, confidence, passengers=None, name=None):
    return LookupResult(
        type=AIRPORT, iata_code=code, name=name or f"{code} Airport",
        confidence=confidence, passenger_count=passengers,
    )


def metro(code, confidence, members=("AAA",)):
    return LookupResult(
        type=METRO, iata_code=code, name=f"{code} Metro",
        airport_codes=tuple(members), confidence=confidence,
    )


def test_calculate_confidence_bounds():
    assert calculate_confidence(1.0) == 1.0
    assert calculate_confidence(0.0) == CONFIDENCE_FLOOR
    assert calculate_confidence(1.7) == 1.0
    assert calculate_confidence(-0.2) == CONFIDENCE_FLOOR
    assert calculate_confidence(0.5) == pytest.approx(0.5 ** 0.8)


def test_calculate_confidence_monotonic():
    scores = [i / 100 for i in range(101)]
    confidences = [calculate_confidence(s) for s in scores]
    assert confidences == sorted(confidences)
    assert all(0.0 < c <= 1.0 for c in confidences)


def test_boost_confidence_clamped():
    assert boost_confidence(0.9, 0.05) == pytest.approx(0.95)
    assert boost_confidence(0.98, 0.05) == 1.0


def test_select_best_match_empty():
    assert select_best_match([]) is None


def test_select_best_match_prefers_metro_on_tie():
    best = select_best_match([airport("YYZ", 0.9), metro("YTO", 0.9, ("YYZ", "YTZ"))], "toronto")
    assert best.iata_code == "YTO"
    assert [alt.iata_code for alt in best.alternatives] == ["YYZ"]


def test_select_best_match_breaks_airport_ties_by_traffic():
    best = select_best_match([airport("SMA", 0.8, passengers=100), airport("BIG", 0.8, passengers=5000)])
    assert best.iata_code == "BIG"


def test_select_best_match_alternatives_within_epsilon():
    best = select_best_match([
        airport("AAA", 0.9),
        airport("BBB", 0.86),
        airport("CCC", 0.85),
        airport("DDD", 0.7),
    ])
    assert best.iata_code == "AAA"
    assert [alt.iata_code for alt in best.alternatives] == ["BBB", "CCC"]
    assert all(not alt.alternatives for alt in best.alternatives)


def test_select_best_match_deduplicates_and_limits():
    candidates = [airport("AAA", 0.9), airport("AAA", 0.88)] + [
        airport(f"B{i:02d}"[:3], 0.89) for i in range(10)
    ]
    best = select_best_match(candidates, max_results=3)
    codes = [alt.iata_code for alt in best.alternatives]
    assert "AAA" not in codes
    assert len(codes) == 3
    assert len(set(codes)) == 3


def test_select_best_match_does_not_mutate_input():
    candidate = airport("AAA", 0.9)
    best = select_best_match([candidate, airport("BBB", 0.9)])
    assert candidate.alternatives == ()
    assert best is not candidate
