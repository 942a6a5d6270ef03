"""Tests for fuzzy matching."""
import pytest
from airport_lookup.core.fuzzy import fuzzy_match


def test_fuzzy_match():
    """Test fuzzy matching."""
    choices = ["toronto", "london", "new york", "berlin"]

    matches = fuzzy_match("toronto", choices, threshold=0.7)
    assert len(matches) > 0
    assert matches[0][0] == "toronto"
    assert matches[0][1] == pytest.approx(1.0)
    assert matches[0][2] == 0

    matches = fuzzy_match("Toronto", choices, threshold=0.7)
    assert matches[0][0] == "toronto"

    matches = fuzzy_match("xyz", choices, threshold=0.7)
    assert len(matches) == 0


def test_fuzzy_match_tolerates_typos():
    matches = fuzzy_match("londn", ["toronto", "london", "berlin"], threshold=0.5)
    assert matches
    assert matches[0][0] == "london"


def test_fuzzy_match_penalizes_short_substrings():
    """A fragment of a longer name must not score like the full name."""
    matches = fuzzy_match("york", ["new york"], threshold=0.1)
    assert matches
    assert matches[0][1] <= 0.5


def test_fuzzy_match_sorted_and_limited():
    choices = ["london", "london heathrow", "london gatwick", "londonderry"]
    matches = fuzzy_match("london", choices, threshold=0.3, limit=None)
    scores = [score for _, score, _ in matches]
    assert scores == sorted(scores, reverse=True)
    assert len({idx for _, _, idx in matches}) == len(matches)

    limited = fuzzy_match("london", choices, threshold=0.3, limit=2)
    assert len(limited) <= 2


def test_fuzzy_match_empty_inputs():
    assert fuzzy_match("", ["london"]) == []
    assert fuzzy_match("london", []) == []
