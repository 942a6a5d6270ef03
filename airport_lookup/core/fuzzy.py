"""Fuzzy matching utilities using RapidFuzz."""
from typing import List, Tuple, Optional
from rapidfuzz import fuzz, process
from rapidfuzz.utils import default_process


def fuzzy_match(
    query: str,
    choices: List[str],
    threshold: float = 0.3,
    limit: Optional[int] = 5
) -> List[Tuple[str, float, int]]:
    """
    Perform fuzzy matching between query and choices.

    Combines token sort ratio, partial ratio and WRatio, keeping the best
    score per choice.

    Args:
        query: Query string to match
        choices: List of candidate strings
        threshold: Minimum similarity score (0-1)
        limit: Maximum number of results to return (None for all)

    Returns:
        List of tuples (matched_string, score, index) sorted by score descending
    """
    if not query or not choices:
        return []

    cutoff = threshold * 100
    results = []
    for scorer in (fuzz.token_sort_ratio, fuzz.partial_ratio, fuzz.WRatio):
        results.extend(process.extract(
            query,
            choices,
            scorer=scorer,
            processor=default_process,
            limit=limit,
            score_cutoff=cutoff
        ))

    # Combine and deduplicate, keeping best scores
    combined = {}
    processed_query = default_process(query)
    query_len = len(processed_query)

    for match, score, idx in results:
        score_normalized = score / 100.0

        # Penalize substring matches where one side is much shorter,
        # so "york" does not score like "new york"
        processed_choice = default_process(choices[idx])
        choice_len = len(processed_choice)
        if processed_query != processed_choice and (
            processed_query in processed_choice or processed_choice in processed_query
        ):
            length_ratio = min(query_len, choice_len) / max(query_len, choice_len, 1)
            if length_ratio < 0.8:
                if query_len > choice_len:
                    score_normalized *= 0.3
                else:
                    score_normalized *= 0.5

        if score_normalized < threshold:
            continue

        if idx not in combined or combined[idx][1] < score_normalized:
            combined[idx] = (match, score_normalized, idx)

    sorted_results = sorted(combined.values(), key=lambda x: x[1], reverse=True)

    return sorted_results[:limit] if limit else sorted_results
