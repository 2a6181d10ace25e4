"""Fuzzy text scoring of a query against catalog item fields."""

import re
from typing import List

from .models import CatalogItem

# Token separators: whitespace plus common punctuation
_SEPARATORS = re.compile(r"[\s.,;:!?\-_()\[\]{}/@#$%^&*+=|\\~`\"'<>]+")

# Per-field weights: (title, owner, subtitle)
EXACT_WEIGHTS = (100.0, 90.0, 80.0)
PREFIX_WEIGHTS = (50.0, 45.0, 40.0)
WORD_BOUNDARY_WEIGHTS = (30.0, 25.0, 20.0)
ACRONYM_WEIGHTS = (25.0, 20.0, 15.0)
CONTAINS_WEIGHTS = (15.0, 12.0, 10.0)
FUZZY_WEIGHTS = (3.0, 2.0, 1.0)


def tokenize(text: str) -> List[str]:
    """
    Split text into words on whitespace and punctuation.

    Args:
        text: Text to split

    Returns:
        Non-empty tokens in order
    """
    return [token for token in _SEPARATORS.split(text) if token]


def word_boundary_match(query: str, text: str) -> float:
    """
    Count the words of text that start with query.

    Args:
        query: Lowercased query
        text: Lowercased field text

    Returns:
        Number of matching words
    """
    return float(sum(1 for word in tokenize(text) if word.startswith(query)))


def acronym_match(query: str, text: str) -> float:
    """
    Match query against the first letters of the words in text.

    Returns 1.0 when the acronym starts with the query, otherwise the
    length of the longest query prefix that is also an acronym prefix,
    divided by the query length. Text with fewer words than query
    characters cannot match.

    Args:
        query: Lowercased query
        text: Lowercased field text

    Returns:
        Score between 0.0 and 1.0
    """
    words = tokenize(text)
    if not query or len(words) < len(query):
        return 0.0

    acronym = "".join(word[0] for word in words)
    if acronym.startswith(query):
        return 1.0

    matched = 0
    for query_char, acronym_char in zip(query, acronym):
        if query_char != acronym_char:
            break
        matched += 1
    return matched / len(query)


def fuzzy_match(query: str, text: str) -> float:
    """
    Greedy left-to-right subsequence match rewarding consecutive runs.

    Every matched character adds the length of the current run of
    consecutive matches; a mismatch resets the run.

    Args:
        query: Lowercased query
        text: Lowercased field text

    Returns:
        Run bonus divided by query length, or 0.0 if query is not a
        subsequence of text
    """
    if not query:
        return 0.0

    query_index = 0
    consecutive = 0
    score = 0.0
    for char in text:
        if query_index >= len(query):
            break
        if char == query[query_index]:
            consecutive += 1
            score += consecutive
            query_index += 1
        else:
            consecutive = 0

    if query_index < len(query):
        return 0.0
    return score / len(query)


def score_fields(query: str, title: str, owner: str, subtitle: str) -> float:
    """
    Score a query against the three searchable fields.

    Args:
        query: Query text (any case)
        title: Item title
        owner: Owning application name
        subtitle: Item subtitle

    Returns:
        Non-negative weighted sum of all signals
    """
    query = query.lower()
    if not query:
        return 0.0

    fields = (title.lower(), owner.lower(), subtitle.lower())
    score = 0.0

    # Exact and prefix matches only count for the highest-weighted field
    for text, weight in zip(fields, EXACT_WEIGHTS):
        if text == query:
            score += weight
            break
    for text, weight in zip(fields, PREFIX_WEIGHTS):
        if text.startswith(query):
            score += weight
            break

    for index, text in enumerate(fields):
        if not text:
            continue
        score += word_boundary_match(query, text) * WORD_BOUNDARY_WEIGHTS[index]
        score += acronym_match(query, text) * ACRONYM_WEIGHTS[index]
        if query in text:
            score += CONTAINS_WEIGHTS[index]
        score += fuzzy_match(query, text) * FUZZY_WEIGHTS[index]

    return score


def score(query: str, item: CatalogItem) -> float:
    """
    Score how well a catalog item matches a query.

    Args:
        query: Text typed by the user
        item: Catalog item to score

    Returns:
        Non-negative relevance score (0.0 means no match)
    """
    return score_fields(query, item.title, item.owner_name, item.subtitle)
