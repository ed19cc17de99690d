"""Tiered textual relevance scoring.

Tiers are checked strongest first and the first match wins; they never add up.
Ties inside a tier are left for the ranker.

  4.0  primary text equals the term
  3.0  term found in the primary text as whole word(s), or the primary text starts with it
  2.5  any other primary substring match, or the term contains a primary word ("dev" ~ "developer")
  2.0  a secondary entry equals the term
  1.5  a secondary entry contains the term, or one of its words starts with it
  1.0  a word of a secondary entry contains the term
  0.5  a name field contains the term, or one of its words starts with it
  0.0  no match (excluded when a term was given)

All comparisons are case-insensitive and words are split on whitespace.
"""

import logging

from nearsearch.core.schemas import SearchableEntity

logger = logging.getLogger(__name__)

PRIMARY_EXACT = 4.0
PRIMARY_PHRASE = 3.0
PRIMARY_WORD_STEM = 2.5
SECONDARY_EXACT = 2.0
SECONDARY_PARTIAL = 1.5
SECONDARY_WORD = 1.0
NAME_MATCH = 0.5
NO_MATCH = 0.0


def normalize_term(term: str | None) -> str:
    """Lower-cased, whitespace-collapsed term; empty string when absent."""
    if not term:
        return ""
    return " ".join(term.lower().split())


def score_entity(entity: SearchableEntity, term: str | None) -> float:
    """Relevance of ``entity`` for ``term``.

    Returns 0.0 for an empty term; the caller decides whether 0.0 excludes.
    """
    needle = normalize_term(term)
    if not needle:
        return NO_MATCH

    primary = normalize_term(entity.primary_text)
    primary_words = primary.split()
    if primary and primary == needle:
        return PRIMARY_EXACT
    if _phrase_match(primary_words, needle.split()) or (primary and primary.startswith(needle)):
        return PRIMARY_PHRASE
    if needle in primary or any(needle in word or word in needle for word in primary_words):
        return PRIMARY_WORD_STEM

    secondary = [normalize_term(s) for s in entity.secondary_texts]
    secondary = [s for s in secondary if s]
    if needle in secondary:
        return SECONDARY_EXACT
    if any(_partial_match(s, needle) for s in secondary):
        return SECONDARY_PARTIAL
    if any(needle in word for s in secondary for word in s.split()):
        return SECONDARY_WORD

    names = [normalize_term(n) for n in entity.name_texts]
    if any(_partial_match(n, needle) for n in names if n):
        return NAME_MATCH
    return NO_MATCH


def _partial_match(text: str, needle: str) -> bool:
    """Substring match, or any word of ``text`` starts with ``needle``."""
    if needle in text:
        return True
    return any(word.startswith(needle) for word in text.split())


def _phrase_match(words: list[str], needle_words: list[str]) -> bool:
    """True when ``needle_words`` appear as a contiguous run of whole words."""
    n = len(needle_words)
    if n == 0 or n > len(words):
        return False
    return any(words[i:i + n] == needle_words for i in range(len(words) - n + 1))
