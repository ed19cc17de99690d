"""Tests for tiered relevance scoring."""

from nearsearch.core.schemas import EntityKind, SearchableEntity
from nearsearch.pipeline.scorer import (
    NAME_MATCH,
    NO_MATCH,
    PRIMARY_EXACT,
    PRIMARY_PHRASE,
    PRIMARY_WORD_STEM,
    SECONDARY_EXACT,
    SECONDARY_PARTIAL,
    normalize_term,
    score_entity,
)


def _entity(
    primary: str = "",
    secondary: list[str] | None = None,
    names: list[str] | None = None,
) -> SearchableEntity:
    return SearchableEntity(
        id="1",
        kind=EntityKind.PROFESSIONAL,
        primary_text=primary,
        secondary_texts=secondary or [],
        name_texts=names or [],
    )


# ---------------------------------------------------------------------------
# Individual tiers
# ---------------------------------------------------------------------------


class TestTiers:
    def test_primary_exact_case_insensitive(self) -> None:
        assert score_entity(_entity("Plumber"), "plumber") == 4.0
        assert score_entity(_entity("plumber"), "PLUMBER") == PRIMARY_EXACT

    def test_primary_contains_whole_word(self) -> None:
        assert score_entity(_entity("Emergency Plumber"), "plumber") == 3.0

    def test_primary_contains_phrase(self) -> None:
        assert score_entity(_entity("Senior Python Developer"), "python developer") == PRIMARY_PHRASE

    def test_primary_starts_with_term(self) -> None:
        assert score_entity(_entity("Electrician"), "elec") == PRIMARY_PHRASE

    def test_primary_word_stem(self) -> None:
        assert score_entity(_entity("Senior Developer"), "dev") == 2.5

    def test_term_contains_primary_word(self) -> None:
        assert score_entity(_entity("Developer"), "senior developers") == PRIMARY_WORD_STEM

    def test_secondary_exact(self) -> None:
        e = _entity("Engineer", secondary=["Python", "Django"])
        assert score_entity(e, "django") == SECONDARY_EXACT

    def test_secondary_partial(self) -> None:
        e = _entity("Plumber", secondary=["Boiler Repair"])
        assert score_entity(e, "boil") == SECONDARY_PARTIAL

    def test_secondary_word_prefix(self) -> None:
        e = _entity("Plumber", secondary=["bathroom fitting"])
        assert score_entity(e, "fit") == SECONDARY_PARTIAL

    def test_name_match(self) -> None:
        e = _entity("Plumber", names=["Sam", "Okafor"])
        assert score_entity(e, "oka") == NAME_MATCH

    def test_no_match(self) -> None:
        e = _entity("Plumber", secondary=["boilers"], names=["Sam"])
        assert score_entity(e, "carpentry") == NO_MATCH


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestPrecedence:
    def test_tiers_are_not_additive(self) -> None:
        e = _entity("Plumber", secondary=["plumber"], names=["Plumber"])
        assert score_entity(e, "plumber") == 4.0

    def test_primary_beats_secondary(self) -> None:
        e = _entity("Senior Developer", secondary=["dev"])
        assert score_entity(e, "dev") == PRIMARY_WORD_STEM

    def test_monotonic_exact_over_substring_over_secondary(self) -> None:
        exact = score_entity(_entity("Plumber"), "plumber")
        substring = score_entity(_entity("Master Plumber"), "plumber")
        secondary = score_entity(_entity("Handyman", secondary=["plumber"]), "plumber")
        assert exact > substring > secondary > 0.0

    def test_substring_across_words_beats_secondary(self) -> None:
        primary = score_entity(_entity("Senior Developer"), "ior dev")
        secondary = score_entity(_entity("Handyman", secondary=["senior developer"]), "ior dev")
        assert primary == PRIMARY_WORD_STEM
        assert secondary == SECONDARY_PARTIAL
        assert primary > secondary

    def test_score_values_strictly_descend(self) -> None:
        tiers = [
            PRIMARY_EXACT, PRIMARY_PHRASE, PRIMARY_WORD_STEM,
            SECONDARY_EXACT, SECONDARY_PARTIAL, NAME_MATCH, NO_MATCH,
        ]
        assert tiers == sorted(tiers, reverse=True)
        assert len(set(tiers)) == len(tiers)


# ---------------------------------------------------------------------------
# Empty terms and normalisation
# ---------------------------------------------------------------------------


class TestEmptyTerm:
    def test_none_term_scores_zero(self) -> None:
        assert score_entity(_entity("Plumber"), None) == 0.0

    def test_blank_term_scores_zero(self) -> None:
        assert score_entity(_entity("Plumber"), "   ") == 0.0

    def test_empty_primary_does_not_match_everything(self) -> None:
        assert score_entity(_entity(""), "plumber") == NO_MATCH


class TestNormalizeTerm:
    def test_lowercases_and_collapses_whitespace(self) -> None:
        assert normalize_term("  Senior   PYTHON\tDev ") == "senior python dev"

    def test_none(self) -> None:
        assert normalize_term(None) == ""
