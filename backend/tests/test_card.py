"""Tests for the Card entity and the filter/mode value objects."""

from datetime import UTC, datetime

import pytest

from tests.conftest import make_card
from vocabcards.domain.entities.card import Card, split_genres
from vocabcards.domain.value_objects.card_filter import CardFilter, FilterKind
from vocabcards.domain.value_objects.quiz_mode import QuizMode


# ---------------------------------------------------------------------------
# Card validation
# ---------------------------------------------------------------------------


class TestCardValidation:
    def test_defaults(self):
        card = Card(native_text="hello", target_text="สวัสดี")
        assert card.id
        assert card.wrong_count == 0
        assert card.favorite is False
        assert card.last_answered is None

    def test_generated_ids_are_unique(self):
        assert Card("a", "b").id != Card("a", "b").id

    @pytest.mark.parametrize("native,target", [("", "x"), ("x", ""), ("   ", "x")])
    def test_empty_text_rejected(self, native, target):
        with pytest.raises(ValueError):
            Card(native_text=native, target_text=target)

    def test_negative_wrong_count_rejected(self):
        with pytest.raises(ValueError):
            make_card("a", wrong_count=-1)

    def test_bool_wrong_count_rejected(self):
        with pytest.raises(ValueError):
            make_card("a", wrong_count=True)


# ---------------------------------------------------------------------------
# Genres
# ---------------------------------------------------------------------------


class TestGenres:
    def test_split_on_all_comma_kinds(self):
        assert split_genres("food, basics") == ["food", "basics"]
        assert split_genres("挨拶、基本") == ["挨拶", "基本"]
        assert split_genres("食べ物，飲み物") == ["食べ物", "飲み物"]

    def test_blank_segments_dropped(self):
        assert split_genres(" , food,, ") == ["food"]
        assert split_genres("") == []

    def test_membership_is_exact(self):
        card = make_card("a", genre="food, basics")
        assert card.in_genre("food")
        assert card.in_genre(" basics ")
        assert not card.in_genre("foo")


# ---------------------------------------------------------------------------
# Updates and serialization
# ---------------------------------------------------------------------------


class TestCardUpdates:
    def test_with_updates_returns_copy(self):
        card = make_card("a")
        updated = card.with_updates({"wrong_count": 3, "favorite": True})
        assert updated.wrong_count == 3
        assert updated.favorite is True
        assert card.wrong_count == 0

    def test_with_updates_parses_iso_timestamp(self):
        updated = make_card("a").with_updates({"last_answered": "2026-03-01T09:30:00+00:00"})
        assert updated.last_answered == datetime(2026, 3, 1, 9, 30, tzinfo=UTC)

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="Unknown"):
            make_card("a").with_updates({"id": "b"})

    def test_update_cannot_break_invariants(self):
        with pytest.raises(ValueError):
            make_card("a").with_updates({"wrong_count": -2})

    def test_to_dict_from_dict(self):
        card = make_card(
            "a",
            wrong_count=2,
            genre="food",
            memo="note",
            last_answered=datetime(2026, 1, 2, tzinfo=UTC),
        )
        assert Card.from_dict(card.to_dict()) == card

    def test_from_dict_accepts_camel_case_keys(self):
        card = Card.from_dict(
            {
                "id": "x1",
                "native_text": "water",
                "target_text": "น้ำ",
                "wrongCount": 4,
                "lastAnswered": "2025-12-31T23:59:00+00:00",
            }
        )
        assert card.wrong_count == 4
        assert card.last_answered.year == 2025

    def test_from_dict_generates_missing_id(self):
        card = Card.from_dict({"native_text": "rice", "target_text": "ข้าว"})
        assert card.id

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (True, True),
            (False, False),
            ("false", False),
            ("0", False),
            ("", False),
            ("True", True),
            ("yes", True),
            (1, True),
            (0, False),
            (None, False),
        ],
    )
    def test_from_dict_reads_favorite_flag(self, raw, expected):
        card = Card.from_dict({"native_text": "rice", "target_text": "ข้าว", "favorite": raw})
        assert card.favorite is expected

    @pytest.mark.parametrize("raw", ["maybe", 2, [], "-1"])
    def test_from_dict_rejects_unreadable_favorite(self, raw):
        with pytest.raises(ValueError, match="boolean"):
            Card.from_dict({"native_text": "rice", "target_text": "ข้าว", "favorite": raw})

    def test_non_bool_favorite_rejected(self):
        with pytest.raises(ValueError):
            make_card("a", favorite="false")


# ---------------------------------------------------------------------------
# Filters and modes
# ---------------------------------------------------------------------------


class TestCardFilter:
    @pytest.mark.parametrize(
        "key,kind",
        [
            ("all", FilterKind.ALL),
            ("", FilterKind.ALL),
            (None, FilterKind.ALL),
            ("_fav", FilterKind.FAVORITES),
            ("_weak", FilterKind.WEAK),
            ("food", FilterKind.GENRE),
        ],
    )
    def test_parse(self, key, kind):
        assert CardFilter.parse(key).kind is kind

    def test_key_survives_parse(self):
        for key in ("all", "_fav", "_weak", "food"):
            assert CardFilter.parse(key).to_key() == key

    def test_genre_filter_requires_name(self):
        with pytest.raises(ValueError):
            CardFilter(FilterKind.GENRE)

    def test_apply(self, cards):
        assert [c.id for c in CardFilter.all().apply(cards)] == ["a", "b", "c", "d"]
        assert [c.id for c in CardFilter.favorites().apply(cards)] == ["c", "d"]
        assert [c.id for c in CardFilter.weak().apply(cards)] == ["b", "d"]
        assert [c.id for c in CardFilter.for_genre("food").apply(cards)] == ["a", "c"]


class TestQuizMode:
    def test_native_to_target(self):
        card = make_card("a")
        assert QuizMode.NATIVE_TO_TARGET.prompt_for(card) == "native a"
        assert QuizMode.NATIVE_TO_TARGET.answer_for(card) == "target a"
        assert not QuizMode.NATIVE_TO_TARGET.speaks_prompt

    def test_target_to_native(self):
        card = make_card("a")
        assert QuizMode.TARGET_TO_NATIVE.prompt_for(card) == "target a"
        assert QuizMode.TARGET_TO_NATIVE.answer_for(card) == "native a"
        assert QuizMode.TARGET_TO_NATIVE.speaks_prompt

    def test_values(self):
        assert QuizMode("native-target") is QuizMode.NATIVE_TO_TARGET
        assert QuizMode("target-native") is QuizMode.TARGET_TO_NATIVE
