"""Tests for CardCatalog collection operations."""

import asyncio

import pytest

from tests.conftest import FIXED_NOW, make_card
from vocabcards.adapters.memory_card_store import InMemoryCardStore, load_sample_deck
from vocabcards.domain.services.card_catalog import CardCatalog
from vocabcards.domain.value_objects.card_filter import CardFilter
from vocabcards.ports.card_store import CardNotFoundError


@pytest.fixture
def catalog(store) -> CardCatalog:
    return CardCatalog(store)


# ---------------------------------------------------------------------------
# Browsing
# ---------------------------------------------------------------------------


class TestBrowsing:
    def test_weak_list_sorted_by_misses(self, catalog):
        cards = asyncio.run(catalog.list_cards(CardFilter.weak()))
        assert [c.id for c in cards] == ["b", "d"]

    def test_search(self, catalog):
        cards = asyncio.run(catalog.list_cards(query="SA-WAT"))
        assert [c.id for c in cards] == ["b"]

    def test_genres_sorted_and_unique(self, catalog):
        assert asyncio.run(catalog.genres()) == ["basics", "food", "greetings"]

    def test_stats(self, catalog):
        stats = asyncio.run(catalog.stats())
        assert (stats.total_count, stats.genre_count) == (4, 3)
        assert (stats.weak_count, stats.favorite_count) == (2, 2)
        assert stats.has_cards

    def test_filter_options(self, catalog):
        options = asyncio.run(catalog.filter_options())
        assert [(o.key, o.count) for o in options] == [
            ("all", 4),
            ("_fav", 2),
            ("_weak", 2),
            ("basics", 1),
            ("food", 2),
            ("greetings", 1),
        ]

    def test_empty_collection(self):
        catalog = CardCatalog(InMemoryCardStore())
        stats = asyncio.run(catalog.stats())
        assert not stats.has_cards
        assert all(o.is_empty for o in asyncio.run(catalog.filter_options()))


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


class TestEditing:
    def test_create_and_get(self, catalog):
        card = asyncio.run(catalog.create_card(native_text="water", target_text="น้ำ"))
        assert asyncio.run(catalog.get_card(card.id)) == card

    def test_create_invalid(self, catalog):
        with pytest.raises(ValueError):
            asyncio.run(catalog.create_card(native_text="", target_text="x"))

    def test_edit(self, catalog):
        card = asyncio.run(catalog.edit_card("a", {"memo": "common", "genre": "drinks"}))
        assert card.memo == "common"
        assert card.genres == ["drinks"]

    def test_edit_missing(self, catalog):
        with pytest.raises(CardNotFoundError):
            asyncio.run(catalog.edit_card("zz", {"memo": "x"}))

    def test_toggle_favorite(self, catalog):
        assert asyncio.run(catalog.toggle_favorite("a")).favorite is True
        assert asyncio.run(catalog.toggle_favorite("a")).favorite is False

    def test_reset_weak(self, catalog, store):
        assert asyncio.run(catalog.reset_weak()) == 2
        assert all(c.wrong_count == 0 for c in asyncio.run(store.get_all()))

    def test_delete(self, catalog, store):
        asyncio.run(catalog.delete_card("a"))
        asyncio.run(catalog.delete_card("a"))
        assert len(asyncio.run(store.get_all())) == 3


# ---------------------------------------------------------------------------
# Import / export
# ---------------------------------------------------------------------------


class TestImportExport:
    def test_export_then_replace_import(self, catalog, store):
        exported = asyncio.run(catalog.export_cards())
        fresh = InMemoryCardStore([make_card("old")])
        imported = asyncio.run(CardCatalog(fresh).import_cards(exported, replace=True))
        assert imported == 4
        assert sorted(c.id for c in asyncio.run(fresh.get_all())) == ["a", "b", "c", "d"]

    def test_merge_import_keeps_existing(self, catalog, store):
        asyncio.run(catalog.import_cards([{"id": "e", "native_text": "n", "target_text": "t"}]))
        assert len(asyncio.run(store.get_all())) == 5

    def test_invalid_record_writes_nothing(self, catalog, store):
        data = [
            {"id": "e", "native_text": "n", "target_text": "t"},
            {"id": "f", "native_text": "", "target_text": "t"},
        ]
        with pytest.raises(ValueError, match="index 1"):
            asyncio.run(catalog.import_cards(data, replace=True))
        assert len(asyncio.run(store.get_all())) == 4

    def test_string_favorite_flags_read_as_booleans(self, catalog, store):
        data = [
            {"id": "e", "native_text": "n", "target_text": "t", "favorite": "false"},
            {"id": "f", "native_text": "n", "target_text": "t", "favorite": "1"},
        ]
        asyncio.run(catalog.import_cards(data))
        assert asyncio.run(store.get_by_id("e")).favorite is False
        assert asyncio.run(store.get_by_id("f")).favorite is True

    def test_non_list_rejected(self, catalog):
        with pytest.raises(ValueError):
            asyncio.run(catalog.import_cards({"cards": []}))

    def test_erase_requires_confirmation(self, catalog, store):
        with pytest.raises(ValueError):
            asyncio.run(catalog.erase_all("delete"))
        assert len(asyncio.run(store.get_all())) == 4
        asyncio.run(catalog.erase_all("DELETE"))
        assert asyncio.run(store.get_all()) == []


# ---------------------------------------------------------------------------
# Queued outcomes
# ---------------------------------------------------------------------------


class TestQueuedOutcomes:
    def test_reset_weak_retires_queued_outcomes(self, store, recovery_store):
        catalog = CardCatalog(store, recovery_store)

        async def scenario():
            await recovery_store.save_update("b", 3, FIXED_NOW, "s1")
            await recovery_store.save_update("a", 1, FIXED_NOW, "s1")
            await catalog.reset_weak()
            return await recovery_store.get_pending_updates()

        assert [p.card_id for p in asyncio.run(scenario())] == ["a"]

    def test_text_edit_keeps_queued_outcome(self, store, recovery_store):
        catalog = CardCatalog(store, recovery_store)

        async def scenario():
            await recovery_store.save_update("a", 1, FIXED_NOW, "s1")
            await catalog.edit_card("a", {"memo": "tone is falling"})
            return await recovery_store.get_pending_count()

        assert asyncio.run(scenario()) == 1

    def test_wrong_count_edit_retires_queued_outcome(self, store, recovery_store):
        catalog = CardCatalog(store, recovery_store)

        async def scenario():
            await recovery_store.save_update("a", 4, FIXED_NOW, "s1")
            await catalog.edit_card("a", {"wrong_count": 0})
            return await recovery_store.get_pending_count()

        assert asyncio.run(scenario()) == 0

    def test_import_retires_queued_outcomes(self, store, recovery_store):
        catalog = CardCatalog(store, recovery_store)

        async def scenario():
            await recovery_store.save_update("a", 2, FIXED_NOW, "s1")
            await catalog.import_cards([{"id": "a", "native_text": "n", "target_text": "t"}])
            return await recovery_store.get_pending_count()

        assert asyncio.run(scenario()) == 0


class TestSampleDeck:
    def test_sample_deck_loads(self):
        cards = load_sample_deck()
        assert len(cards) == 12
        assert len({c.id for c in cards}) == 12
        assert all(c.id.startswith("sample-") for c in cards)
