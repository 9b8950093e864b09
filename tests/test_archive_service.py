"""Tests for the defense-deck archive and hero statistics."""

from __future__ import annotations

import pytest

from services.archive_service import MAX_SKILL_RESERVATIONS, ArchiveService, build_deck
from tests.factories import make_response
from utils.errors import ValidationError

HEROES = ["rachel", "dellons", "kris"]


@pytest.fixture
def archive(pipeline, authed_session) -> ArchiveService:
    return ArchiveService(pipeline, authed_session)


class TestBuildDeck:
    def test_skill_reservations_become_indexes(self) -> None:
        deck = build_deck(HEROES, [("kris", "skill1"), ("rachel", "skill2")])

        assert deck == {
            "heroes": HEROES,
            "skillReservation": [
                {"heroIndex": 2, "skillType": "skill1"},
                {"heroIndex": 0, "skillType": "skill2"},
            ],
        }

    @pytest.mark.parametrize("heroes", [[], ["a", "b"], ["a", "b", "c", "d"]])
    def test_requires_three_heroes(self, heroes) -> None:
        with pytest.raises(ValidationError, match="영웅 3명"):
            build_deck(heroes)

    def test_reservation_for_missing_hero(self) -> None:
        with pytest.raises(ValidationError):
            build_deck(HEROES, [("eileene", "skill1")])

    @pytest.mark.parametrize("heroes", [["rachel", "rachel", "kris"], ["kris"] * 3])
    def test_rejects_duplicate_heroes(self, heroes) -> None:
        with pytest.raises(ValidationError, match="중복"):
            build_deck(heroes)

    def test_three_reservations_allowed(self) -> None:
        queue = [("rachel", "skill1"), ("dellons", "skill2"), ("rachel", "skill2")]

        deck = build_deck(HEROES, queue)

        assert [r["heroIndex"] for r in deck["skillReservation"]] == [0, 1, 0]

    def test_fourth_reservation_rejected(self) -> None:
        queue = [("rachel", "skill1"), ("dellons", "skill1"), ("kris", "skill1"), ("kris", "skill2")]

        with pytest.raises(ValidationError, match=f"최대 {MAX_SKILL_RESERVATIONS}개"):
            build_deck(HEROES, queue)


class TestArchiveService:
    @pytest.mark.asyncio
    async def test_get_picks(self, archive, transport) -> None:
        transport.queue("/archive/pick", make_response(200, {"payload": [{"id": "d1"}]}))

        assert await archive.get_picks() == [{"id": "d1"}]

    @pytest.mark.asyncio
    async def test_get_picks_non_list(self, archive, transport) -> None:
        transport.queue("/archive/pick", make_response(204))

        assert await archive.get_picks() == []

    @pytest.mark.asyncio
    async def test_register_defense(self, archive, transport) -> None:
        transport.queue("/archive/defense", make_response(201, {"payload": {"id": "d9"}}))

        result = await archive.register_defense(HEROES, [("dellons", "skill1")])

        method, path, body = transport.calls[0]
        assert (method, path) == ("POST", "/archive/defense")
        assert body["deck"]["skillReservation"] == [{"heroIndex": 1, "skillType": "skill1"}]
        assert result == {"id": "d9"}

    @pytest.mark.asyncio
    async def test_register_attack(self, archive, transport) -> None:
        transport.queue("/archive/attack", make_response(201, {}))

        await archive.register_attack("d9", HEROES, description="선턴 필수")

        assert transport.calls[0][2] == {
            "defenseId": "d9",
            "deck": {"heroes": HEROES, "skillReservation": []},
            "description": "선턴 필수",
        }

    @pytest.mark.asyncio
    async def test_invalid_deck_sends_nothing(self, archive, transport) -> None:
        with pytest.raises(ValidationError):
            await archive.register_attack("d9", HEROES[:2])
        assert transport.calls == []

    @pytest.mark.asyncio
    async def test_hero_stats(self, archive, transport) -> None:
        transport.queue("/stats?heroes=rachel,kris", make_response(200, [{"winRate": 0.6}]))

        assert await archive.hero_stats(["rachel", "kris"]) == [{"winRate": 0.6}]
