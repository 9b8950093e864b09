"""
Service for the defense-deck archive and hero match statistics.

Decks are always three distinct heroes. Up to three skill reservations are
given as ``(hero_id, skill_type)`` pairs and sent as indexes into the deck's
hero list.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from services.base import BaseService
from services.request_pipeline import unwrap_payload
from utils.errors import ValidationError

if TYPE_CHECKING:
    from services.request_pipeline import RequestPipeline
    from services.session_state import SessionStore

DECK_SIZE = 3
MAX_SKILL_RESERVATIONS = 3


def build_deck(
    heroes: Sequence[str], skill_queue: Iterable[tuple[str, str]] = ()
) -> dict[str, Any]:
    """
    Build the deck body shared by defense and attack registration.

    Raises:
        ValidationError: not exactly three distinct heroes, more than
            MAX_SKILL_RESERVATIONS reservations, or a reservation for a hero
            outside the deck.
    """
    hero_list = list(heroes)
    if len(hero_list) != DECK_SIZE:
        raise ValidationError("영웅 3명을 선택해야 합니다.")
    if len(set(hero_list)) != DECK_SIZE:
        raise ValidationError("같은 영웅을 중복해서 선택할 수 없습니다.")

    reservations = []
    for hero_id, skill_type in skill_queue:
        if len(reservations) == MAX_SKILL_RESERVATIONS:
            raise ValidationError(
                f"스킬 예약은 최대 {MAX_SKILL_RESERVATIONS}개까지 가능합니다."
            )
        if hero_id not in hero_list:
            raise ValidationError(f"덱에 없는 영웅의 스킬입니다: {hero_id}")
        reservations.append({"heroIndex": hero_list.index(hero_id), "skillType": skill_type})

    return {"heroes": hero_list, "skillReservation": reservations}


class ArchiveService(BaseService):
    def __init__(self, pipeline: RequestPipeline, session: SessionStore) -> None:
        super().__init__("archive", pipeline, session)

    async def get_picks(self) -> list[Any]:
        """Recommended defense decks for the guild (bare list or envelope)."""
        response = unwrap_payload(await self.pipeline.get("/archive/pick"))
        return response if isinstance(response, list) else []

    async def register_defense(
        self, heroes: Sequence[str], skill_queue: Iterable[tuple[str, str]] = ()
    ) -> Any:
        deck = build_deck(heroes, skill_queue)
        result = await self.pipeline.post("/archive/defense", {"deck": deck})
        self.logger.info("Defense deck registered")
        return unwrap_payload(result)

    async def register_attack(
        self,
        defense_id: str,
        heroes: Sequence[str],
        description: str = "",
        skill_queue: Iterable[tuple[str, str]] = (),
    ) -> Any:
        deck = build_deck(heroes, skill_queue)
        result = await self.pipeline.post(
            "/archive/attack",
            {"defenseId": defense_id, "deck": deck, "description": description},
        )
        self.logger.info("Attack registered", extra={"target_id": defense_id})
        return unwrap_payload(result)

    async def hero_stats(self, hero_ids: Sequence[str]) -> list[Any]:
        """Match statistics of attack decks countering the given heroes."""
        heroes = quote(",".join(hero_ids), safe=",")
        response = unwrap_payload(await self.pipeline.get(f"/stats?heroes={heroes}"))
        return response if isinstance(response, list) else []
