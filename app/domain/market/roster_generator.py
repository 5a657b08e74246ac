"""
Squad generation for newly created teams.

Produces a fixed positional distribution with random display names.
Pure domain service: no IO; randomness is injectable for tests.
"""

import random
from dataclasses import dataclass

from app.domain.market.entities import PlayerPosition

SQUAD_DISTRIBUTION: tuple[tuple[PlayerPosition, int], ...] = (
    (PlayerPosition.GK, 3),
    (PlayerPosition.DEF, 6),
    (PlayerPosition.MID, 6),
    (PlayerPosition.ATT, 5),
)

FIRST_NAMES = ("John", "Leo", "Mark", "Sam", "Chris", "David", "Niko", "Alex")
LAST_NAMES = ("Smith", "Johnson", "Miller", "Brown", "Lopez", "Garcia", "Santos", "Kosta")


@dataclass(frozen=True)
class PlayerDraft:
    """A player to be inserted for a team."""

    name: str
    position: PlayerPosition


class RosterGenerator:
    """Generates the starting squad of a team.

    The squad always has 3 GK, 6 DEF, 6 MID and 5 ATT (20 players).
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    @property
    def squad_size(self) -> int:
        return sum(count for _, count in SQUAD_DISTRIBUTION)

    def random_name(self) -> str:
        """Return a random "First Last" display name."""
        return f"{self._rng.choice(FIRST_NAMES)} {self._rng.choice(LAST_NAMES)}"

    def generate(self) -> list[PlayerDraft]:
        """Return the full starting squad, grouped by position."""
        return [
            PlayerDraft(name=self.random_name(), position=position)
            for position, count in SQUAD_DISTRIBUTION
            for _ in range(count)
        ]
