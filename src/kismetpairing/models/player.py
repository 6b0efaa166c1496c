"""Player roster record."""

# Kismet Pairing
# Copyright (C) 2025  Kismet Pairing developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from kismetpairing.constants import PLAYER_ACTIVE, PLAYER_WITHDRAWN


@dataclass
class Player:
    """A tournament entrant.

    Attributes
    ----------
    id : str
        Unique identifier within the tournament.
    name : str
        Display name.
    rating : int
        Rating at entry.
    seed : int
        Rank by rating at entry (1 is the top seed).
    bye_rounds : list of int
        Rounds in which the player sat out with a bye.
    status : str
        ``"active"`` or ``"withdrawn"``. Withdrawn players stay in standings
        but are never paired.
    division_id : str or None
        Division the player competes in.
    class_id : str or None
        Optional rating class, used only for reporting.
    team_id : str or None
        Optional team, used for team standings and teammate separation.
    """

    id: str
    name: str
    rating: int
    seed: int = 0
    bye_rounds: List[int] = field(default_factory=list)
    status: str = PLAYER_ACTIVE
    division_id: Optional[str] = None
    class_id: Optional[str] = None
    team_id: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == PLAYER_ACTIVE

    @property
    def bye_count(self) -> int:
        return len(self.bye_rounds)

    def with_bye(self, round_number: int) -> "Player":
        """Return a copy of this player with ``round_number`` added to the byes."""
        return replace(self, bye_rounds=[*self.bye_rounds, round_number])

    def withdraw(self) -> "Player":
        return replace(self, status=PLAYER_WITHDRAWN, bye_rounds=list(self.bye_rounds))

    def reinstate(self) -> "Player":
        return replace(self, status=PLAYER_ACTIVE, bye_rounds=list(self.bye_rounds))

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "rating": self.rating,
            "seed": self.seed,
            "bye_rounds": list(self.bye_rounds),
            "status": self.status,
            "division_id": self.division_id,
            "class_id": self.class_id,
            "team_id": self.team_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        """Deserialize player from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            rating=int(data.get("rating", 0)),
            seed=int(data.get("seed", 0)),
            bye_rounds=[int(r) for r in data.get("bye_rounds", [])],
            status=data.get("status", PLAYER_ACTIVE),
            division_id=data.get("division_id"),
            class_id=data.get("class_id"),
            team_id=data.get("team_id"),
        )

    def __repr__(self) -> str:
        return f"Player({self.id!r}, {self.name!r}, {self.rating})"


def assign_seeds(players: List[Player]) -> List[Player]:
    """Return copies of ``players`` with seeds set by rating, highest first."""
    ordered = sorted(players, key=lambda p: -p.rating)
    seeds = {p.id: index + 1 for index, p in enumerate(ordered)}
    return [replace(p, seed=seeds[p.id], bye_rounds=list(p.bye_rounds)) for p in players]
