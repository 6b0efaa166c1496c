"""Match record: one game, or a bye when player B is absent."""

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

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from kismetpairing.constants import STATUS_COMPLETED, STATUS_PENDING


@dataclass
class Match:
    """A single pairing in a round.

    Attributes
    ----------
    tournament_id : str
        Owning tournament.
    round : int
        Round number (1-indexed).
    player_a_id : str
        First player.
    player_b_id : str or None
        Second player; None marks a bye.
    score_a, score_b : int or None
        Game scores, both set once the match is completed.
    status : str
        ``"pending"`` or ``"completed"``.
    is_forfeit : bool
        Whether the result was decided by forfeit.
    forfeited_player_id : str or None
        The player who forfeited.
    first_turn_player_id : str or None
        Who moves first, when recorded.
    id : int or None
        Assigned by the match store on insert.
    """

    tournament_id: str
    round: int
    player_a_id: str
    player_b_id: Optional[str] = None
    score_a: Optional[int] = None
    score_b: Optional[int] = None
    status: str = STATUS_PENDING
    is_forfeit: bool = False
    forfeited_player_id: Optional[str] = None
    first_turn_player_id: Optional[str] = None
    id: Optional[int] = None

    @property
    def is_bye(self) -> bool:
        return self.player_b_id is None

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    @property
    def is_pending(self) -> bool:
        return self.status == STATUS_PENDING

    @property
    def player_ids(self) -> Tuple[str, ...]:
        if self.player_b_id is None:
            return (self.player_a_id,)
        return (self.player_a_id, self.player_b_id)

    @property
    def sort_key(self) -> Tuple[int, int]:
        """Chronological order: round, then insertion id."""
        return (self.round, self.id if self.id is not None else 0)

    def involves(self, player_id: str) -> bool:
        return player_id in self.player_ids

    def opponent_of(self, player_id: str) -> Optional[str]:
        if player_id == self.player_a_id:
            return self.player_b_id
        if player_id == self.player_b_id:
            return self.player_a_id
        raise ValueError(f"Player {player_id} is not in match {self.id}")

    def scores_for(self, player_id: str) -> Tuple[Optional[int], Optional[int]]:
        """Return (own score, opponent score) from ``player_id``'s side."""
        if player_id == self.player_a_id:
            return self.score_a, self.score_b
        return self.score_b, self.score_a

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round": self.round,
            "player_a_id": self.player_a_id,
            "player_b_id": self.player_b_id,
            "score_a": self.score_a,
            "score_b": self.score_b,
            "status": self.status,
            "is_forfeit": self.is_forfeit,
            "forfeited_player_id": self.forfeited_player_id,
            "first_turn_player_id": self.first_turn_player_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Deserialize match from dictionary."""
        return cls(
            id=data.get("id"),
            tournament_id=data["tournament_id"],
            round=int(data["round"]),
            player_a_id=data["player_a_id"],
            player_b_id=data.get("player_b_id"),
            score_a=data.get("score_a"),
            score_b=data.get("score_b"),
            status=data.get("status", STATUS_PENDING),
            is_forfeit=data.get("is_forfeit", False),
            forfeited_player_id=data.get("forfeited_player_id"),
            first_turn_player_id=data.get("first_turn_player_id"),
        )


def pending_match(
    tournament_id: str, round_number: int, player_a_id: str, player_b_id: str
) -> Match:
    return Match(
        tournament_id=tournament_id,
        round=round_number,
        player_a_id=player_a_id,
        player_b_id=player_b_id,
    )
