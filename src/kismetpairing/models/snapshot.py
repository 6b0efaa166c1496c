"""Per-round standings snapshots and resolved standings inputs."""

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

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kismetpairing.models.standing import Standing


@dataclass
class StandingsSnapshot:
    """Standings as they stood after ``round`` was fully scored."""

    tournament_id: str
    round: int
    standings: List[Standing] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tournament_id": self.tournament_id,
            "round": self.round,
            "standings": [s.to_dict() for s in self.standings],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StandingsSnapshot":
        return cls(
            tournament_id=data["tournament_id"],
            round=int(data["round"]),
            standings=[Standing.from_dict(s) for s in data.get("standings", [])],
        )


@dataclass
class ResolvedStandings:
    """Standings chosen as pairing input for a round.

    Attributes
    ----------
    source : str
        The standings source that was requested.
    round : int or None
        Snapshot round actually used; None for initial ratings or a live
        recomputation.
    standings : list of Standing
        The standings themselves.
    is_fallback : bool
        True when the requested snapshot was missing and live standings were
        computed instead.
    """

    source: str
    round: Optional[int]
    standings: List[Standing]
    is_fallback: bool = False

    def by_player(self) -> Dict[str, Standing]:
        return {s.player.id: s for s in self.standings}
