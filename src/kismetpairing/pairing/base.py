"""Shared contract for pairing algorithms."""

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

from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from kismetpairing.constants import UNRANKED
from kismetpairing.models import (
    Match,
    PairingHistory,
    Player,
    Standing,
    TournamentConfig,
    pending_match,
)


class PairingAlgorithm(ABC):
    """A strategy that pairs one division for one round.

    Implementations are pure: they read the inputs, never modify them, and
    return new pending matches (plus a completed bye match for methods that
    schedule their own byes).
    """

    method: str = ""

    @abstractmethod
    def pair(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
        history: PairingHistory,
    ) -> List[Match]:
        """Pair ``players`` for ``round_number``.

        Args:
            config: Tournament configuration
            round_number: Round being paired
            players: Active players of one division
            standings: Standings used as pairing input
            history: Earlier pairings, for rematch checks

        Returns:
            New matches for the round
        """

    @staticmethod
    def standings_by_player(standings: Sequence[Standing]) -> Dict[str, Standing]:
        return {s.player.id: s for s in standings}

    @staticmethod
    def sort_by_rank(
        players: Sequence[Player], lookup: Dict[str, Standing]
    ) -> List[Player]:
        """Order players by standings rank; players without one go last."""

        def key(player: Player):
            standing = lookup.get(player.id)
            return standing.rank if standing is not None else UNRANKED

        return sorted(players, key=key)

    @staticmethod
    def make_match(
        config: TournamentConfig, round_number: int, player_a: Player, player_b: Player
    ) -> Match:
        return pending_match(config.tournament_id, round_number, player_a.id, player_b.id)


def are_teammates(player_a: Player, player_b: Player) -> bool:
    return player_a.team_id is not None and player_a.team_id == player_b.team_id
