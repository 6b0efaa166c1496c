"""King of the Hill: 1 v 2, 3 v 4, ... by rank."""

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

from typing import List, Sequence

from kismetpairing.constants import METHOD_KING_OF_THE_HILL
from kismetpairing.models import (
    Match,
    PairingHistory,
    Player,
    Standing,
    TournamentConfig,
)
from kismetpairing.pairing.base import PairingAlgorithm
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)


class KingOfTheHillPairing(PairingAlgorithm):
    """Adjacent ranks meet; rematches are allowed."""

    method = METHOD_KING_OF_THE_HILL

    def pair(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
        history: PairingHistory,
    ) -> List[Match]:
        ranked = self.sort_by_rank(players, self.standings_by_player(standings))
        matches = [
            self.make_match(config, round_number, ranked[i], ranked[i + 1])
            for i in range(0, len(ranked) - 1, 2)
        ]
        if len(ranked) % 2:
            logger.error(
                "Round %s: %s left unpaired by King of the Hill",
                round_number,
                ranked[-1].name,
            )
        return matches
