"""Chew pairings: King of the Hill for contenders, Swiss for everyone else.

A contender is a player who can still reach the leader's current score if
they win every remaining game. Contenders are paired by rank to settle the
top of the field quickly; the rest are paired Swiss.
"""

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

from typing import List, Sequence, Tuple

from kismetpairing.constants import METHOD_CHEW
from kismetpairing.models import (
    Match,
    PairingHistory,
    Player,
    Standing,
    TournamentConfig,
)
from kismetpairing.pairing.base import PairingAlgorithm
from kismetpairing.pairing.king_of_the_hill import KingOfTheHillPairing
from kismetpairing.pairing.swiss import SwissPairing
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)


class ChewPairing(PairingAlgorithm):
    """Contenders by King of the Hill, everyone else by Swiss.

    A contender can still reach the leader's current score by winning every
    remaining game. An odd contender group floats its lowest-ranked member
    into the field. This includes a group of one, so a runaway leader is
    paired with the field instead of being left without an opponent.
    """

    method = METHOD_CHEW

    def __init__(self):
        self.contender_pairing = KingOfTheHillPairing()
        self.field_pairing = SwissPairing()

    def split_contenders(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
    ) -> Tuple[List[Player], List[Player]]:
        """Split the pool into (contenders, non-contenders).

        Rounds remaining counts the round being paired. An odd contender
        group sends its lowest-ranked member to the non-contenders; a lone
        contender is paired with the field.
        """
        lookup = self.standings_by_player(standings)
        pool_scores = {
            p.id: (lookup[p.id].score if p.id in lookup else 0.0) for p in players
        }
        leader_score = max(pool_scores.values(), default=0.0)
        rounds_remaining = config.total_rounds - (round_number - 1)
        max_gain = rounds_remaining * config.scoring.win

        contenders = [p for p in players if pool_scores[p.id] + max_gain >= leader_score]
        contender_ids = {p.id for p in contenders}
        field = [p for p in players if p.id not in contender_ids]

        contenders = self.sort_by_rank(contenders, lookup)
        if len(contenders) % 2:
            field.append(contenders.pop())
        logger.debug(
            "Round %s: %s contenders, %s in the field (leader %s, %s rounds left)",
            round_number,
            len(contenders),
            len(field),
            leader_score,
            rounds_remaining,
        )
        return contenders, field

    def pair(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
        history: PairingHistory,
    ) -> List[Match]:
        contenders, field = self.split_contenders(
            config, round_number, players, standings
        )
        return self.contender_pairing.pair(
            config, round_number, contenders, standings, history
        ) + self.field_pairing.pair(config, round_number, field, standings, history)
