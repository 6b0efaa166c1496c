"""Quartile ("Australian") draw."""

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

import random
from typing import List, Optional, Sequence, Tuple

from kismetpairing.constants import (
    DEFAULT_QUARTILE_SCHEME,
    METHOD_AUSTRALIAN_DRAW,
    SCHEME_1V2_3V4,
    SCHEME_1V3_2V4,
)
from kismetpairing.exceptions import InvalidPairingException
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


def split_quartiles(players: Sequence[Player]) -> List[List[Player]]:
    """Split players, highest rated first, into four near-equal quartiles.

    The remainder of ``len(players) / 4`` goes one extra player each to the
    earliest quartiles.
    """
    ordered = sorted(players, key=lambda p: -p.rating)
    size, remainder = divmod(len(ordered), 4)
    quartiles = []
    start = 0
    for index in range(4):
        end = start + size + (1 if index < remainder else 0)
        quartiles.append(ordered[start:end])
        start = end
    return quartiles


class AustralianDrawPairing(PairingAlgorithm):
    """Crosses rating quartiles, shuffled within each quartile.

    Args:
        scheme: ``"1v3_2v4"`` or ``"1v2_3v4"``
        rng: Random source for the within-quartile shuffle
    """

    method = METHOD_AUSTRALIAN_DRAW

    CROSSINGS = {
        SCHEME_1V3_2V4: ((0, 2), (1, 3)),
        SCHEME_1V2_3V4: ((0, 1), (2, 3)),
    }

    def __init__(
        self,
        scheme: str = DEFAULT_QUARTILE_SCHEME,
        rng: Optional[random.Random] = None,
    ):
        if scheme not in self.CROSSINGS:
            raise InvalidPairingException(f"Unknown quartile scheme: {scheme}")
        self.scheme = scheme
        self.rng = rng or random.Random()

    def pair(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
        history: PairingHistory,
    ) -> List[Match]:
        quartiles = split_quartiles(players)
        for quartile in quartiles:
            self.rng.shuffle(quartile)

        matches: List[Match] = []
        leftovers: List[Player] = []
        for first, second in self.CROSSINGS[self.scheme]:
            pairs, rest = self._cross(quartiles[first], quartiles[second])
            matches.extend(
                self.make_match(config, round_number, a, b) for a, b in pairs
            )
            leftovers.extend(rest)

        for i in range(0, len(leftovers) - 1, 2):
            matches.append(
                self.make_match(config, round_number, leftovers[i], leftovers[i + 1])
            )
        if len(leftovers) % 2:
            logger.error(
                "Round %s: %s left unpaired by the quartile draw",
                round_number,
                leftovers[-1].name,
            )
        return matches

    @staticmethod
    def _cross(
        upper: List[Player], lower: List[Player]
    ) -> Tuple[List[Tuple[Player, Player]], List[Player]]:
        count = min(len(upper), len(lower))
        pairs = list(zip(upper[:count], lower[:count]))
        rest = upper[count:] + lower[count:]
        return pairs, rest
