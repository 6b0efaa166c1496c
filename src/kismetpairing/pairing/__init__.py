"""Pairing algorithms and their lookup by method name."""

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
from typing import Optional

from kismetpairing.constants import (
    METHOD_AUSTRALIAN_DRAW,
    METHOD_CHEW,
    METHOD_KING_OF_THE_HILL,
    METHOD_ROUND_ROBIN,
    METHOD_SWISS,
)
from kismetpairing.exceptions import InvalidPairingException
from kismetpairing.models import PairingRule
from kismetpairing.pairing.australian_draw import AustralianDrawPairing, split_quartiles
from kismetpairing.pairing.base import PairingAlgorithm, are_teammates
from kismetpairing.pairing.chew import ChewPairing
from kismetpairing.pairing.king_of_the_hill import KingOfTheHillPairing
from kismetpairing.pairing.round_robin import RoundRobinPairing, generate_schedule
from kismetpairing.pairing.swiss import SwissPairing


def get_pairing_algorithm(
    rule: PairingRule, rng: Optional[random.Random] = None
) -> PairingAlgorithm:
    """Build the algorithm a rule asks for.

    Raises:
        InvalidPairingException: If the method is unknown
    """
    method = rule.pairing_method
    if method == METHOD_SWISS:
        return SwissPairing()
    if method == METHOD_KING_OF_THE_HILL:
        return KingOfTheHillPairing()
    if method == METHOD_ROUND_ROBIN:
        return RoundRobinPairing(start_round=rule.start_round)
    if method == METHOD_AUSTRALIAN_DRAW:
        return AustralianDrawPairing(scheme=rule.scheme, rng=rng)
    if method == METHOD_CHEW:
        return ChewPairing()
    raise InvalidPairingException(f"Pairing method '{method}' is not implemented")


__all__ = [
    "AustralianDrawPairing",
    "ChewPairing",
    "KingOfTheHillPairing",
    "PairingAlgorithm",
    "RoundRobinPairing",
    "SwissPairing",
    "are_teammates",
    "generate_schedule",
    "get_pairing_algorithm",
    "split_quartiles",
]
