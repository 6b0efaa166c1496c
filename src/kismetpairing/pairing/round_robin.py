"""Round robin scheduling by the circle method.

The first seat stays fixed while the others rotate one place each round. An
odd field gets an empty seat, and whoever faces it has the bye. With several
plays per opponent, every second cycle swaps who is player A.
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

from typing import List, Optional, Sequence

from kismetpairing.constants import METHOD_ROUND_ROBIN, STATUS_COMPLETED
from kismetpairing.exceptions import InsufficientPlayersException
from kismetpairing.models import (
    Match,
    PairingHistory,
    Player,
    Standing,
    TournamentConfig,
)
from kismetpairing.pairing.base import PairingAlgorithm
from kismetpairing.type_hints import RoundSchedule
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)


def schedule_order(players: Sequence[Player]) -> List[Player]:
    """Seating order for the circle: by seed, then id."""
    return sorted(players, key=lambda p: (p.seed, p.id))


def generate_schedule(
    player_ids: Sequence[str], total_rounds: int, plays_per_opponent: int = 1
) -> List[RoundSchedule]:
    """Generate the whole round robin schedule in one call.

    Args:
        player_ids: Players in seating order
        total_rounds: Number of rounds to generate
        plays_per_opponent: Number of cycles; odd cycles (second, fourth,
            ...) swap player A and player B

    Returns:
        One list of ``(player_a, player_b)`` seats per round; ``player_b``
        is None for the bye

    Raises:
        InsufficientPlayersException: If fewer than two players are given
    """
    if len(player_ids) < 2:
        raise InsufficientPlayersException(
            f"Round robin needs at least two players, got {len(player_ids)}"
        )
    seats: List[Optional[str]] = list(player_ids)
    if len(seats) % 2:
        seats.append(None)
    seat_count = len(seats)
    rounds_per_cycle = seat_count - 1
    half = seat_count // 2

    schedule: List[RoundSchedule] = []
    for round_index in range(total_rounds):
        first_half = seats[:half]
        second_half = list(reversed(seats[half:]))
        swap = plays_per_opponent > 1 and (round_index // rounds_per_cycle) % 2 == 1

        pairings: RoundSchedule = []
        for seat_a, seat_b in zip(first_half, second_half):
            if seat_a is None or seat_b is None:
                pairings.append((seat_a if seat_a is not None else seat_b, None))
            elif swap:
                pairings.append((seat_b, seat_a))
            else:
                pairings.append((seat_a, seat_b))
        schedule.append(pairings)

        seats.insert(1, seats.pop())
    return schedule


class RoundRobinPairing(PairingAlgorithm):
    """Plays one round of the division's round robin schedule.

    The schedule is rebuilt from the division's seating order each time, so
    the round it produces depends only on the field and on how many rounds
    into the round robin ``round_number`` is.

    Args:
        start_round: First tournament round of the round robin block
    """

    method = METHOD_ROUND_ROBIN

    def __init__(self, start_round: int = 1):
        self.start_round = start_round

    def pair(
        self,
        config: TournamentConfig,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
        history: PairingHistory,
    ) -> List[Match]:
        offset = round_number - self.start_round
        ordered = schedule_order(players)
        schedule = generate_schedule(
            [p.id for p in ordered],
            offset + 1,
            config.round_robin_plays_per_opponent,
        )
        matches: List[Match] = []
        for player_a_id, player_b_id in schedule[offset]:
            if player_b_id is None:
                matches.append(
                    Match(
                        tournament_id=config.tournament_id,
                        round=round_number,
                        player_a_id=player_a_id,
                        score_a=config.bye_spread,
                        score_b=0,
                        status=STATUS_COMPLETED,
                    )
                )
                logger.info(
                    "Round %s: round robin bye to %s", round_number, player_a_id
                )
            else:
                matches.append(
                    Match(
                        tournament_id=config.tournament_id,
                        round=round_number,
                        player_a_id=player_a_id,
                        player_b_id=player_b_id,
                    )
                )
        return matches

    def __repr__(self) -> str:
        return f"RoundRobinPairing(start_round={self.start_round})"
