"""Provisional Elo-style rating updates.

This is a simplified illustrative model: each completed game moves both
players by ``K * (actual - expected)`` using their live ratings at that
point of the event, so the result depends on game order.
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

import math
from typing import Dict, List, Tuple

from kismetpairing.constants import DEFAULT_K_FACTOR, ELO_SCALE


def game_outcome(own_score: int, opponent_score: int) -> float:
    """Actual score of a game from one side: 1, 0.5 or 0."""
    if own_score > opponent_score:
        return 1.0
    if own_score < opponent_score:
        return 0.0
    return 0.5


class RatingUpdater:
    """Folds games into running, unrounded rating deltas.

    Args:
        k_factor: Maximum rating change per game
    """

    def __init__(self, k_factor: float = DEFAULT_K_FACTOR):
        self.k_factor = k_factor
        self.deltas: Dict[str, float] = {}

    @staticmethod
    def expected_score(rating_a: float, rating_b: float) -> float:
        """Expected score of A against B."""
        return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / ELO_SCALE))

    def live_rating(self, player_id: str, base_rating: float) -> float:
        return base_rating + self.deltas.get(player_id, 0.0)

    def apply_game(
        self,
        player_a_id: str,
        rating_a: float,
        player_b_id: str,
        rating_b: float,
        score_a: int,
        score_b: int,
    ) -> float:
        """Apply one completed game and return A's change.

        ``rating_a`` and ``rating_b`` are the players' base ratings; the
        accumulated deltas are added before computing the expectation.
        B's change is the exact negative of A's.
        """
        live_a = self.live_rating(player_a_id, rating_a)
        live_b = self.live_rating(player_b_id, rating_b)
        change = self.k_factor * (
            game_outcome(score_a, score_b) - self.expected_score(live_a, live_b)
        )
        self.deltas[player_a_id] = self.deltas.get(player_a_id, 0.0) + change
        self.deltas[player_b_id] = self.deltas.get(player_b_id, 0.0) - change
        return change

    def rounded_delta(self, player_id: str) -> int:
        # half-up
        return math.floor(self.deltas.get(player_id, 0.0) + 0.5)


def performance_rating(
    results: List[Tuple[float, float]], fallback: int
) -> int:
    """Linear performance rating over ``(opponent_rating, outcome)`` pairs.

    Uses the common approximation: average opponent rating plus
    400 * (wins - losses) / games. Returns ``fallback`` when no games
    were played.
    """
    if not results:
        return fallback
    games = len(results)
    average = sum(rating for rating, _ in results) / games
    net = sum(2 * outcome - 1 for _, outcome in results)
    return int(round(average + ELO_SCALE * net / games))
