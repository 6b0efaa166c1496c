"""Bye selection and forfeit encoding."""

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

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from kismetpairing.constants import (
    BYE_HIGHEST_RANKED_FEWEST_BYES,
    BYE_LOWEST_RANKED_FEWEST_BYES,
    STATUS_COMPLETED,
    UNRANKED,
)
from kismetpairing.exceptions import InvalidConfigurationException, InvalidResultException
from kismetpairing.models import Match, Player, Standing, TournamentConfig
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class ByeAssignment:
    """Outcome of assigning a bye.

    Attributes:
        match: The completed bye match
        player: The bye player with the round appended to ``bye_rounds``
        remaining: The pool left to pair, bye player removed
    """

    match: Match
    player: Player
    remaining: List[Player]


class ByeResolver:
    """Chooses who sits out when a division has an odd number of players."""

    def __init__(self, config: TournamentConfig):
        self.config = config

    def select_bye_player(
        self,
        players: Sequence[Player],
        standings: Sequence[Standing],
        policy: Optional[str] = None,
    ) -> Optional[Player]:
        """Pick the bye recipient.

        Candidates are ordered by number of byes already received, then by
        rank: worst-ranked first under ``lowest_ranked_fewest_byes``,
        best-ranked first under ``highest_ranked_fewest_byes``. Rating
        breaks any remaining tie in the same direction.

        Returns:
            The chosen player, or None for an empty pool
        """
        if not players:
            return None
        policy = policy or self.config.bye_assignment_method
        ranks = {s.player.id: s.rank for s in standings}

        if policy == BYE_LOWEST_RANKED_FEWEST_BYES:

            def key(player: Player):
                return (
                    player.bye_count,
                    -ranks.get(player.id, UNRANKED),
                    player.rating,
                    player.id,
                )

        elif policy == BYE_HIGHEST_RANKED_FEWEST_BYES:

            def key(player: Player):
                return (
                    player.bye_count,
                    ranks.get(player.id, UNRANKED),
                    -player.rating,
                    player.id,
                )

        else:
            raise InvalidConfigurationException(
                f"Unknown bye assignment method: {policy}",
                tournament_id=self.config.tournament_id,
            )
        return min(players, key=key)

    def assign_bye(
        self,
        round_number: int,
        players: Sequence[Player],
        standings: Sequence[Standing],
    ) -> Optional[ByeAssignment]:
        """Give one player in an odd pool a bye for ``round_number``.

        Returns:
            The assignment, or None when the pool is even
        """
        if len(players) % 2 == 0:
            return None
        chosen = self.select_bye_player(players, standings)
        bye_match = Match(
            tournament_id=self.config.tournament_id,
            round=round_number,
            player_a_id=chosen.id,
            player_b_id=None,
            score_a=self.config.bye_spread,
            score_b=0,
            status=STATUS_COMPLETED,
        )
        logger.info(
            "Round %s: bye to %s (%s previous byes)",
            round_number,
            chosen.name,
            chosen.bye_count,
        )
        return ByeAssignment(
            match=bye_match,
            player=chosen.with_bye(round_number),
            remaining=[p for p in players if p.id != chosen.id],
        )


class ForfeitResolver:
    """Encodes a declared forfeit as a completed scoreline."""

    def __init__(self, config: TournamentConfig):
        self.config = config

    def apply_forfeit(self, match: Match, forfeited_player_id: str) -> Match:
        """Return ``match`` completed as a forfeit by ``forfeited_player_id``.

        Raises:
            InvalidResultException: If the match is a bye or the player is
                not in it
        """
        if match.is_bye:
            raise InvalidResultException(
                f"Cannot forfeit bye match {match.id}",
                tournament_id=match.tournament_id,
                round_number=match.round,
            )
        if not match.involves(forfeited_player_id):
            raise InvalidResultException(
                f"Player {forfeited_player_id} is not in match {match.id}",
                tournament_id=match.tournament_id,
                round_number=match.round,
            )
        win = self.config.forfeit_win_score
        loss = self.config.forfeit_loss_score
        a_forfeited = forfeited_player_id == match.player_a_id
        logger.info(
            "Round %s: match %s forfeited by %s",
            match.round,
            match.id,
            forfeited_player_id,
        )
        return replace(
            match,
            score_a=loss if a_forfeited else win,
            score_b=win if a_forfeited else loss,
            status=STATUS_COMPLETED,
            is_forfeit=True,
            forfeited_player_id=forfeited_player_id,
        )
