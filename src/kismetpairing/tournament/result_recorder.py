"""Writes game results and corrections to the match store."""

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

from dataclasses import replace
from typing import List, Optional, Tuple

from kismetpairing.constants import STATUS_COMPLETED
from kismetpairing.exceptions import (
    InvalidPairingException,
    InvalidResultException,
    MatchNotFoundException,
    TournamentStateException,
)
from kismetpairing.models import Match, TournamentConfig
from kismetpairing.store import MatchStore
from kismetpairing.tournament.bye_resolver import ForfeitResolver
from kismetpairing.type_hints import ScoreSheet
from kismetpairing.utils import setup_logger
from kismetpairing.utils.validation import validate_score_pair_strict

logger = setup_logger(__name__)


class ResultRecorder:
    def __init__(self, store: MatchStore):
        self.store = store

    def _get_match(self, tournament_id: str, match_id: int) -> Match:
        for match in self.store.get_matches(tournament_id):
            if match.id == match_id:
                return match
        raise MatchNotFoundException(
            f"Unknown match {match_id}", tournament_id=tournament_id
        )

    def submit_scores(
        self, tournament_id: str, scores: ScoreSheet
    ) -> List[Match]:
        """Record results for pending games.

        Every entry is checked before anything is written, so a bad entry
        leaves the whole batch unsaved.

        Args:
            tournament_id: Tournament the matches belong to
            scores: Match id to (score_a, score_b)

        Returns:
            The completed matches, in the order given

        Raises:
            MatchNotFoundException: For an unknown match id
            InvalidResultException: For a bye, an already scored match or a
                score out of range
        """
        by_id = {m.id: m for m in self.store.get_matches(tournament_id)}
        updated: List[Match] = []
        for match_id, (score_a, score_b) in scores.items():
            match = by_id.get(match_id)
            if match is None:
                raise MatchNotFoundException(
                    f"Unknown match {match_id}", tournament_id=tournament_id
                )
            if match.is_bye:
                raise InvalidResultException(
                    f"Match {match_id} is a bye and takes no score",
                    tournament_id=tournament_id,
                    round_number=match.round,
                )
            if match.is_completed:
                raise InvalidResultException(
                    f"Match {match_id} already has a result; edit it instead",
                    tournament_id=tournament_id,
                    round_number=match.round,
                )
            try:
                score_a, score_b = validate_score_pair_strict(score_a, score_b)
            except InvalidResultException as e:
                raise InvalidResultException(
                    f"Match {match_id}: {e.message}",
                    tournament_id=tournament_id,
                    round_number=match.round,
                ) from e
            updated.append(
                replace(match, score_a=score_a, score_b=score_b, status=STATUS_COMPLETED)
            )

        for match in updated:
            self.store.update_match(match)
            logger.debug(
                "Round %s match %s: %s %s - %s %s",
                match.round,
                match.id,
                match.player_a_id,
                match.score_a,
                match.score_b,
                match.player_b_id,
            )
        return updated

    def edit_match_score(
        self, tournament_id: str, match_id: int, score_a: int, score_b: int
    ) -> Match:
        """Overwrite a game's scores; any forfeit marking is cleared."""
        match = self._get_match(tournament_id, match_id)
        if match.is_bye:
            raise InvalidResultException(
                f"Match {match_id} is a bye and takes no score",
                tournament_id=tournament_id,
                round_number=match.round,
            )
        score_a, score_b = validate_score_pair_strict(score_a, score_b)
        edited = replace(
            match,
            score_a=score_a,
            score_b=score_b,
            status=STATUS_COMPLETED,
            is_forfeit=False,
            forfeited_player_id=None,
        )
        self.store.update_match(edited)
        logger.info(
            "Round %s match %s edited: %s-%s (was %s-%s)",
            match.round,
            match_id,
            score_a,
            score_b,
            match.score_a,
            match.score_b,
        )
        return edited

    def mark_forfeit(
        self,
        config: TournamentConfig,
        match_id: int,
        forfeited_player_id: str,
    ) -> Match:
        match = self._get_match(config.tournament_id, match_id)
        forfeited = ForfeitResolver(config).apply_forfeit(match, forfeited_player_id)
        self.store.update_match(forfeited)
        return forfeited

    def swap_players(
        self, tournament_id: str, round_number: int, player1_id: str, player2_id: str
    ) -> Tuple[Match, Match]:
        """Exchange two players between their pending games in a round.

        Raises:
            InvalidPairingException: If either player has no game in the
                round, both share a game, or either game is a bye
            TournamentStateException: If either game already has a result
        """
        round_matches = [
            m for m in self.store.get_matches(tournament_id) if m.round == round_number
        ]
        first = self._match_with(round_matches, player1_id)
        second = self._match_with(round_matches, player2_id)
        if first is None or second is None:
            raise InvalidPairingException(
                "Both players must be paired in the round to swap them",
                tournament_id=tournament_id,
                round_number=round_number,
            )
        if first.id == second.id:
            raise InvalidPairingException(
                f"{player1_id} and {player2_id} are already paired together",
                tournament_id=tournament_id,
                round_number=round_number,
            )
        if first.is_bye or second.is_bye:
            raise InvalidPairingException(
                "Byes cannot be swapped",
                tournament_id=tournament_id,
                round_number=round_number,
            )
        if first.is_completed or second.is_completed:
            raise TournamentStateException(
                "Only pending games can be swapped",
                tournament_id=tournament_id,
                round_number=round_number,
            )

        swapped_first = self._substitute(first, player1_id, player2_id)
        swapped_second = self._substitute(second, player2_id, player1_id)
        self.store.update_match(swapped_first)
        self.store.update_match(swapped_second)
        logger.info(
            "Round %s: swapped %s and %s between matches %s and %s",
            round_number,
            player1_id,
            player2_id,
            first.id,
            second.id,
        )
        return swapped_first, swapped_second

    @staticmethod
    def _match_with(matches: List[Match], player_id: str) -> Optional[Match]:
        return next((m for m in matches if m.involves(player_id)), None)

    @staticmethod
    def _substitute(match: Match, old_id: str, new_id: str) -> Match:
        def swap(value: Optional[str]) -> Optional[str]:
            return new_id if value == old_id else value

        return replace(
            match,
            player_a_id=swap(match.player_a_id),
            player_b_id=swap(match.player_b_id),
            first_turn_player_id=swap(match.first_turn_player_id),
        )
