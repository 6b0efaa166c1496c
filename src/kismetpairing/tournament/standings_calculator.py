"""Standings calculation for Scrabble tournaments.

Standings are a pure function of the roster, the match list and the
configuration: score and record, cumulative spread, Buchholz-family
tie-breaks, provisional rating change, per-division rank and clinch status.
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

import functools
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from kismetpairing.constants import (
    CLINCHED,
    RESULT_BYE,
    RESULT_FORFEIT,
    RESULT_LOSS,
    RESULT_TIE,
    RESULT_WIN,
    TB_BUCHHOLZ,
    TB_CUMULATIVE_SPREAD,
    TB_MEDIAN_BUCHHOLZ,
    TB_RATING,
)
from kismetpairing.exceptions import InvalidResultException, PlayerNotFoundException
from kismetpairing.models import (
    LastGameInfo,
    Match,
    Player,
    Standing,
    TeamStanding,
    TournamentConfig,
)
from kismetpairing.tournament.rating import RatingUpdater
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class _PlayerStats:
    score: float = 0.0
    wins: float = 0.0
    losses: float = 0.0
    cumulative_spread: int = 0
    opponents: List[str] = field(default_factory=list)
    last_game: Optional[LastGameInfo] = None


def _tiebreak_value(standing: Standing, key: str) -> float:
    if key == TB_CUMULATIVE_SPREAD:
        return standing.cumulative_spread
    if key == TB_BUCHHOLZ:
        return standing.buchholz
    if key == TB_MEDIAN_BUCHHOLZ:
        return standing.median_buchholz
    if key == TB_RATING:
        return standing.player.rating
    return 0.0


def median_buchholz(opponent_scores: Sequence[float]) -> float:
    """Buchholz without the single highest and lowest opponent score.

    With fewer than three opponents this equals plain Buchholz.
    """
    if len(opponent_scores) < 3:
        return float(sum(opponent_scores))
    return float(sum(sorted(opponent_scores)[1:-1]))


def group_by_division(
    config: TournamentConfig, players: Sequence[Player]
) -> Dict[Optional[str], List[Player]]:
    """Group players by division, in configured division order.

    Players whose division is not configured are grouped after the
    configured divisions, keyed by their own division id.
    """
    groups: Dict[Optional[str], List[Player]] = {d.id: [] for d in config.divisions}
    for player in players:
        groups.setdefault(player.division_id, []).append(player)
    return groups


class StandingsCalculator:
    """Computes ranked standings from a roster and a match list.

    Args:
        config: Tournament configuration (weights, tie-break order, K-factor)
    """

    def __init__(self, config: TournamentConfig):
        self.config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def calculate(
        self,
        players: Sequence[Player],
        matches: Sequence[Match],
        division_id: Optional[str] = None,
    ) -> List[Standing]:
        """Compute standings for every division, or one division.

        Opponent scores for Buchholz always come from the whole roster, so
        cross-division games are scored consistently.

        Args:
            players: Every player in the tournament, any status
            matches: Every match in the tournament, any status
            division_id: Restrict the output to one division

        Returns:
            Standings grouped by division in configured order, ranked 1..N
            within each division

        Raises:
            PlayerNotFoundException: If a completed match references a
                player not in ``players``
            InvalidResultException: If a completed game is missing a score
        """
        player_map = {p.id: p for p in players}
        stats = {
            p.id: _PlayerStats(
                score=p.bye_count * self.config.scoring.win, wins=float(p.bye_count)
            )
            for p in players
        }
        updater = RatingUpdater(self.config.k_factor)

        completed = sorted(
            (m for m in matches if m.is_completed), key=lambda m: m.sort_key
        )
        for match in completed:
            self._require_players(match, player_map)
            if match.is_bye:
                self._record_bye(stats[match.player_a_id], match)
            else:
                self._record_game(stats, player_map, updater, match)

        unranked = [
            self._build_standing(player, stats, updater) for player in players
        ]
        rounds_remaining = self._rounds_remaining(matches)

        by_id = {s.player.id: s for s in unranked}
        result: List[Standing] = []
        for group_id, group in group_by_division(self.config, players).items():
            if division_id is not None and group_id != division_id:
                continue
            ranked = self.rank_division([by_id[p.id] for p in group])
            self._mark_clinch(ranked, rounds_remaining)
            result.extend(ranked)
        return result

    def initial_standings(self, players: Sequence[Player]) -> List[Standing]:
        """Standings from initial ratings only: everyone at zero, ranked by rating."""
        result: List[Standing] = []
        for group in group_by_division(self.config, players).values():
            ordered = sorted(group, key=lambda p: -p.rating)
            result.extend(
                Standing(
                    rank=index + 1,
                    player=player,
                    current_rating=player.rating,
                    rating_change=0,
                    team_name=self._team_label(player),
                )
                for index, player in enumerate(ordered)
            )
        return result

    def rank_division(self, standings: List[Standing]) -> List[Standing]:
        """Sort one division's standings and assign contiguous ranks."""
        ordered = sorted(standings, key=functools.cmp_to_key(self._compare))
        for index, standing in enumerate(ordered):
            standing.rank = index + 1
        return ordered

    def calculate_team_standings(
        self, standings: Sequence[Standing]
    ) -> List[TeamStanding]:
        """Aggregate each team's best players into a team table.

        A team's total is the sum of its top ``top_players_count`` player
        scores (by individual score, then spread); its spread is summed over
        the same players. Teams are ranked by total, then spread.
        """
        top_count = self.config.team_settings.top_players_count
        team_lines: List[TeamStanding] = []
        for team in self.config.teams:
            members = sorted(
                (s for s in standings if s.player.team_id == team.id),
                key=lambda s: (-s.score, -s.cumulative_spread),
            )
            contributing = members[:top_count]
            team_lines.append(
                TeamStanding(
                    rank=0,
                    team=team,
                    total_score=sum(s.score for s in contributing),
                    contributing_players=contributing,
                    total_cumulative_spread=sum(
                        s.cumulative_spread for s in contributing
                    ),
                )
            )
        team_lines.sort(key=lambda t: (-t.total_score, -t.total_cumulative_spread))
        for index, line in enumerate(team_lines):
            line.rank = index + 1
        return team_lines

    # ------------------------------------------------------------------
    # Walk
    # ------------------------------------------------------------------

    def _require_players(self, match: Match, player_map: Dict[str, Player]) -> None:
        for player_id in match.player_ids:
            if player_id not in player_map:
                raise PlayerNotFoundException(
                    f"Match {match.id} references unknown player {player_id}",
                    tournament_id=self.config.tournament_id,
                    round_number=match.round,
                )

    def _record_bye(self, stats: _PlayerStats, match: Match) -> None:
        # Score and win already seeded from the player's bye rounds
        self._set_last_game(
            stats,
            LastGameInfo(
                round=match.round,
                result=RESULT_BYE,
                player_score=match.score_a or 0,
                opponent_score=match.score_b or 0,
            ),
        )

    def _record_game(
        self,
        stats: Dict[str, _PlayerStats],
        player_map: Dict[str, Player],
        updater: RatingUpdater,
        match: Match,
    ) -> None:
        if match.score_a is None or match.score_b is None:
            raise InvalidResultException(
                f"Completed match {match.id} is missing a score",
                tournament_id=self.config.tournament_id,
                round_number=match.round,
            )
        weights = self.config.scoring
        a = stats[match.player_a_id]
        b = stats[match.player_b_id]

        if match.score_a > match.score_b:
            a.score += weights.win
            b.score += weights.loss
            a.wins += 1
            b.losses += 1
        elif match.score_b > match.score_a:
            b.score += weights.win
            a.score += weights.loss
            b.wins += 1
            a.losses += 1
        else:
            a.score += weights.draw
            b.score += weights.draw
            for side in (a, b):
                side.wins += 0.5
                side.losses += 0.5

        spread = match.score_a - match.score_b
        a.cumulative_spread += spread
        b.cumulative_spread -= spread
        a.opponents.append(match.player_b_id)
        b.opponents.append(match.player_a_id)

        player_a = player_map[match.player_a_id]
        player_b = player_map[match.player_b_id]
        updater.apply_game(
            player_a.id,
            player_a.rating,
            player_b.id,
            player_b.rating,
            match.score_a,
            match.score_b,
        )

        self._set_last_game(
            a,
            LastGameInfo(
                round=match.round,
                result=self._result_code(match, match.score_a, match.score_b),
                player_score=match.score_a,
                opponent_score=match.score_b,
                opponent_seed=player_b.seed,
            ),
        )
        self._set_last_game(
            b,
            LastGameInfo(
                round=match.round,
                result=self._result_code(match, match.score_b, match.score_a),
                player_score=match.score_b,
                opponent_score=match.score_a,
                opponent_seed=player_a.seed,
            ),
        )
        logger.debug(
            "Round %s: %s %s-%s %s",
            match.round,
            player_a.id,
            match.score_a,
            match.score_b,
            player_b.id,
        )

    @staticmethod
    def _result_code(match: Match, own: int, other: int) -> str:
        if match.is_forfeit:
            return RESULT_FORFEIT
        if own > other:
            return RESULT_WIN
        if own < other:
            return RESULT_LOSS
        return RESULT_TIE

    @staticmethod
    def _set_last_game(stats: _PlayerStats, game: LastGameInfo) -> None:
        if stats.last_game is None or game.round >= stats.last_game.round:
            stats.last_game = game

    # ------------------------------------------------------------------
    # Ranking
    # ------------------------------------------------------------------

    def _build_standing(
        self,
        player: Player,
        stats: Dict[str, _PlayerStats],
        updater: RatingUpdater,
    ) -> Standing:
        own = stats[player.id]
        # Opponents' final scores, so this runs after the whole walk
        opponent_scores = [stats[opp].score for opp in own.opponents]
        change = updater.rounded_delta(player.id)
        return Standing(
            rank=0,
            player=player,
            score=own.score,
            wins=own.wins,
            losses=own.losses,
            cumulative_spread=own.cumulative_spread,
            buchholz=float(sum(opponent_scores)),
            median_buchholz=median_buchholz(opponent_scores),
            last_game=own.last_game,
            current_rating=player.rating + change,
            rating_change=change,
            team_name=self._team_label(player),
        )

    def _team_label(self, player: Player) -> Optional[str]:
        if not self.config.team_settings.display_team_names:
            return None
        return self.config.team_name(player.team_id)

    def _compare(self, a: Standing, b: Standing) -> int:
        """Comparison for sorting: higher is better on every criterion."""
        if a.score != b.score:
            return -1 if a.score > b.score else 1
        for key in self.config.tie_break_order:
            value_a = _tiebreak_value(a, key)
            value_b = _tiebreak_value(b, key)
            if value_a != value_b:
                return -1 if value_a > value_b else 1
        if a.player.rating != b.player.rating:
            return -1 if a.player.rating > b.player.rating else 1
        return 0

    def _rounds_remaining(self, matches: Sequence[Match]) -> int:
        highest_round = max((m.round for m in matches), default=0)
        return self.config.total_rounds - highest_round

    @staticmethod
    def _mark_clinch(ranked: List[Standing], rounds_remaining: int) -> None:
        """Mark the leader clinched when second place cannot catch up on wins.

        Only wins are considered; tie-breaks are not modelled.
        """
        if not ranked:
            return
        if rounds_remaining <= 0:
            ranked[0].clinch_status = CLINCHED
            return
        if len(ranked) >= 2:
            leader, runner_up = ranked[0], ranked[1]
            if runner_up.wins + rounds_remaining < leader.wins:
                leader.clinch_status = CLINCHED
