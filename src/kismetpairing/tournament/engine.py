"""In-process API for running a tournament.

:class:`TournamentEngine` ties the stores, the standings calculator, the
result recorder and the pairing scheduler together. Every write for a
tournament runs under that tournament's lock, and the post-round work
(snapshot plus next-round pairing) is claimed through the match store so
it runs exactly once per round.
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

import random
import threading
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from kismetpairing.constants import DIVISION_MODE_MULTIPLE
from kismetpairing.exceptions import (
    DivisionPairingException,
    InvalidPlayerDataException,
    KismetPairingException,
    PlayerNotFoundException,
    ScoresSavedPairingFailedException,
    StoreException,
    TournamentNotFoundException,
    TournamentStateException,
)
from kismetpairing.models import (
    Match,
    PairingRule,
    Player,
    PostTournamentRating,
    Standing,
    TeamStanding,
    TournamentConfig,
    assign_class,
    assign_division,
    assign_seeds,
)
from kismetpairing.pairing.round_robin import generate_schedule, schedule_order
from kismetpairing.store import TournamentStore
from kismetpairing.tournament.pairing_scheduler import (
    PairingScheduler,
    RoundPairingOutcome,
    validate_rules,
)
from kismetpairing.tournament.rating import game_outcome, performance_rating
from kismetpairing.tournament.result_recorder import ResultRecorder
from kismetpairing.tournament.standings_calculator import StandingsCalculator
from kismetpairing.type_hints import RoundSchedule, ScoreSheet
from kismetpairing.utils import setup_logger
from kismetpairing.utils.validation import validate_rating_strict

logger = setup_logger(__name__)


@dataclass
class ScoreSubmissionResult:
    """Outcome of a score submission.

    Attributes:
        saved_matches: Matches whose results were written
        completed_rounds: Rounds this submission finished
        pairings: Next-round outcome for each completed round that was
            followed by pairing work (None once the event is over)
    """

    saved_matches: List[Match] = field(default_factory=list)
    completed_rounds: List[int] = field(default_factory=list)
    pairings: Dict[int, Optional[RoundPairingOutcome]] = field(default_factory=dict)


@dataclass
class ScorecardEntry:
    round: int
    opponent_id: Optional[str]
    opponent_name: Optional[str]
    own_score: Optional[int]
    opponent_score: Optional[int]
    result: Optional[str]
    spread: int
    cumulative_score: float
    cumulative_spread: int
    is_forfeit: bool = False
    pending: bool = False


@dataclass
class HeadToHead:
    player1_id: str
    player2_id: str
    games: List[Match] = field(default_factory=list)
    player1_wins: int = 0
    player2_wins: int = 0
    ties: int = 0
    player1_spread: int = 0


@dataclass
class TournamentStatus:
    tournament_id: str
    current_round: int
    total_rounds: int
    pending_matches: int
    completed_matches: int

    @property
    def is_complete(self) -> bool:
        return self.current_round >= self.total_rounds and self.pending_matches == 0


class TournamentEngine:
    """Public entry point for setup, results, pairing and standings.

    Args:
        store: Implementation of all five storage collaborators
        rng: Random source for the quartile draw; seed it for repeatable
            pairings
    """

    def __init__(self, store: TournamentStore, rng: Optional[random.Random] = None):
        self.store = store
        self.scheduler = PairingScheduler(store, rng)
        self.recorder = ResultRecorder(store)
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock(self, tournament_id: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(tournament_id, threading.Lock())

    def _config(self, tournament_id: str) -> TournamentConfig:
        config = self.store.get_config(tournament_id)
        if config is None:
            raise TournamentNotFoundException(
                "Tournament does not exist", tournament_id=tournament_id
            )
        return config

    def _player(self, tournament_id: str, player_id: str) -> Player:
        for player in self.store.get_players(tournament_id):
            if player.id == player_id:
                return player
        raise PlayerNotFoundException(
            f"Unknown player {player_id}", tournament_id=tournament_id
        )

    # ========== Setup ==========

    def create_tournament(self, config: TournamentConfig) -> TournamentConfig:
        config.validate()
        with self._lock(config.tournament_id):
            if self.store.get_config(config.tournament_id) is not None:
                raise TournamentStateException(
                    "Tournament already exists", tournament_id=config.tournament_id
                )
            self.store.save_config(config)
        logger.info(
            "Created tournament %s '%s' (%s rounds, %s divisions)",
            config.tournament_id,
            config.name,
            config.total_rounds,
            len(config.divisions),
        )
        return config

    def update_config(self, config: TournamentConfig) -> TournamentConfig:
        config.validate()
        with self._lock(config.tournament_id):
            self._config(config.tournament_id)
            self.store.save_config(config)
        return config

    def save_pairing_rules(
        self, tournament_id: str, rules: Sequence[PairingRule]
    ) -> List[PairingRule]:
        """Validate and store a complete rule set, replacing the old one."""
        with self._lock(tournament_id):
            config = self._config(tournament_id)
            validate_rules(rules, config.total_rounds, tournament_id)
            saved = self.store.replace_rules(tournament_id, rules)
        logger.info("Tournament %s: saved %s pairing rules", tournament_id, len(saved))
        return saved

    # ========== Roster ==========

    def add_player(
        self,
        tournament_id: str,
        name: str,
        rating: int,
        team_id: Optional[str] = None,
        player_id: str = "",
    ) -> Player:
        return self.add_players(tournament_id, [(name, rating, team_id, player_id)])[0]

    def add_players(
        self,
        tournament_id: str,
        entries: Iterable[Tuple[str, int, Optional[str], str]],
    ) -> List[Player]:
        """Register players and re-seed the roster by rating.

        Args:
            entries: (name, rating, team_id, player_id) tuples; an empty
                player id lets the store generate one

        Raises:
            InvalidPlayerDataException: For a bad rating, a duplicate id
                or an unknown team
        """
        with self._lock(tournament_id):
            config = self._config(tournament_id)
            existing = {p.id for p in self.store.get_players(tournament_id)}
            known_teams = {t.id for t in config.teams}
            prepared: List[Player] = []
            for name, rating, team_id, player_id in entries:
                rating = validate_rating_strict(rating)
                if player_id and player_id in existing:
                    raise InvalidPlayerDataException(
                        f"Player id {player_id} already registered",
                        tournament_id=tournament_id,
                    )
                if team_id is not None and team_id not in known_teams:
                    raise InvalidPlayerDataException(
                        f"Unknown team {team_id} for player {name}",
                        tournament_id=tournament_id,
                    )
                player_class = assign_class(rating, config.classes)
                prepared.append(
                    Player(
                        id=player_id,
                        name=name,
                        rating=rating,
                        division_id=self._division_for(config, rating),
                        class_id=player_class.id if player_class else None,
                        team_id=team_id,
                    )
                )
            added = [self.store.add_player(tournament_id, p) for p in prepared]
            self._reseed(tournament_id)
            added_ids = [p.id for p in added]
        logger.info("Tournament %s: registered %s players", tournament_id, len(added))
        roster = {p.id: p for p in self.store.get_players(tournament_id)}
        return [roster[pid] for pid in added_ids]

    @staticmethod
    def _division_for(config: TournamentConfig, rating: int) -> Optional[str]:
        if config.division_mode == DIVISION_MODE_MULTIPLE:
            division = assign_division(rating, config.divisions)
        else:
            division = config.divisions[0] if config.divisions else None
        return division.id if division else None

    def _reseed(self, tournament_id: str) -> None:
        players = self.store.get_players(tournament_id)
        for old, new in zip(players, assign_seeds(players)):
            if old.seed != new.seed:
                self.store.update_player(tournament_id, new)

    def withdraw_player(self, tournament_id: str, player_id: str) -> Player:
        """Stop pairing a player; their results stay in the standings."""
        with self._lock(tournament_id):
            player = self._player(tournament_id, player_id).withdraw()
            self.store.update_player(tournament_id, player)
        logger.info("Tournament %s: %s withdrawn", tournament_id, player.name)
        return player

    def reinstate_player(self, tournament_id: str, player_id: str) -> Player:
        with self._lock(tournament_id):
            player = self._player(tournament_id, player_id).reinstate()
            self.store.update_player(tournament_id, player)
        logger.info("Tournament %s: %s reinstated", tournament_id, player.name)
        return player

    def reassign_divisions(self, tournament_id: str) -> List[Player]:
        """Re-run division and class assignment for every player.

        Only allowed before the first pairing.

        Returns:
            The players whose division or class changed
        """
        with self._lock(tournament_id):
            config = self._config(tournament_id)
            if self.store.get_matches(tournament_id):
                raise TournamentStateException(
                    "Divisions cannot change once pairings exist",
                    tournament_id=tournament_id,
                )
            changed = []
            for player in self.store.get_players(tournament_id):
                player_class = assign_class(player.rating, config.classes)
                moved = replace(
                    player,
                    division_id=self._division_for(config, player.rating),
                    class_id=player_class.id if player_class else None,
                )
                if moved != player:
                    self.store.update_player(tournament_id, moved)
                    changed.append(moved)
        logger.info(
            "Tournament %s: %s players changed division or class",
            tournament_id,
            len(changed),
        )
        return changed

    # ========== Reads ==========

    def get_standings(
        self, tournament_id: str, division_id: Optional[str] = None
    ) -> List[Standing]:
        config = self._config(tournament_id)
        return StandingsCalculator(config).calculate(
            self.store.get_players(tournament_id),
            self.store.get_matches(tournament_id),
            division_id,
        )

    def get_team_standings(self, tournament_id: str) -> List[TeamStanding]:
        config = self._config(tournament_id)
        calculator = StandingsCalculator(config)
        standings = calculator.calculate(
            self.store.get_players(tournament_id),
            self.store.get_matches(tournament_id),
        )
        return calculator.calculate_team_standings(standings)

    def get_player_scorecard(
        self, tournament_id: str, player_id: str
    ) -> List[ScorecardEntry]:
        """Round-by-round record of one player, with running totals."""
        config = self._config(tournament_id)
        player = self._player(tournament_id, player_id)
        names = {p.id: p.name for p in self.store.get_players(tournament_id)}
        games = sorted(
            (m for m in self.store.get_matches(tournament_id) if m.involves(player_id)),
            key=lambda m: m.sort_key,
        )
        byes_recorded = {m.round for m in games if m.is_bye}
        # a bye counts as a win even if its match record is missing
        cumulative_score = config.scoring.win * len(
            [r for r in player.bye_rounds if r not in byes_recorded]
        )
        cumulative_spread = 0
        card: List[ScorecardEntry] = []
        for match in games:
            if match.is_bye:
                cumulative_score += config.scoring.win
                card.append(
                    ScorecardEntry(
                        round=match.round,
                        opponent_id=None,
                        opponent_name=None,
                        own_score=match.score_a,
                        opponent_score=match.score_b,
                        result="B",
                        spread=0,
                        cumulative_score=cumulative_score,
                        cumulative_spread=cumulative_spread,
                    )
                )
                continue
            opponent_id = match.opponent_of(player_id)
            if not match.is_completed:
                card.append(
                    ScorecardEntry(
                        round=match.round,
                        opponent_id=opponent_id,
                        opponent_name=names.get(opponent_id),
                        own_score=None,
                        opponent_score=None,
                        result=None,
                        spread=0,
                        cumulative_score=cumulative_score,
                        cumulative_spread=cumulative_spread,
                        pending=True,
                    )
                )
                continue
            own, other = match.scores_for(player_id)
            outcome = game_outcome(own, other)
            if match.is_forfeit:
                result = "F" if match.forfeited_player_id == player_id else "W"
            else:
                result = {1.0: "W", 0.5: "T", 0.0: "L"}[outcome]
            cumulative_score += {
                1.0: config.scoring.win,
                0.5: config.scoring.draw,
                0.0: config.scoring.loss,
            }[outcome]
            cumulative_spread += own - other
            card.append(
                ScorecardEntry(
                    round=match.round,
                    opponent_id=opponent_id,
                    opponent_name=names.get(opponent_id),
                    own_score=own,
                    opponent_score=other,
                    result=result,
                    spread=own - other,
                    cumulative_score=cumulative_score,
                    cumulative_spread=cumulative_spread,
                    is_forfeit=match.is_forfeit,
                )
            )
        return card

    def get_head_to_head(
        self, tournament_id: str, player1_id: str, player2_id: str
    ) -> HeadToHead:
        self._player(tournament_id, player1_id)
        self._player(tournament_id, player2_id)
        record = HeadToHead(player1_id, player2_id)
        for match in sorted(
            self.store.get_matches(tournament_id), key=lambda m: m.sort_key
        ):
            if not (match.involves(player1_id) and match.involves(player2_id)):
                continue
            record.games.append(match)
            if not match.is_completed:
                continue
            own, other = match.scores_for(player1_id)
            outcome = game_outcome(own, other)
            if outcome == 1.0:
                record.player1_wins += 1
            elif outcome == 0.0:
                record.player2_wins += 1
            else:
                record.ties += 1
            record.player1_spread += own - other
        return record

    def get_tournament_status(self, tournament_id: str) -> TournamentStatus:
        config = self._config(tournament_id)
        matches = self.store.get_matches(tournament_id)
        return TournamentStatus(
            tournament_id=tournament_id,
            current_round=max((m.round for m in matches), default=0),
            total_rounds=config.total_rounds,
            pending_matches=sum(1 for m in matches if m.is_pending),
            completed_matches=sum(1 for m in matches if m.is_completed),
        )

    # ========== Results ==========

    def submit_scores(
        self, tournament_id: str, scores: ScoreSheet
    ) -> ScoreSubmissionResult:
        """Save results, then run post-round work for any round they finish.

        The scores are written first and are never rolled back. If pairing
        the following round fails, the claim on the finished round is
        released and :class:`ScoresSavedPairingFailedException` is raised
        with the original error as its cause; storage errors propagate
        unchanged. Any other error also releases the claim and
        propagates as it is.
        """
        with self._lock(tournament_id):
            self._config(tournament_id)
            saved = self.recorder.submit_scores(tournament_id, scores)
            result = ScoreSubmissionResult(saved_matches=saved)
            self._complete_rounds(tournament_id, {m.round for m in saved}, result)
        return result

    def edit_match_score(
        self, tournament_id: str, match_id: int, score_a: int, score_b: int
    ) -> ScoreSubmissionResult:
        """Correct a result.

        Snapshots of the edited round and later rounds are recomputed;
        existing pairings are left as they are.
        """
        with self._lock(tournament_id):
            config = self._config(tournament_id)
            edited = self.recorder.edit_match_score(
                tournament_id, match_id, score_a, score_b
            )
            self._refresh_snapshots(config, edited.round)
            result = ScoreSubmissionResult(saved_matches=[edited])
            self._complete_rounds(tournament_id, {edited.round}, result)
        return result

    def mark_forfeit(
        self, tournament_id: str, match_id: int, forfeited_player_id: str
    ) -> ScoreSubmissionResult:
        with self._lock(tournament_id):
            config = self._config(tournament_id)
            forfeited = self.recorder.mark_forfeit(config, match_id, forfeited_player_id)
            self._refresh_snapshots(config, forfeited.round)
            result = ScoreSubmissionResult(saved_matches=[forfeited])
            self._complete_rounds(tournament_id, {forfeited.round}, result)
        return result

    def swap_players_in_round(
        self, tournament_id: str, round_number: int, player1_id: str, player2_id: str
    ) -> Tuple[Match, Match]:
        with self._lock(tournament_id):
            self._config(tournament_id)
            return self.recorder.swap_players(
                tournament_id, round_number, player1_id, player2_id
            )

    def _complete_rounds(
        self, tournament_id: str, rounds: Iterable[int], result: ScoreSubmissionResult
    ) -> None:
        matches = self.store.get_matches(tournament_id)
        for round_number in sorted(rounds):
            if any(m.round == round_number and m.is_pending for m in matches):
                continue
            if not self.store.claim_round_completion(tournament_id, round_number):
                continue
            result.completed_rounds.append(round_number)
            try:
                outcome = self.scheduler.on_round_completed(tournament_id, round_number)
                if outcome is not None and outcome.failed_divisions:
                    raise DivisionPairingException(
                        f"{len(outcome.failed_divisions)} division(s) could not "
                        f"be paired",
                        failures=outcome.failed_divisions,
                        tournament_id=tournament_id,
                        round_number=outcome.round_number,
                    )
            except StoreException:
                self.store.release_round_completion(tournament_id, round_number)
                raise
            except KismetPairingException as e:
                self.store.release_round_completion(tournament_id, round_number)
                logger.error(
                    "Tournament %s: scores saved, but pairing after round %s "
                    "failed: %s",
                    tournament_id,
                    round_number,
                    e,
                )
                raise ScoresSavedPairingFailedException(
                    f"Scores saved, but pairing after round {round_number} "
                    f"failed: {e.message}",
                    tournament_id=tournament_id,
                    round_number=round_number + 1,
                ) from e
            except BaseException:
                self.store.release_round_completion(tournament_id, round_number)
                logger.exception(
                    "Tournament %s: unexpected error after round %s; scores saved",
                    tournament_id,
                    round_number,
                )
                raise
            result.pairings[round_number] = outcome

    def _refresh_snapshots(self, config: TournamentConfig, from_round: int) -> None:
        players = self.store.get_players(config.tournament_id)
        matches = self.store.get_matches(config.tournament_id)
        for round_number in range(from_round, config.total_rounds + 1):
            if self.store.get_snapshot(config.tournament_id, round_number) is None:
                continue
            self.scheduler.save_snapshot(config, players, matches, round_number)

    # ========== Pairing ==========

    def pair_round(self, tournament_id: str, round_number: int) -> RoundPairingOutcome:
        """Pair a round with its rule.

        Raises:
            DivisionPairingException: If any division failed; the others
                are already persisted
        """
        with self._lock(tournament_id):
            outcome = self.scheduler.pair_round(tournament_id, round_number)
        self._raise_division_failures(tournament_id, outcome)
        return outcome

    def manually_pair_round(
        self, tournament_id: str, round_number: int
    ) -> RoundPairingOutcome:
        with self._lock(tournament_id):
            outcome = self.scheduler.manually_pair_round(tournament_id, round_number)
        self._raise_division_failures(tournament_id, outcome)
        return outcome

    @staticmethod
    def _raise_division_failures(
        tournament_id: str, outcome: RoundPairingOutcome
    ) -> None:
        if outcome.failed_divisions:
            raise DivisionPairingException(
                f"{len(outcome.failed_divisions)} division(s) could not be paired",
                failures=outcome.failed_divisions,
                tournament_id=tournament_id,
                round_number=outcome.round_number,
            )

    def generate_round_robin_schedule(
        self,
        tournament_id: str,
        division_id: Optional[str] = None,
        total_rounds: Optional[int] = None,
    ) -> List[RoundSchedule]:
        """Preview the full round robin for a division's active players.

        Nothing is persisted; rounds are paired one at a time by
        :meth:`pair_round`.
        """
        config = self._config(tournament_id)
        if division_id is None:
            division_id = config.divisions[0].id
        players = [
            p
            for p in self.store.get_players(tournament_id)
            if p.is_active and p.division_id == division_id
        ]
        return generate_schedule(
            [p.id for p in schedule_order(players)],
            total_rounds or config.total_rounds,
            config.round_robin_plays_per_opponent,
        )

    # ========== Ratings ==========

    def finalize_ratings(self, tournament_id: str) -> List[PostTournamentRating]:
        """Post-event rating report for every player, in standings order."""
        config = self._config(tournament_id)
        players = self.store.get_players(tournament_id)
        matches = self.store.get_matches(tournament_id)
        ratings = {p.id: p.rating for p in players}
        standings = StandingsCalculator(config).calculate(players, matches)

        report = []
        for standing in standings:
            player = standing.player
            results = []
            for match in matches:
                if match.is_bye or not match.is_completed or not match.involves(player.id):
                    continue
                own, other = match.scores_for(player.id)
                results.append(
                    (ratings[match.opponent_of(player.id)], game_outcome(own, other))
                )
            report.append(
                PostTournamentRating(
                    player_id=player.id,
                    player_name=player.name,
                    division_id=player.division_id,
                    old_rating=player.rating,
                    new_rating=standing.current_rating,
                    change=standing.rating_change,
                    performance_rating=performance_rating(results, player.rating),
                )
            )
        logger.info(
            "Tournament %s: finalized ratings for %s players", tournament_id, len(report)
        )
        return report
