"""Pairing rule scheduling.

This module decides how a round is paired: it finds the single rule that
covers the round, resolves which standings feed the pairing, runs the
rule's algorithm division by division and persists the new matches.
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
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

from kismetpairing.constants import (
    METHOD_ROUND_ROBIN,
    METHOD_SWISS,
    PAIRING_METHODS,
    QUARTILE_SCHEMES,
    SOURCE_LAGGED,
    SOURCE_PREVIOUS_ROUND,
    SOURCE_ROUND0,
    STANDINGS_SOURCES,
)
from kismetpairing.exceptions import (
    InsufficientPlayersException,
    InvalidConfigurationException,
    InvalidPairingException,
    MissingConfigurationException,
    NoPairingRuleException,
    OverlappingPairingRulesException,
    PairingException,
    PlayerException,
    PlayerNotFoundException,
    RoundOutOfRangeException,
    TournamentStateException,
)
from kismetpairing.models import (
    Match,
    PairingHistory,
    PairingRule,
    Player,
    ResolvedStandings,
    StandingsSnapshot,
    TournamentConfig,
)
from kismetpairing.pairing import PairingAlgorithm, get_pairing_algorithm
from kismetpairing.store import TournamentStore
from kismetpairing.tournament.bye_resolver import ByeResolver
from kismetpairing.tournament.standings_calculator import (
    StandingsCalculator,
    group_by_division,
)
from kismetpairing.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class RoundPairingOutcome:
    """What happened when a round was paired.

    Attributes:
        round_number: The round that was paired
        rule: The rule applied, or None when no rule covered the round
        matches: Persisted matches, byes included
        failed_divisions: Division id to the error that stopped it
        skipped_divisions: Divisions that already had matches for the round
        standings: How the pairing input was resolved
        manual: Whether this was a manual override
    """

    round_number: int
    rule: Optional[PairingRule]
    matches: List[Match] = field(default_factory=list)
    failed_divisions: Dict[Optional[str], Exception] = field(default_factory=dict)
    skipped_divisions: List[Optional[str]] = field(default_factory=list)
    standings: Optional[ResolvedStandings] = None
    manual: bool = False

    @property
    def paired(self) -> bool:
        return self.rule is not None and not self.failed_divisions

    @property
    def used_fallback_standings(self) -> bool:
        return self.standings is not None and self.standings.is_fallback


# ========== Rule validation ==========


def validate_rules(
    rules: Sequence[PairingRule],
    total_rounds: Optional[int] = None,
    tournament_id: Optional[str] = None,
) -> None:
    """Check a full rule set before it is accepted.

    Raises:
        InvalidConfigurationException: For a malformed rule
        OverlappingPairingRulesException: If any round is covered twice
    """
    covered: Dict[int, PairingRule] = {}
    for rule in sorted(rules, key=lambda r: r.start_round):
        label = f"Rule for rounds {rule.start_round}-{rule.end_round}"
        if rule.start_round < 1 or rule.start_round > rule.end_round:
            raise InvalidConfigurationException(
                f"{label}: start round must be at least 1 and not after end round",
                tournament_id=tournament_id,
            )
        if total_rounds is not None and rule.end_round > total_rounds:
            raise InvalidConfigurationException(
                f"{label}: tournament only has {total_rounds} rounds",
                tournament_id=tournament_id,
            )
        if rule.pairing_method not in PAIRING_METHODS:
            raise InvalidConfigurationException(
                f"{label}: unknown pairing method '{rule.pairing_method}'",
                tournament_id=tournament_id,
            )
        if rule.standings_source not in STANDINGS_SOURCES:
            raise InvalidConfigurationException(
                f"{label}: unknown standings source '{rule.standings_source}'",
                tournament_id=tournament_id,
            )
        if (
            rule.quartile_pairing_scheme is not None
            and rule.quartile_pairing_scheme not in QUARTILE_SCHEMES
        ):
            raise InvalidConfigurationException(
                f"{label}: unknown quartile scheme '{rule.quartile_pairing_scheme}'",
                tournament_id=tournament_id,
            )
        for round_number in range(rule.start_round, rule.end_round + 1):
            other = covered.get(round_number)
            if other is not None:
                raise OverlappingPairingRulesException(
                    f"{label} overlaps rule for rounds "
                    f"{other.start_round}-{other.end_round}",
                    tournament_id=tournament_id,
                    round_number=round_number,
                )
            covered[round_number] = rule


def find_rule(rules: Sequence[PairingRule], round_number: int) -> Optional[PairingRule]:
    """Return the rule whose range contains ``round_number``, or None."""
    for rule in rules:
        if rule.covers(round_number):
            return rule
    return None


def _partition_matches(
    players: Sequence[Player], matches: Sequence[Match]
) -> Tuple[List[Match], Dict[Optional[str], Match], List[Match]]:
    """Split matches by whether every participant is on the roster.

    Returns:
        (clean matches, first broken match per implicated division,
        broken matches with no known participant at all)
    """
    roster = {p.id: p for p in players}
    clean: List[Match] = []
    implicated: Dict[Optional[str], Match] = {}
    orphaned: List[Match] = []
    for match in matches:
        known = [roster[pid] for pid in match.player_ids if pid in roster]
        if len(known) == len(match.player_ids):
            clean.append(match)
        elif not known:
            orphaned.append(match)
        else:
            for player in known:
                implicated.setdefault(player.division_id, match)
    return clean, implicated, orphaned


class PairingScheduler:
    """Maps rounds to pairing rules and produces each round's matches.

    Args:
        store: Storage collaborator for every record the scheduler touches
        rng: Random source for the quartile draw
    """

    def __init__(self, store: TournamentStore, rng: Optional[random.Random] = None):
        self.store = store
        self.rng = rng

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def load_config(self, tournament_id: str) -> TournamentConfig:
        config = self.store.get_config(tournament_id)
        if config is None:
            raise MissingConfigurationException(
                "No configuration for tournament", tournament_id=tournament_id
            )
        return config.validate()

    def load_rules(self, config: TournamentConfig) -> List[PairingRule]:
        rules = self.store.get_rules(config.tournament_id)
        validate_rules(rules, config.total_rounds, config.tournament_id)
        return rules

    # ------------------------------------------------------------------
    # Standings input
    # ------------------------------------------------------------------

    def resolve_standings(
        self,
        config: TournamentConfig,
        players: Sequence[Player],
        matches: Sequence[Match],
        source: str,
        target_round: int,
    ) -> ResolvedStandings:
        """Pick the standings that feed the pairing of ``target_round``.

        ``round0`` ranks everyone by rating with zero scores,
        ``previous_round`` reads the snapshot of the round before the target
        and ``lagged`` the snapshot two rounds back. A snapshot round of zero
        or less means initial ratings. A missing snapshot is replaced by
        live standings, flagged with ``is_fallback``.
        """
        calculator = StandingsCalculator(config)
        if source == SOURCE_ROUND0:
            return ResolvedStandings(source, None, calculator.initial_standings(players))
        if source == SOURCE_PREVIOUS_ROUND:
            snapshot_round = target_round - 1
        elif source == SOURCE_LAGGED:
            snapshot_round = target_round - 2
        else:
            raise InvalidConfigurationException(
                f"Unknown standings source '{source}'",
                tournament_id=config.tournament_id,
                round_number=target_round,
            )

        if snapshot_round <= 0:
            return ResolvedStandings(source, None, calculator.initial_standings(players))

        snapshot = self.store.get_snapshot(config.tournament_id, snapshot_round)
        if snapshot is not None:
            return ResolvedStandings(source, snapshot_round, snapshot.standings)

        logger.warning(
            "Tournament %s: no standings snapshot for round %s, pairing round %s "
            "from live standings instead",
            config.tournament_id,
            snapshot_round,
            target_round,
        )
        return ResolvedStandings(
            source, None, calculator.calculate(players, matches), is_fallback=True
        )

    def save_snapshot(
        self,
        config: TournamentConfig,
        players: Sequence[Player],
        matches: Sequence[Match],
        round_number: int,
    ) -> StandingsSnapshot:
        # standings as they stood at the end of the round
        players = [
            replace(p, bye_rounds=[r for r in p.bye_rounds if r <= round_number])
            for p in players
        ]
        played = [m for m in matches if m.round <= round_number]
        clean, implicated, orphaned = _partition_matches(players, played)
        for match in list(implicated.values()) + orphaned:
            logger.error(
                "Tournament %s: match %s references an unknown player; left out "
                "of the round %s snapshot",
                config.tournament_id,
                match.id,
                round_number,
            )
        snapshot = StandingsSnapshot(
            tournament_id=config.tournament_id,
            round=round_number,
            standings=StandingsCalculator(config).calculate(players, clean),
        )
        self.store.save_snapshot(snapshot)
        logger.info(
            "Tournament %s: saved standings snapshot for round %s",
            config.tournament_id,
            round_number,
        )
        return snapshot

    # ------------------------------------------------------------------
    # Pairing entry points
    # ------------------------------------------------------------------

    def on_round_completed(
        self, tournament_id: str, completed_round: int
    ) -> Optional[RoundPairingOutcome]:
        """Snapshot a fully scored round and pair the next one.

        Returns:
            The outcome for the next round, or None when the event is over.
            An outcome with ``rule`` None means no rule covered the round and
            nothing was paired.
        """
        config = self.load_config(tournament_id)
        players = self.store.get_players(tournament_id)
        matches = self.store.get_matches(tournament_id)
        self.save_snapshot(config, players, matches, completed_round)

        target_round = completed_round + 1
        logger.info(
            "Tournament %s: round %s complete, preparing round %s",
            tournament_id,
            completed_round,
            target_round,
        )
        if target_round > config.total_rounds:
            logger.info(
                "Tournament %s: final round %s complete", tournament_id, completed_round
            )
            return None

        rule = find_rule(self.load_rules(config), target_round)
        if rule is None:
            logger.warning(
                "Tournament %s: no pairing rule covers round %s; "
                "round must be paired manually",
                tournament_id,
                target_round,
            )
            return RoundPairingOutcome(round_number=target_round, rule=None)
        return self._pair(config, target_round, rule, players, matches)

    def pair_round(self, tournament_id: str, round_number: int) -> RoundPairingOutcome:
        """Pair ``round_number`` with the rule that covers it.

        Raises:
            RoundOutOfRangeException: If the round is outside the event
            NoPairingRuleException: If no rule covers the round
            OverlappingPairingRulesException: If the stored rules overlap
        """
        config = self.load_config(tournament_id)
        self._check_round(config, round_number)
        rule = find_rule(self.load_rules(config), round_number)
        if rule is None:
            raise NoPairingRuleException(
                "No pairing rule covers this round",
                tournament_id=tournament_id,
                round_number=round_number,
            )
        return self._pair(
            config,
            round_number,
            rule,
            self.store.get_players(tournament_id),
            self.store.get_matches(tournament_id),
        )

    def manually_pair_round(
        self, tournament_id: str, round_number: int
    ) -> RoundPairingOutcome:
        """Pair a round with Swiss on previous-round standings, ignoring rules."""
        config = self.load_config(tournament_id)
        self._check_round(config, round_number)
        rule = PairingRule(
            start_round=round_number,
            end_round=round_number,
            pairing_method=METHOD_SWISS,
            standings_source=SOURCE_PREVIOUS_ROUND,
        )
        logger.warning(
            "MANUAL OVERRIDE: tournament %s round %s paired Swiss on previous-round "
            "standings, pairing rules bypassed",
            tournament_id,
            round_number,
        )
        return self._pair(
            config,
            round_number,
            rule,
            self.store.get_players(tournament_id),
            self.store.get_matches(tournament_id),
            manual=True,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _check_round(config: TournamentConfig, round_number: int) -> None:
        if round_number < 1 or round_number > config.total_rounds:
            raise RoundOutOfRangeException(
                f"Round must be between 1 and {config.total_rounds}",
                tournament_id=config.tournament_id,
                round_number=round_number,
            )

    def _pair(
        self,
        config: TournamentConfig,
        round_number: int,
        rule: PairingRule,
        players: List[Player],
        matches: List[Match],
        manual: bool = False,
    ) -> RoundPairingOutcome:
        tournament_id = config.tournament_id
        clean, implicated, orphaned = _partition_matches(players, matches)
        if orphaned:
            # no division can be blamed
            raise PlayerNotFoundException(
                f"Match {orphaned[0].id} references only unknown players",
                tournament_id=tournament_id,
                round_number=orphaned[0].round,
            )

        resolved = self.resolve_standings(
            config, players, clean, rule.standings_source, round_number
        )
        history = PairingHistory.from_matches(clean)
        algorithm = get_pairing_algorithm(rule, self.rng)
        logger.info(
            "Tournament %s: pairing round %s with %s (standings: %s%s)",
            tournament_id,
            round_number,
            rule.pairing_method,
            rule.standings_source,
            ", fallback" if resolved.is_fallback else "",
        )

        outcome = RoundPairingOutcome(
            round_number=round_number, rule=rule, standings=resolved, manual=manual
        )
        already_paired = {
            pid for m in matches if m.round == round_number for pid in m.player_ids
        }
        active = sorted(
            (p for p in players if p.is_active), key=lambda p: (p.seed, p.id)
        )
        divisions = group_by_division(config, active)
        for division_id, pool in divisions.items():
            if not pool:
                continue
            if any(p.id in already_paired for p in pool):
                logger.info(
                    "Tournament %s: division %s already paired for round %s",
                    tournament_id,
                    division_id,
                    round_number,
                )
                outcome.skipped_divisions.append(division_id)
                continue
            try:
                if division_id in implicated:
                    raise PlayerNotFoundException(
                        f"Match {implicated[division_id].id} references an unknown player",
                        tournament_id=tournament_id,
                        round_number=round_number,
                        division_id=division_id,
                    )
                created = self._pair_division(
                    config, round_number, rule, algorithm, pool, resolved, history,
                    division_id,
                )
            except (PairingException, PlayerException) as e:
                logger.error(
                    "Tournament %s: division %s could not be paired for round %s: %s",
                    tournament_id,
                    division_id,
                    round_number,
                    e.message,
                )
                outcome.failed_divisions[division_id] = e
                continue
            outcome.matches.extend(created)

        if outcome.skipped_divisions and not outcome.matches and not outcome.failed_divisions:
            raise TournamentStateException(
                "Round is already paired",
                tournament_id=tournament_id,
                round_number=round_number,
            )
        logger.info(
            "Tournament %s: round %s paired, %s matches, %s division failures",
            tournament_id,
            round_number,
            len(outcome.matches),
            len(outcome.failed_divisions),
        )
        return outcome

    def _pair_division(
        self,
        config: TournamentConfig,
        round_number: int,
        rule: PairingRule,
        algorithm: PairingAlgorithm,
        pool: List[Player],
        resolved: ResolvedStandings,
        history: PairingHistory,
        division_id: Optional[str],
    ) -> List[Match]:
        if len(pool) < 2:
            raise InsufficientPlayersException(
                f"Division needs at least two active players, has {len(pool)}",
                tournament_id=config.tournament_id,
                round_number=round_number,
                division_id=division_id,
            )

        new_matches: List[Match] = []
        if rule.pairing_method != METHOD_ROUND_ROBIN:
            assignment = ByeResolver(config).assign_bye(
                round_number, pool, resolved.standings
            )
            if assignment is not None:
                new_matches.append(assignment.match)
                pool = assignment.remaining

        new_matches.extend(
            algorithm.pair(config, round_number, pool, resolved.standings, history)
        )
        self._check_batch(config, round_number, new_matches, division_id)

        created = self.store.add_matches(config.tournament_id, new_matches)
        roster = {p.id: p for p in self.store.get_players(config.tournament_id)}
        for match in created:
            if match.is_bye:
                player = roster[match.player_a_id]
                self.store.update_player(
                    config.tournament_id, player.with_bye(round_number)
                )
        return created

    @staticmethod
    def _check_batch(
        config: TournamentConfig,
        round_number: int,
        matches: List[Match],
        division_id: Optional[str],
    ) -> None:
        """Reject a batch with a self pairing or a double-booked player."""
        seen: Set[str] = set()
        for match in matches:
            if match.player_a_id == match.player_b_id:
                raise InvalidPairingException(
                    f"Player {match.player_a_id} paired against themselves",
                    tournament_id=config.tournament_id,
                    round_number=round_number,
                    division_id=division_id,
                )
            for player_id in match.player_ids:
                if player_id in seen:
                    raise InvalidPairingException(
                        f"Player {player_id} paired twice",
                        tournament_id=config.tournament_id,
                        round_number=round_number,
                        division_id=division_id,
                    )
                seen.add(player_id)
