"""In-process implementation of every store collaborator."""

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

import copy
import itertools
import threading
from dataclasses import replace
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

from kismetpairing.exceptions import (
    MatchNotFoundException,
    PlayerNotFoundException,
)
from kismetpairing.models import (
    Match,
    PairingRule,
    Player,
    StandingsSnapshot,
    TournamentConfig,
)
from kismetpairing.store.base import TournamentStore


class InMemoryStore(TournamentStore):
    """Dictionary-backed store.

    Records are copied on the way in and out, so callers never share state
    with the store. Id sequences belong to the instance.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._configs: Dict[str, TournamentConfig] = {}
        self._players: Dict[str, Dict[str, Player]] = {}
        self._matches: Dict[str, Dict[int, Match]] = {}
        self._rules: Dict[str, List[PairingRule]] = {}
        self._snapshots: Dict[Tuple[str, int], Dict[str, Any]] = {}
        self._claims: Set[Tuple[str, int]] = set()
        self._player_ids = itertools.count(1)
        self._match_ids = itertools.count(1)
        self._rule_ids = itertools.count(1)

    # ========== Config ==========

    def get_config(self, tournament_id: str) -> Optional[TournamentConfig]:
        with self._lock:
            config = self._configs.get(tournament_id)
            return copy.deepcopy(config)

    def save_config(self, config: TournamentConfig) -> None:
        with self._lock:
            self._configs[config.tournament_id] = copy.deepcopy(config)

    # ========== Roster ==========

    def get_players(self, tournament_id: str) -> List[Player]:
        with self._lock:
            return copy.deepcopy(list(self._players.get(tournament_id, {}).values()))

    def add_player(self, tournament_id: str, player: Player) -> Player:
        with self._lock:
            if not player.id:
                player = replace(player, id=f"p{next(self._player_ids)}")
            self._players.setdefault(tournament_id, {})[player.id] = copy.deepcopy(
                player
            )
            return copy.deepcopy(player)

    def update_player(self, tournament_id: str, player: Player) -> None:
        with self._lock:
            roster = self._players.get(tournament_id, {})
            if player.id not in roster:
                raise PlayerNotFoundException(
                    f"Unknown player {player.id}", tournament_id=tournament_id
                )
            roster[player.id] = copy.deepcopy(player)

    # ========== Matches ==========

    def get_matches(self, tournament_id: str) -> List[Match]:
        with self._lock:
            return copy.deepcopy(list(self._matches.get(tournament_id, {}).values()))

    def add_matches(self, tournament_id: str, matches: Sequence[Match]) -> List[Match]:
        with self._lock:
            stored = self._matches.setdefault(tournament_id, {})
            created = []
            for match in matches:
                record = replace(match, id=next(self._match_ids))
                stored[record.id] = record
                created.append(copy.deepcopy(record))
            return created

    def update_match(self, match: Match) -> None:
        with self._lock:
            stored = self._matches.get(match.tournament_id, {})
            if match.id not in stored:
                raise MatchNotFoundException(
                    f"Unknown match {match.id}",
                    tournament_id=match.tournament_id,
                    round_number=match.round,
                )
            stored[match.id] = copy.deepcopy(match)

    def claim_round_completion(self, tournament_id: str, round_number: int) -> bool:
        with self._lock:
            key = (tournament_id, round_number)
            if key in self._claims:
                return False
            self._claims.add(key)
            return True

    def release_round_completion(self, tournament_id: str, round_number: int) -> None:
        with self._lock:
            self._claims.discard((tournament_id, round_number))

    # ========== Rules ==========

    def get_rules(self, tournament_id: str) -> List[PairingRule]:
        with self._lock:
            return copy.deepcopy(self._rules.get(tournament_id, []))

    def replace_rules(
        self, tournament_id: str, rules: Sequence[PairingRule]
    ) -> List[PairingRule]:
        with self._lock:
            stored = [
                replace(rule, id=next(self._rule_ids))
                for rule in sorted(rules, key=lambda r: r.start_round)
            ]
            self._rules[tournament_id] = stored
            return copy.deepcopy(stored)

    # ========== Snapshots ==========

    def get_snapshot(
        self, tournament_id: str, round_number: int
    ) -> Optional[StandingsSnapshot]:
        with self._lock:
            data = self._snapshots.get((tournament_id, round_number))
            return StandingsSnapshot.from_dict(data) if data is not None else None

    def save_snapshot(self, snapshot: StandingsSnapshot) -> None:
        with self._lock:
            self._snapshots[(snapshot.tournament_id, snapshot.round)] = (
                snapshot.to_dict()
            )
