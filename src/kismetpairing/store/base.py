"""Storage collaborator interfaces.

The engine never owns persistent state; everything it reads or writes goes
through these interfaces. Implementations generate all ids and may raise
:class:`~kismetpairing.exceptions.StoreUnavailableException` for transient
failures, which the engine propagates unchanged.
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

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from kismetpairing.models import (
    Match,
    PairingRule,
    Player,
    StandingsSnapshot,
    TournamentConfig,
)


class RosterStore(ABC):
    @abstractmethod
    def get_players(self, tournament_id: str) -> List[Player]:
        """All players of a tournament, any status."""

    @abstractmethod
    def add_player(self, tournament_id: str, player: Player) -> Player:
        """Insert a player; an empty ``id`` is replaced by a generated one."""

    @abstractmethod
    def update_player(self, tournament_id: str, player: Player) -> None:
        """Replace the stored player with the same id."""


class MatchStore(ABC):
    @abstractmethod
    def get_matches(self, tournament_id: str) -> List[Match]:
        """All matches of a tournament, in insertion order."""

    @abstractmethod
    def add_matches(self, tournament_id: str, matches: Sequence[Match]) -> List[Match]:
        """Insert matches and return them with generated ids."""

    @abstractmethod
    def update_match(self, match: Match) -> None:
        """Replace the stored match with the same id."""

    @abstractmethod
    def claim_round_completion(self, tournament_id: str, round_number: int) -> bool:
        """Atomically claim the post-round work for a round.

        Returns True for exactly one caller per (tournament, round) until the
        claim is released.
        """

    @abstractmethod
    def release_round_completion(self, tournament_id: str, round_number: int) -> None:
        """Drop a claim so the post-round work can be retried."""


class RuleStore(ABC):
    @abstractmethod
    def get_rules(self, tournament_id: str) -> List[PairingRule]:
        """The tournament's rules, ordered by start round."""

    @abstractmethod
    def replace_rules(
        self, tournament_id: str, rules: Sequence[PairingRule]
    ) -> List[PairingRule]:
        """Replace the whole rule set and return it with generated ids."""


class SnapshotStore(ABC):
    @abstractmethod
    def get_snapshot(
        self, tournament_id: str, round_number: int
    ) -> Optional[StandingsSnapshot]:
        """The snapshot for a round, or None."""

    @abstractmethod
    def save_snapshot(self, snapshot: StandingsSnapshot) -> None:
        """Insert or overwrite the snapshot for (tournament, round)."""


class ConfigStore(ABC):
    @abstractmethod
    def get_config(self, tournament_id: str) -> Optional[TournamentConfig]:
        """The tournament configuration, or None."""

    @abstractmethod
    def save_config(self, config: TournamentConfig) -> None:
        """Insert or overwrite a configuration."""


class TournamentStore(RosterStore, MatchStore, RuleStore, SnapshotStore, ConfigStore):
    """All five collaborators behind one object."""
