"""Plain records consumed and produced by the engine."""

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

from kismetpairing.models.division import (
    Division,
    PlayerClass,
    Team,
    assign_class,
    assign_division,
)
from kismetpairing.models.match import Match, pending_match
from kismetpairing.models.pairing_history import PairingHistory
from kismetpairing.models.pairing_rule import PairingRule
from kismetpairing.models.player import Player, assign_seeds
from kismetpairing.models.snapshot import ResolvedStandings, StandingsSnapshot
from kismetpairing.models.standing import (
    LastGameInfo,
    PostTournamentRating,
    Standing,
    TeamStanding,
)
from kismetpairing.models.tournament_config import (
    ScoringWeights,
    TeamSettings,
    TournamentConfig,
)

__all__ = [
    "Division",
    "LastGameInfo",
    "Match",
    "PairingHistory",
    "PairingRule",
    "Player",
    "PlayerClass",
    "PostTournamentRating",
    "ResolvedStandings",
    "ScoringWeights",
    "Standing",
    "StandingsSnapshot",
    "Team",
    "TeamSettings",
    "TeamStanding",
    "TournamentConfig",
    "assign_class",
    "assign_division",
    "assign_seeds",
    "pending_match",
]
