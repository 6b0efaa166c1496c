"""Tournament engine: standings, results, byes and round scheduling."""

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

from kismetpairing.tournament.bye_resolver import (
    ByeAssignment,
    ByeResolver,
    ForfeitResolver,
)
from kismetpairing.tournament.engine import (
    HeadToHead,
    ScorecardEntry,
    ScoreSubmissionResult,
    TournamentEngine,
    TournamentStatus,
)
from kismetpairing.tournament.pairing_scheduler import (
    PairingScheduler,
    RoundPairingOutcome,
    find_rule,
    validate_rules,
)
from kismetpairing.tournament.rating import RatingUpdater, performance_rating
from kismetpairing.tournament.result_recorder import ResultRecorder
from kismetpairing.tournament.standings_calculator import (
    StandingsCalculator,
    median_buchholz,
)

__all__ = [
    "ByeAssignment",
    "ByeResolver",
    "ForfeitResolver",
    "HeadToHead",
    "PairingScheduler",
    "RatingUpdater",
    "ResultRecorder",
    "RoundPairingOutcome",
    "ScoreSubmissionResult",
    "ScorecardEntry",
    "StandingsCalculator",
    "TournamentEngine",
    "TournamentStatus",
    "find_rule",
    "median_buchholz",
    "performance_rating",
    "validate_rules",
]
