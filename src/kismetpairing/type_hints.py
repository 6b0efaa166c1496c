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

from typing import Dict, List, Literal, Optional, Tuple

PlayerId = str
DivisionId = str
MatchId = int

MatchStatus = Literal["pending", "completed"]
PlayerStatus = Literal["active", "withdrawn"]

# Last game result codes (Win, Loss, Tie, Bye, Forfeit)
GameResult = Literal["W", "L", "T", "B", "F"]

PairingMethod = Literal[
    "swiss",
    "king_of_the_hill",
    "round_robin",
    "australian_draw",
    "chew",
]

StandingsSource = Literal["previous_round", "lagged", "round0"]

QuartileScheme = Literal["1v3_2v4", "1v2_3v4"]

ByePolicy = Literal["lowest_ranked_fewest_byes", "highest_ranked_fewest_byes"]

TieBreak = Literal["cumulative_spread", "buchholz", "median_buchholz", "rating"]

DivisionMode = Literal["single", "multiple"]
TournamentMode = Literal["individual", "team"]

# Pair of player ids, second is None for a bye seat
SeatPairing = Tuple[PlayerId, Optional[PlayerId]]
# All pairings for one round
RoundSchedule = List[SeatPairing]
# Submitted scores keyed by match id
ScoreSheet = Dict[MatchId, Tuple[int, int]]
