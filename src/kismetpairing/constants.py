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

# --- Constants ---

# Game outcome weights (configurable per tournament)
WIN_SCORE = 1.0
DRAW_SCORE = 0.5
LOSS_SCORE = 0.0

# Byes
DEFAULT_BYE_SPREAD = 50

# Forfeits (recorded as game scores, not weights)
DEFAULT_FORFEIT_WIN_SCORE = 1
DEFAULT_FORFEIT_LOSS_SCORE = 0

# Ratings
DEFAULT_K_FACTOR = 24
ELO_SCALE = 400.0
DEFAULT_RATING_FLOOR = 0
DEFAULT_RATING_CEILING = 9999

# Sort key for a player missing from a standings list
UNRANKED = 999

# Match status
STATUS_PENDING = "pending"
STATUS_COMPLETED = "completed"

# Player status
PLAYER_ACTIVE = "active"
PLAYER_WITHDRAWN = "withdrawn"

# Last game result codes
RESULT_WIN = "W"
RESULT_LOSS = "L"
RESULT_TIE = "T"
RESULT_BYE = "B"
RESULT_FORFEIT = "F"

CLINCHED = "clinched"

# Pairing methods
METHOD_SWISS = "swiss"
METHOD_KING_OF_THE_HILL = "king_of_the_hill"
METHOD_ROUND_ROBIN = "round_robin"
METHOD_AUSTRALIAN_DRAW = "australian_draw"
METHOD_CHEW = "chew"

PAIRING_METHODS = [
    METHOD_SWISS,
    METHOD_KING_OF_THE_HILL,
    METHOD_ROUND_ROBIN,
    METHOD_AUSTRALIAN_DRAW,
    METHOD_CHEW,
]

# Display names used by tournament directors, mapped to method keys
PAIRING_METHOD_ALIASES = {
    "Swiss": METHOD_SWISS,
    "King of the Hill": METHOD_KING_OF_THE_HILL,
    "KOTH": METHOD_KING_OF_THE_HILL,
    "Round Robin": METHOD_ROUND_ROBIN,
    "Australian Draw": METHOD_AUSTRALIAN_DRAW,
    "Quartiles": METHOD_AUSTRALIAN_DRAW,
    "Chew Pairings": METHOD_CHEW,
}

# Standings sources
SOURCE_PREVIOUS_ROUND = "previous_round"
SOURCE_LAGGED = "lagged"
SOURCE_ROUND0 = "round0"

STANDINGS_SOURCES = [SOURCE_PREVIOUS_ROUND, SOURCE_LAGGED, SOURCE_ROUND0]

STANDINGS_SOURCE_ALIASES = {
    "PreviousRound": SOURCE_PREVIOUS_ROUND,
    "Lagged": SOURCE_LAGGED,
    "Round0": SOURCE_ROUND0,
}

# Quartile crossing schemes
SCHEME_1V3_2V4 = "1v3_2v4"
SCHEME_1V2_3V4 = "1v2_3v4"
QUARTILE_SCHEMES = [SCHEME_1V3_2V4, SCHEME_1V2_3V4]
DEFAULT_QUARTILE_SCHEME = SCHEME_1V3_2V4

# Bye assignment policies
BYE_LOWEST_RANKED_FEWEST_BYES = "lowest_ranked_fewest_byes"
BYE_HIGHEST_RANKED_FEWEST_BYES = "highest_ranked_fewest_byes"
BYE_POLICIES = [BYE_LOWEST_RANKED_FEWEST_BYES, BYE_HIGHEST_RANKED_FEWEST_BYES]

BYE_POLICY_ALIASES = {
    "lowestRankedFewestByes": BYE_LOWEST_RANKED_FEWEST_BYES,
    "highestRankedFewestByes": BYE_HIGHEST_RANKED_FEWEST_BYES,
}

# Tiebreaker Keys
TB_CUMULATIVE_SPREAD = "cumulative_spread"
TB_BUCHHOLZ = "buchholz"
TB_MEDIAN_BUCHHOLZ = "median_buchholz"
TB_RATING = "rating"

TIEBREAK_NAMES = {
    TB_CUMULATIVE_SPREAD: "Cumulative Spread",
    TB_BUCHHOLZ: "Buchholz",
    TB_MEDIAN_BUCHHOLZ: "Median Buchholz",
    TB_RATING: "Rating",
}

TIEBREAK_ALIASES = {
    "cumulativeSpread": TB_CUMULATIVE_SPREAD,
    "buchholz": TB_BUCHHOLZ,
    "medianBuchholz": TB_MEDIAN_BUCHHOLZ,
    "rating": TB_RATING,
}

# Default order used for sorting if not configured otherwise
DEFAULT_TIEBREAK_ORDER = [TB_CUMULATIVE_SPREAD, TB_BUCHHOLZ, TB_RATING]

# Division and tournament modes
DIVISION_MODE_SINGLE = "single"
DIVISION_MODE_MULTIPLE = "multiple"
MODE_INDIVIDUAL = "individual"
MODE_TEAM = "team"

DEFAULT_TEAM_TOP_PLAYERS = 4
DEFAULT_ROUND_ROBIN_PLAYS_PER_OPPONENT = 1
