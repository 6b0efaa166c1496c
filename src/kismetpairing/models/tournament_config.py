"""Tournament configuration settings."""

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

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from kismetpairing.constants import (
    BYE_LOWEST_RANKED_FEWEST_BYES,
    BYE_POLICIES,
    BYE_POLICY_ALIASES,
    DEFAULT_BYE_SPREAD,
    DEFAULT_FORFEIT_LOSS_SCORE,
    DEFAULT_FORFEIT_WIN_SCORE,
    DEFAULT_K_FACTOR,
    DEFAULT_ROUND_ROBIN_PLAYS_PER_OPPONENT,
    DEFAULT_TEAM_TOP_PLAYERS,
    DEFAULT_TIEBREAK_ORDER,
    DIVISION_MODE_MULTIPLE,
    DIVISION_MODE_SINGLE,
    DRAW_SCORE,
    LOSS_SCORE,
    MODE_INDIVIDUAL,
    MODE_TEAM,
    TIEBREAK_ALIASES,
    TIEBREAK_NAMES,
    WIN_SCORE,
)
from kismetpairing.exceptions import InvalidConfigurationException
from kismetpairing.models.division import Division, PlayerClass, Team


@dataclass
class ScoringWeights:
    """Points awarded per game outcome."""

    win: float = WIN_SCORE
    draw: float = DRAW_SCORE
    loss: float = LOSS_SCORE

    def to_dict(self) -> Dict[str, Any]:
        return {"win": self.win, "draw": self.draw, "loss": self.loss}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScoringWeights":
        data = data or {}
        return cls(
            win=float(data.get("win", WIN_SCORE)),
            draw=float(data.get("draw", DRAW_SCORE)),
            loss=float(data.get("loss", LOSS_SCORE)),
        )


@dataclass
class TeamSettings:
    """Team event settings.

    Attributes
    ----------
    top_players_count : int
        How many of a team's best players count toward its total.
    display_team_names : bool
        Whether standings carry the team label.
    prevent_teammate_pairings_all_rounds : bool
        Keep teammates apart in every round.
    prevent_teammate_pairings_initial_rounds : int
        Keep teammates apart in rounds 1..N.
    """

    top_players_count: int = DEFAULT_TEAM_TOP_PLAYERS
    display_team_names: bool = False
    prevent_teammate_pairings_all_rounds: bool = False
    prevent_teammate_pairings_initial_rounds: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "top_players_count": self.top_players_count,
            "display_team_names": self.display_team_names,
            "prevent_teammate_pairings_all_rounds": self.prevent_teammate_pairings_all_rounds,
            "prevent_teammate_pairings_initial_rounds": self.prevent_teammate_pairings_initial_rounds,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TeamSettings":
        data = data or {}
        return cls(
            top_players_count=int(
                data.get(
                    "top_players_count",
                    data.get("topPlayersCount", DEFAULT_TEAM_TOP_PLAYERS),
                )
            ),
            display_team_names=bool(
                data.get("display_team_names", data.get("displayTeamNames", False))
            ),
            prevent_teammate_pairings_all_rounds=bool(
                data.get(
                    "prevent_teammate_pairings_all_rounds",
                    data.get("preventTeammatePairings_AllRounds", False),
                )
            ),
            prevent_teammate_pairings_initial_rounds=int(
                data.get(
                    "prevent_teammate_pairings_initial_rounds",
                    data.get("preventTeammatePairings_InitialRounds", 0),
                )
            ),
        )


def _default_divisions() -> List[Division]:
    return [Division(id="open", name="Open")]


@dataclass
class TournamentConfig:
    """Tournament configuration settings.

    Attributes
    ----------
    tournament_id : str
        Identifier used by every store collaborator.
    name : str
        Tournament name.
    total_rounds : int
        Number of rounds in the event.
    scoring : ScoringWeights
        Win/draw/loss weights.
    tie_break_order : list of str
        Ordered tie-break keys applied after score.
    k_factor : float
        Elo K-factor for provisional rating changes.
    bye_spread : int
        Score awarded for a bye (recorded against 0).
    bye_assignment_method : str
        Which end of the field receives byes first.
    forfeit_win_score, forfeit_loss_score : int
        Scores recorded when a match is forfeited.
    round_robin_plays_per_opponent : int
        Cycles of a round robin schedule.
    division_mode : str
        ``"single"`` puts everyone in the first division; ``"multiple"``
        assigns by rating band.
    divisions : list of Division
        Independent pairing pools.
    classes : list of PlayerClass
        Optional reporting classes.
    tournament_mode : str
        ``"individual"`` or ``"team"``.
    teams : list of Team
        Teams for a team event.
    team_settings : TeamSettings
        Team event settings.
    """

    tournament_id: str
    name: str = "Untitled Tournament"
    total_rounds: int = 7
    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    tie_break_order: List[str] = field(
        default_factory=lambda: list(DEFAULT_TIEBREAK_ORDER)
    )
    k_factor: float = DEFAULT_K_FACTOR
    bye_spread: int = DEFAULT_BYE_SPREAD
    bye_assignment_method: str = BYE_LOWEST_RANKED_FEWEST_BYES
    forfeit_win_score: int = DEFAULT_FORFEIT_WIN_SCORE
    forfeit_loss_score: int = DEFAULT_FORFEIT_LOSS_SCORE
    round_robin_plays_per_opponent: int = DEFAULT_ROUND_ROBIN_PLAYS_PER_OPPONENT
    division_mode: str = DIVISION_MODE_SINGLE
    divisions: List[Division] = field(default_factory=_default_divisions)
    classes: List[PlayerClass] = field(default_factory=list)
    tournament_mode: str = MODE_INDIVIDUAL
    teams: List[Team] = field(default_factory=list)
    team_settings: TeamSettings = field(default_factory=TeamSettings)

    def validate(self) -> "TournamentConfig":
        """Check the configuration and return it unchanged.

        Raises:
            InvalidConfigurationException: On the first problem found
        """

        def fail(message: str) -> None:
            raise InvalidConfigurationException(
                message, tournament_id=self.tournament_id
            )

        if self.total_rounds < 1:
            fail(f"total_rounds must be at least 1, got {self.total_rounds}")
        unknown = [tb for tb in self.tie_break_order if tb not in TIEBREAK_NAMES]
        if unknown:
            fail(f"Unknown tie-break keys: {', '.join(unknown)}")
        if self.k_factor <= 0:
            fail(f"k_factor must be positive, got {self.k_factor}")
        if self.bye_spread < 0:
            fail(f"bye_spread must not be negative, got {self.bye_spread}")
        if self.bye_assignment_method not in BYE_POLICIES:
            fail(f"Unknown bye assignment method: {self.bye_assignment_method}")
        if self.forfeit_win_score <= self.forfeit_loss_score:
            fail("forfeit_win_score must be greater than forfeit_loss_score")
        if self.round_robin_plays_per_opponent < 1:
            fail("round_robin_plays_per_opponent must be at least 1")
        if self.division_mode not in (DIVISION_MODE_SINGLE, DIVISION_MODE_MULTIPLE):
            fail(f"Unknown division mode: {self.division_mode}")
        if self.tournament_mode not in (MODE_INDIVIDUAL, MODE_TEAM):
            fail(f"Unknown tournament mode: {self.tournament_mode}")
        if not self.divisions:
            fail("At least one division is required")
        seen = set()
        for band in [*self.divisions, *self.classes]:
            if band.rating_floor > band.rating_ceiling:
                fail(
                    f"{band.name}: rating floor {band.rating_floor} is above "
                    f"ceiling {band.rating_ceiling}"
                )
        for division in self.divisions:
            if division.id in seen:
                fail(f"Duplicate division id: {division.id}")
            seen.add(division.id)
        if self.team_settings.top_players_count < 1:
            fail("team top_players_count must be at least 1")
        return self

    @property
    def division_ids(self) -> List[str]:
        return [d.id for d in self.divisions]

    def get_division(self, division_id: Optional[str]) -> Optional[Division]:
        for division in self.divisions:
            if division.id == division_id:
                return division
        return None

    def team_name(self, team_id: Optional[str]) -> Optional[str]:
        for team in self.teams:
            if team.id == team_id:
                return team.name
        return None

    def separates_teammates(self, round_number: int) -> bool:
        """Whether teammates must be kept apart when pairing ``round_number``."""
        if self.tournament_mode != MODE_TEAM:
            return False
        settings = self.team_settings
        return (
            settings.prevent_teammate_pairings_all_rounds
            or round_number <= settings.prevent_teammate_pairings_initial_rounds
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        return {
            "tournament_id": self.tournament_id,
            "name": self.name,
            "total_rounds": self.total_rounds,
            "scoring": self.scoring.to_dict(),
            "tie_break_order": list(self.tie_break_order),
            "k_factor": self.k_factor,
            "bye_spread": self.bye_spread,
            "bye_assignment_method": self.bye_assignment_method,
            "forfeit_win_score": self.forfeit_win_score,
            "forfeit_loss_score": self.forfeit_loss_score,
            "round_robin_plays_per_opponent": self.round_robin_plays_per_opponent,
            "division_mode": self.division_mode,
            "divisions": [d.to_dict() for d in self.divisions],
            "classes": [c.to_dict() for c in self.classes],
            "tournament_mode": self.tournament_mode,
            "teams": [t.to_dict() for t in self.teams],
            "team_settings": self.team_settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentConfig":
        """Deserialize configuration from dictionary.

        Accepts both snake_case keys and the camelCase keys used by
        exported tournament records.
        """

        def get(key: str, alt: str, default: Any = None) -> Any:
            return data.get(key, data.get(alt, default))

        tournament_id = get("tournament_id", "id")
        if tournament_id is None:
            raise InvalidConfigurationException("Configuration has no tournament id")

        ratings_settings = data.get("ratingsSystemSettings") or {}
        bye_method = get(
            "bye_assignment_method", "byeAssignmentMethod", BYE_LOWEST_RANKED_FEWEST_BYES
        )
        divisions = data.get("divisions")
        return cls(
            tournament_id=str(tournament_id),
            name=data.get("name", "Untitled Tournament"),
            total_rounds=int(get("total_rounds", "totalRounds", 7)),
            scoring=ScoringWeights.from_dict(data.get("scoring")),
            tie_break_order=[
                TIEBREAK_ALIASES.get(tb, tb)
                for tb in get("tie_break_order", "tieBreakOrder", DEFAULT_TIEBREAK_ORDER)
            ],
            k_factor=float(
                data.get("k_factor", ratings_settings.get("kFactor", DEFAULT_K_FACTOR))
            ),
            bye_spread=int(get("bye_spread", "byeSpread", DEFAULT_BYE_SPREAD)),
            bye_assignment_method=BYE_POLICY_ALIASES.get(bye_method, bye_method),
            forfeit_win_score=int(
                get("forfeit_win_score", "forfeitWinScore", DEFAULT_FORFEIT_WIN_SCORE)
            ),
            forfeit_loss_score=int(
                get("forfeit_loss_score", "forfeitLossScore", DEFAULT_FORFEIT_LOSS_SCORE)
            ),
            round_robin_plays_per_opponent=int(
                get(
                    "round_robin_plays_per_opponent",
                    "roundRobinPlaysPerOpponent",
                    DEFAULT_ROUND_ROBIN_PLAYS_PER_OPPONENT,
                )
            ),
            division_mode=get("division_mode", "divisionMode", DIVISION_MODE_SINGLE),
            divisions=(
                [Division.from_dict(d) for d in divisions]
                if divisions
                else _default_divisions()
            ),
            classes=[PlayerClass.from_dict(c) for c in data.get("classes", [])],
            tournament_mode=get("tournament_mode", "tournamentMode", MODE_INDIVIDUAL),
            teams=[Team.from_dict(t) for t in data.get("teams", [])],
            team_settings=TeamSettings.from_dict(
                get("team_settings", "teamSettings")
            ),
        )
