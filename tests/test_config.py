import pytest

from kismetpairing.exceptions import (
    InsufficientPlayersException,
    InvalidConfigurationException,
    InvalidPlayerDataException,
    InvalidResultException,
    PairingException,
)
from kismetpairing.models import (
    Division,
    PairingRule,
    Player,
    PlayerClass,
    TeamSettings,
    TournamentConfig,
    assign_class,
    assign_division,
    assign_seeds,
)
from kismetpairing.utils.validation import (
    validate_game_score,
    validate_rating,
    validate_rating_strict,
    validate_score_pair_strict,
)


@pytest.mark.parametrize(
    "changes",
    [
        {"total_rounds": 0},
        {"tie_break_order": ["coin_toss"]},
        {"k_factor": 0},
        {"bye_spread": -10},
        {"bye_assignment_method": "random"},
        {"forfeit_win_score": 0},
        {"round_robin_plays_per_opponent": 0},
        {"division_mode": "ladder"},
        {"tournament_mode": "pairs"},
        {"divisions": []},
        {"divisions": [Division("a", "A", 1500, 1000)]},
        {"divisions": [Division("a", "A"), Division("a", "Again")]},
        {"classes": [PlayerClass("x", "X", 2000, 1000)]},
        {"team_settings": TeamSettings(top_players_count=0)},
    ],
)
def test_invalid_configuration(changes):
    with pytest.raises(InvalidConfigurationException):
        TournamentConfig(tournament_id="t", **changes).validate()


def test_default_configuration_is_valid():
    config = TournamentConfig(tournament_id="t").validate()
    assert config.tie_break_order == ["cumulative_spread", "buchholz", "rating"]
    assert config.division_ids == ["open"]


def test_from_dict_accepts_exported_keys():
    config = TournamentConfig.from_dict(
        {
            "id": 42,
            "name": "Spring Open",
            "totalRounds": 5,
            "tieBreakOrder": ["medianBuchholz", "rating"],
            "ratingsSystemSettings": {"kFactor": 32},
            "byeAssignmentMethod": "highestRankedFewestByes",
            "divisionMode": "multiple",
            "divisions": [
                {"id": "a", "name": "A", "ratingFloor": 1500},
                {"id": "b", "name": "B", "ratingCeiling": 1499},
            ],
            "tournamentMode": "team",
            "teams": [{"id": "n", "name": "North"}],
            "teamSettings": {
                "topPlayersCount": 2,
                "preventTeammatePairings_AllRounds": True,
            },
        }
    )
    assert config.tournament_id == "42"
    assert config.total_rounds == 5
    assert config.tie_break_order == ["median_buchholz", "rating"]
    assert config.k_factor == 32
    assert config.bye_assignment_method == "highest_ranked_fewest_byes"
    assert [(d.id, d.rating_floor, d.rating_ceiling) for d in config.divisions] == [
        ("a", 1500, 9999),
        ("b", 0, 1499),
    ]
    assert config.team_name("n") == "North"
    assert config.separates_teammates(7)
    config.validate()


def test_dict_round_trip():
    config = TournamentConfig(
        tournament_id="t",
        total_rounds=9,
        division_mode="multiple",
        divisions=[Division("a", "A", 1600), Division("b", "B", 0, 1599)],
        classes=[PlayerClass("x", "X", 1800)],
    )
    assert TournamentConfig.from_dict(config.to_dict()) == config


def test_from_dict_needs_an_id():
    with pytest.raises(InvalidConfigurationException):
        TournamentConfig.from_dict({"name": "Nameless"})


def test_teammates_only_separated_in_team_mode():
    settings = TeamSettings(prevent_teammate_pairings_all_rounds=True)
    assert not TournamentConfig(tournament_id="t", team_settings=settings).separates_teammates(1)


def test_rule_from_dict_aliases():
    rule = PairingRule.from_dict(
        {
            "startRound": 2,
            "endRound": 4,
            "pairingMethod": "King of the Hill",
            "standingsSource": "Lagged",
        }
    )
    assert (rule.start_round, rule.end_round) == (2, 4)
    assert rule.pairing_method == "king_of_the_hill"
    assert rule.standings_source == "lagged"
    assert rule.scheme == "1v3_2v4"
    assert PairingRule.from_dict(rule.to_dict()) == rule


class TestBands:
    divisions = [
        Division("low", "Low", 0, 999),
        Division("high", "High", 1600, 2400),
        Division("mid", "Mid", 1000, 1599),
    ]

    @pytest.mark.parametrize(
        "rating, expected", [(2000, "high"), (1600, "high"), (1599, "mid"), (400, "low")]
    )
    def test_division_by_band(self, rating, expected):
        assert assign_division(rating, self.divisions).id == expected

    def test_outside_every_band_falls_to_lowest(self):
        assert assign_division(2800, self.divisions).id == "low"

    def test_no_divisions(self):
        assert assign_division(1500, []) is None

    def test_class_may_be_missing(self):
        classes = [PlayerClass("a", "A", 1800), PlayerClass("b", "B", 1400, 1799)]
        assert assign_class(1850, classes).id == "a"
        assert assign_class(1500, classes).id == "b"
        assert assign_class(1200, classes) is None


def test_player_copies():
    player = Player(id="p", name="Pat", rating=1500)
    with_bye = player.with_bye(3)
    assert with_bye.bye_rounds == [3]
    assert player.bye_rounds == []
    assert player.withdraw().status == "withdrawn"
    assert not player.withdraw().is_active
    assert player.withdraw().reinstate().is_active


def test_seeds_follow_rating():
    players = [
        Player(id="x", name="X", rating=1400),
        Player(id="y", name="Y", rating=1900),
        Player(id="z", name="Z", rating=1650),
    ]
    seeded = assign_seeds(players)
    assert [p.seed for p in seeded] == [3, 1, 2]
    assert all(p.seed == 0 for p in players)


def test_rating_validation():
    assert validate_rating("1500.4").sanitized_value == 1500
    assert not validate_rating("")
    assert not validate_rating("strong")
    assert not validate_rating(-5)
    with pytest.raises(InvalidPlayerDataException):
        validate_rating_strict(None)


def test_score_validation():
    assert validate_game_score(435).sanitized_value == 435
    assert validate_game_score(-20)
    assert not validate_game_score(True)
    assert not validate_game_score(400.5)
    assert not validate_game_score(5000)
    with pytest.raises(InvalidResultException):
        validate_score_pair_strict(400, None)


def test_exception_context_in_message():
    error = InsufficientPlayersException(
        "Division needs at least two active players",
        tournament_id="t",
        round_number=3,
        division_id="b",
    )
    assert isinstance(error, PairingException)
    assert error.context == {"tournament_id": "t", "round": 3, "division_id": "b"}
    assert str(error).endswith("[tournament_id=t, round=3, division_id=b]")
