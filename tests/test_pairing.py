import random

import pytest

from conftest import TID, make_players, make_standings, pair_set
from kismetpairing.constants import SCHEME_1V2_3V4, SCHEME_1V3_2V4
from kismetpairing.exceptions import InsufficientPlayersException, InvalidPairingException
from kismetpairing.models import (
    PairingHistory,
    PairingRule,
    Player,
    TeamSettings,
    TournamentConfig,
    assign_seeds,
)
from kismetpairing.pairing import (
    AustralianDrawPairing,
    ChewPairing,
    KingOfTheHillPairing,
    RoundRobinPairing,
    SwissPairing,
    generate_schedule,
    get_pairing_algorithm,
    split_quartiles,
)
from kismetpairing.pairing.round_robin import schedule_order


def lettered(count, teams=None):
    """Players a, b, c, ... rated from 2000 down in steps of 100."""
    letters = "abcdefghijklmnop"[:count]
    teams = teams or [None] * count
    return assign_seeds(
        [
            Player(id=letter, name=letter.upper(), rating=2000 - 100 * i, team_id=team)
            for i, (letter, team) in enumerate(zip(letters, teams))
        ]
    )


def pairs(*names):
    return {frozenset(name) for name in names}


class TestSwiss:
    def test_pairs_within_score_groups(self, config):
        players = lettered(4)
        standings = make_standings(players, [2, 2, 1, 0])
        matches = SwissPairing().pair(config, 3, players, standings, PairingHistory())
        assert pair_set(matches) == pairs("ab", "cd")
        assert all(m.round == 3 and m.is_pending for m in matches)

    def test_avoids_rematches(self, config):
        players = lettered(4)
        standings = make_standings(players, [0, 0, 0, 0])
        history = PairingHistory()
        history.add_pairing("a", "c")
        matches = SwissPairing().pair(config, 2, players, standings, history)
        assert pair_set(matches) == pairs("ad", "bc")

    def test_looks_ahead_for_a_fully_fresh_group(self, config):
        players = lettered(4)
        standings = make_standings(players, [1, 1, 1, 1])
        history = PairingHistory()
        for pair in ("ab", "bd", "cd"):
            history.add_pairing(*pair)
        # a-c first would leave b with d, whom b has already played
        matches = SwissPairing().pair(config, 4, players, standings, history)
        assert pair_set(matches) == pairs("ad", "bc")

    def test_odd_group_floats_its_lowest_player_down(self, config):
        players = lettered(6)
        standings = make_standings(players, [1, 1, 1, 0, 0, 0])
        matches = SwissPairing().pair(config, 2, players, standings, PairingHistory())
        # c drops into the zero group and meets its bottom half
        assert pair_set(matches) == pairs("ab", "ce", "df")

    def test_takes_a_rematch_when_nothing_else_is_left(self, config):
        players = lettered(2)
        history = PairingHistory()
        history.add_pairing("a", "b")
        matches = SwissPairing().pair(
            config, 2, players, make_standings(players, [1, 0]), history
        )
        assert pair_set(matches) == pairs("ab")

    def test_keeps_teammates_apart(self):
        players = lettered(4, teams=["x", "y", "x", "y"])
        config = TournamentConfig(
            tournament_id=TID,
            tournament_mode="team",
            team_settings=TeamSettings(prevent_teammate_pairings_all_rounds=True),
        )
        standings = make_standings(players, [0, 0, 0, 0])
        matches = SwissPairing().pair(config, 1, players, standings, PairingHistory())
        assert pair_set(matches) == pairs("ad", "bc")

    def test_teammates_may_meet_without_separation(self, config):
        players = lettered(4, teams=["x", "y", "x", "y"])
        standings = make_standings(players, [0, 0, 0, 0])
        matches = SwissPairing().pair(config, 1, players, standings, PairingHistory())
        assert pair_set(matches) == pairs("ac", "bd")

    def test_separation_only_in_initial_rounds(self):
        players = lettered(4, teams=["x", "y", "x", "y"])
        config = TournamentConfig(
            tournament_id=TID,
            tournament_mode="team",
            team_settings=TeamSettings(prevent_teammate_pairings_initial_rounds=2),
        )
        standings = make_standings(players, [0, 0, 0, 0])
        early = SwissPairing().pair(config, 2, players, standings, PairingHistory())
        late = SwissPairing().pair(config, 3, players, standings, PairingHistory())
        assert pair_set(early) == pairs("ad", "bc")
        assert pair_set(late) == pairs("ac", "bd")


def test_king_of_the_hill_pairs_adjacent_ranks(config):
    players = lettered(6)
    # rank order differs from rating order
    ranked = [players[i] for i in (2, 0, 5, 1, 3, 4)]
    standings = make_standings(ranked, [3, 3, 2, 2, 1, 0])
    history = PairingHistory()
    history.add_pairing("c", "a")
    matches = KingOfTheHillPairing().pair(config, 4, players, standings, history)
    assert [(m.player_a_id, m.player_b_id) for m in matches] == [
        ("c", "a"),
        ("f", "b"),
        ("d", "e"),
    ]


class TestRoundRobin:
    def test_everyone_meets_once(self):
        schedule = generate_schedule(["a", "b", "c", "d"], 3)
        seen = [frozenset(pair) for round_pairs in schedule for pair in round_pairs]
        assert len(seen) == 6
        assert len(set(seen)) == 6

    def test_odd_field_gets_one_bye_each(self):
        schedule = generate_schedule(["a", "b", "c", "d", "e"], 5)
        byes = [a for round_pairs in schedule for a, b in round_pairs if b is None]
        assert sorted(byes) == ["a", "b", "c", "d", "e"]
        games = [
            frozenset(pair) for round_pairs in schedule for pair in round_pairs if None not in pair
        ]
        assert len(set(games)) == 10

    def test_second_cycle_swaps_sides(self):
        schedule = generate_schedule(["a", "b", "c", "d"], 6, plays_per_opponent=2)
        assert schedule[3] == [(b, a) for a, b in schedule[0]]

    def test_needs_two_players(self):
        with pytest.raises(InsufficientPlayersException):
            generate_schedule(["a"], 1)

    def test_rounds_count_from_block_start(self, config):
        players = make_players([1500, 1400, 1300, 1200])
        expected = generate_schedule([p.id for p in schedule_order(players)], 2)[1]
        matches = RoundRobinPairing(start_round=3).pair(
            config, 4, players, [], PairingHistory()
        )
        assert [(m.player_a_id, m.player_b_id) for m in matches] == expected
        assert all(m.round == 4 for m in matches)

    def test_bye_match_is_completed(self, config):
        players = make_players([1500, 1400, 1300])
        matches = RoundRobinPairing().pair(config, 1, players, [], PairingHistory())
        byes = [m for m in matches if m.is_bye]
        assert len(byes) == 1
        assert byes[0].is_completed
        assert byes[0].score_a == config.bye_spread


class TestAustralianDraw:
    @staticmethod
    def crosses(matches, upper, lower):
        return all(
            (m.player_a_id in upper and m.player_b_id in lower)
            or (m.player_a_id in lower and m.player_b_id in upper)
            for m in matches
        )

    def test_first_against_third_quartile(self, config):
        players = lettered(8)
        matches = AustralianDrawPairing(SCHEME_1V3_2V4, random.Random(3)).pair(
            config, 1, players, [], PairingHistory()
        )
        assert len(matches) == 4
        top = [m for m in matches if {m.player_a_id, m.player_b_id} & set("ab")]
        rest = [m for m in matches if m not in top]
        assert self.crosses(top, set("ab"), set("ef"))
        assert self.crosses(rest, set("cd"), set("gh"))

    def test_first_against_second_quartile(self, config):
        players = lettered(8)
        matches = AustralianDrawPairing(SCHEME_1V2_3V4, random.Random(3)).pair(
            config, 1, players, [], PairingHistory()
        )
        top = [m for m in matches if {m.player_a_id, m.player_b_id} & set("ab")]
        rest = [m for m in matches if m not in top]
        assert self.crosses(top, set("ab"), set("cd"))
        assert self.crosses(rest, set("ef"), set("gh"))

    def test_same_seed_same_draw(self, config):
        players = lettered(12)
        first = AustralianDrawPairing(rng=random.Random(11)).pair(
            config, 1, players, [], PairingHistory()
        )
        second = AustralianDrawPairing(rng=random.Random(11)).pair(
            config, 1, players, [], PairingHistory()
        )
        assert first == second

    def test_uneven_quartiles(self):
        assert [len(q) for q in split_quartiles(lettered(10))] == [3, 3, 2, 2]

    def test_uneven_field_is_fully_paired(self, config):
        players = lettered(10)
        matches = AustralianDrawPairing(rng=random.Random(5)).pair(
            config, 1, players, [], PairingHistory()
        )
        paired = [pid for m in matches for pid in m.player_ids]
        assert sorted(paired) == sorted(p.id for p in players)

    def test_unknown_scheme(self):
        with pytest.raises(InvalidPairingException):
            AustralianDrawPairing(scheme="1v4")


class TestChew:
    @pytest.fixture
    def config(self):
        return TournamentConfig(tournament_id=TID, total_rounds=5)

    def test_contenders_play_by_rank(self, config):
        players = lettered(6)
        standings = make_standings(players, [4, 3.5, 3, 2, 1, 0])
        matches = ChewPairing().pair(config, 5, players, standings, PairingHistory())
        assert pair_set(matches) == pairs("ab", "cd", "ef")

    def test_odd_contender_drops_to_the_field(self, config):
        players = lettered(6)
        standings = make_standings(players, [4, 3.5, 3, 2, 1, 0])
        contenders, field = ChewPairing().split_contenders(config, 5, players, standings)
        assert [p.id for p in contenders] == ["a", "b"]
        assert "c" in {p.id for p in field}

    def test_lone_contender_joins_the_field(self, config):
        players = lettered(4)
        standings = make_standings(players, [4, 2, 1, 0])
        contenders, field = ChewPairing().split_contenders(config, 5, players, standings)
        assert contenders == []
        assert len(field) == 4
        matches = ChewPairing().pair(config, 5, players, standings, PairingHistory())
        assert pair_set(matches) == pairs("ab", "cd")

    def test_players_who_cannot_catch_up_are_not_contenders(self, config):
        players = lettered(4)
        standings = make_standings(players, [5, 3, 2, 1.5])
        contenders, _ = ChewPairing().split_contenders(config, 3, players, standings)
        rounds_left = config.total_rounds - 2
        lookup = {s.player.id: s.score for s in standings}
        for player in contenders:
            assert lookup[player.id] + rounds_left >= 5
        assert "d" not in {p.id for p in contenders}


def test_algorithm_lookup(config):
    assert isinstance(get_pairing_algorithm(PairingRule(1, 3, "swiss")), SwissPairing)
    rr = get_pairing_algorithm(PairingRule(4, 7, "round_robin"))
    assert isinstance(rr, RoundRobinPairing)
    assert rr.start_round == 4
    with pytest.raises(InvalidPairingException):
        get_pairing_algorithm(PairingRule(1, 3, "lottery"))
