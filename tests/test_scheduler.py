import logging
from dataclasses import replace

import pytest

from conftest import TID, completed, make_players, pair_set
from kismetpairing.exceptions import (
    InsufficientPlayersException,
    InvalidConfigurationException,
    MissingConfigurationException,
    NoPairingRuleException,
    OverlappingPairingRulesException,
    PlayerNotFoundException,
    RoundOutOfRangeException,
    TournamentStateException,
)
from kismetpairing.models import (
    Division,
    Match,
    PairingRule,
    StandingsSnapshot,
    TournamentConfig,
)
from kismetpairing.tournament import (
    PairingScheduler,
    StandingsCalculator,
    find_rule,
    validate_rules,
)


def setup_event(store, players, config=None, rules=None):
    config = config or TournamentConfig(tournament_id=TID, total_rounds=7)
    store.save_config(config)
    for player in players:
        store.add_player(TID, player)
    store.replace_rules(TID, rules or [PairingRule(1, config.total_rounds, "swiss")])
    return PairingScheduler(store)


def score_round(store, round_number, results):
    """Complete the round's matches; ``results`` maps player A id to scores."""
    for match in store.get_matches(TID):
        if match.round == round_number and match.player_a_id in results:
            score_a, score_b = results[match.player_a_id]
            store.update_match(
                replace(match, score_a=score_a, score_b=score_b, status="completed")
            )


def two_divisions(total_rounds=7):
    return TournamentConfig(
        tournament_id=TID,
        total_rounds=total_rounds,
        division_mode="multiple",
        divisions=[Division("a", "A", 1500, 9999), Division("b", "B", 0, 1499)],
    )


class TestRules:
    def test_overlap_is_rejected(self):
        with pytest.raises(OverlappingPairingRulesException):
            validate_rules([PairingRule(1, 3), PairingRule(3, 5)])

    @pytest.mark.parametrize(
        "rule",
        [
            PairingRule(0, 2),
            PairingRule(3, 2),
            PairingRule(1, 9),
            PairingRule(1, 2, pairing_method="lottery"),
            PairingRule(1, 2, standings_source="yesterday"),
            PairingRule(1, 2, "australian_draw", quartile_pairing_scheme="1v4"),
        ],
    )
    def test_malformed_rules(self, rule):
        with pytest.raises(InvalidConfigurationException):
            validate_rules([rule], total_rounds=7)

    def test_gaps_are_allowed(self):
        rules = [PairingRule(1, 2), PairingRule(5, 7, "king_of_the_hill")]
        validate_rules(rules, total_rounds=7)
        assert find_rule(rules, 6).pairing_method == "king_of_the_hill"
        assert find_rule(rules, 3) is None

    def test_uncovered_round_cannot_be_paired(self, store):
        scheduler = setup_event(
            store, make_players([1500, 1400]), rules=[PairingRule(1, 1)]
        )
        with pytest.raises(NoPairingRuleException):
            scheduler.pair_round(TID, 2)

    @pytest.mark.parametrize("round_number", [0, 8])
    def test_round_out_of_range(self, store, round_number):
        scheduler = setup_event(store, make_players([1500, 1400]))
        with pytest.raises(RoundOutOfRangeException):
            scheduler.pair_round(TID, round_number)

    def test_missing_configuration(self, store):
        with pytest.raises(MissingConfigurationException):
            PairingScheduler(store).pair_round("nowhere", 1)


class TestStandingsSource:
    @pytest.fixture
    def scheduler(self, store, config):
        return setup_event(store, [])

    def test_first_round_uses_initial_ratings(self, scheduler, config):
        players = make_players([1200, 1800])
        resolved = scheduler.resolve_standings(config, players, [], "previous_round", 1)
        assert resolved.round is None
        assert not resolved.is_fallback
        assert [s.player.id for s in resolved.standings] == ["p2", "p1"]

    def test_lagged_reads_two_rounds_back(self, scheduler, store, config):
        players = make_players([1500, 1400])
        standings = StandingsCalculator(config).initial_standings(players)
        store.save_snapshot(StandingsSnapshot(TID, 2, standings))
        resolved = scheduler.resolve_standings(config, players, [], "lagged", 4)
        assert resolved.round == 2
        assert not resolved.is_fallback

    def test_lagged_round_two_uses_initial_ratings(self, scheduler, config):
        players = make_players([1500, 1400])
        resolved = scheduler.resolve_standings(config, players, [], "lagged", 2)
        assert resolved.round is None
        assert not resolved.is_fallback

    def test_missing_snapshot_falls_back_to_live(self, scheduler, config, caplog):
        players = make_players([1500, 1400])
        matches = [completed(1, 1, "p1", "p2", 300, 450)]
        with caplog.at_level(logging.WARNING):
            resolved = scheduler.resolve_standings(
                config, players, matches, "previous_round", 2
            )
        assert resolved.is_fallback
        assert resolved.standings[0].player.id == "p2"
        assert "no standings snapshot" in caplog.text

    def test_round0_ignores_results(self, scheduler, config):
        players = make_players([1500, 1400])
        matches = [completed(1, 1, "p1", "p2", 300, 450)]
        resolved = scheduler.resolve_standings(config, players, matches, "round0", 5)
        assert [s.player.id for s in resolved.standings] == ["p1", "p2"]
        assert all(s.score == 0 for s in resolved.standings)


class TestRoundCompletion:
    def test_snapshot_and_next_round(self, store):
        scheduler = setup_event(store, make_players([1500, 1400, 1300, 1200]))
        first = scheduler.pair_round(TID, 1)
        assert pair_set(first.matches) == {frozenset({"p1", "p3"}), frozenset({"p2", "p4"})}

        score_round(store, 1, {"p1": (400, 300), "p2": (350, 400)})
        outcome = scheduler.on_round_completed(TID, 1)

        assert store.get_snapshot(TID, 1) is not None
        assert outcome.round_number == 2
        assert outcome.paired
        assert outcome.standings.round == 1
        assert pair_set(outcome.matches) == {
            frozenset({"p1", "p4"}),
            frozenset({"p2", "p3"}),
        }

    def test_no_rule_for_next_round(self, store, caplog):
        scheduler = setup_event(
            store, make_players([1500, 1400]), rules=[PairingRule(1, 1)]
        )
        scheduler.pair_round(TID, 1)
        score_round(store, 1, {"p1": (400, 300)})
        with caplog.at_level(logging.WARNING):
            outcome = scheduler.on_round_completed(TID, 1)
        assert outcome.rule is None
        assert not outcome.paired
        assert all(m.round == 1 for m in store.get_matches(TID))
        assert "paired manually" in caplog.text

    def test_final_round_only_snapshots(self, store):
        config = TournamentConfig(tournament_id=TID, total_rounds=1)
        scheduler = setup_event(store, make_players([1500, 1400]), config=config)
        scheduler.pair_round(TID, 1)
        score_round(store, 1, {"p1": (400, 300)})
        assert scheduler.on_round_completed(TID, 1) is None
        assert store.get_snapshot(TID, 1).standings[0].player.id == "p1"

    def test_snapshot_reflects_end_of_round(self, store, config):
        players = make_players([1500, 1400, 1300])
        players[2].bye_rounds.extend([1, 2])
        scheduler = setup_event(store, players)
        store.add_matches(
            TID,
            [
                completed(None, 1, "p1", "p2", 400, 300),
                completed(None, 1, "p3", None, 50, 0),
                completed(None, 2, "p2", "p1", 500, 300),
                completed(None, 2, "p3", None, 50, 0),
            ],
        )
        snapshot = scheduler.save_snapshot(
            config, store.get_players(TID), store.get_matches(TID), 1
        )
        lines = {s.player.id: s for s in snapshot.standings}
        assert lines["p1"].score == 1
        assert lines["p1"].cumulative_spread == 100
        assert lines["p3"].score == 1


class TestPairing:
    def test_manual_override_is_logged(self, store, caplog):
        scheduler = setup_event(
            store,
            make_players([1500, 1400, 1300, 1200]),
            rules=[PairingRule(1, 7, "king_of_the_hill")],
        )
        with caplog.at_level(logging.WARNING):
            outcome = scheduler.manually_pair_round(TID, 1)
        assert outcome.manual
        assert outcome.rule.pairing_method == "swiss"
        assert "MANUAL OVERRIDE" in caplog.text
        # Swiss on initial ratings rather than King of the Hill
        assert pair_set(outcome.matches) == {
            frozenset({"p1", "p3"}),
            frozenset({"p2", "p4"}),
        }

    def test_odd_pool_bye_is_recorded_on_the_player(self, store):
        scheduler = setup_event(store, make_players([1500, 1400, 1300, 1200, 1100]))
        outcome = scheduler.pair_round(TID, 1)
        byes = [m for m in outcome.matches if m.is_bye]
        assert len(byes) == 1
        assert byes[0].player_a_id == "p5"
        assert byes[0].is_completed
        roster = {p.id: p for p in store.get_players(TID)}
        assert roster["p5"].bye_rounds == [1]
        assert len(outcome.matches) == 3

    def test_withdrawn_players_are_not_paired(self, store):
        players = make_players([1500, 1400, 1300, 1200])
        players[0] = players[0].withdraw()
        scheduler = setup_event(store, players)
        outcome = scheduler.pair_round(TID, 1)
        assert all(not m.involves("p1") for m in outcome.matches)
        assert len([m for m in outcome.matches if m.is_bye]) == 1

    def test_round_cannot_be_paired_twice(self, store):
        scheduler = setup_event(store, make_players([1500, 1400]))
        scheduler.pair_round(TID, 1)
        with pytest.raises(TournamentStateException):
            scheduler.pair_round(TID, 1)

    def test_one_division_failing_does_not_stop_the_others(self, store):
        players = make_players([1700, 1650, 1600, 1550], division_id="a") + make_players(
            [1200], division_id="b", prefix="q"
        )
        scheduler = setup_event(store, players, config=two_divisions())
        outcome = scheduler.pair_round(TID, 1)

        assert set(outcome.failed_divisions) == {"b"}
        assert isinstance(outcome.failed_divisions["b"], InsufficientPlayersException)
        assert len(outcome.matches) == 2
        assert all(m.player_a_id.startswith("p") for m in outcome.matches)
        assert not outcome.paired

    def test_divisions_are_paired_separately(self, store):
        players = make_players([1700, 1650], division_id="a") + make_players(
            [1200, 1100], division_id="b", prefix="q"
        )
        scheduler = setup_event(store, players, config=two_divisions())
        outcome = scheduler.pair_round(TID, 1)
        assert pair_set(outcome.matches) == {
            frozenset({"p1", "p2"}),
            frozenset({"q1", "q2"}),
        }

    def test_unknown_player_fails_only_its_division(self, store, caplog):
        players = make_players([1700, 1650], division_id="a") + make_players(
            [1200, 1100], division_id="b", prefix="q"
        )
        scheduler = setup_event(store, players, config=two_divisions())
        store.add_matches(
            TID,
            [
                completed(None, 1, "p1", "ghost", 400, 300),
                completed(None, 1, "q1", "q2", 400, 300),
            ],
        )
        with caplog.at_level(logging.ERROR):
            outcome = scheduler.pair_round(TID, 2)
        assert set(outcome.failed_divisions) == {"a"}
        assert isinstance(outcome.failed_divisions["a"], PlayerNotFoundException)
        assert pair_set(outcome.matches) == {frozenset({"q1", "q2"})}
        assert "could not be paired" in caplog.text

    def test_match_with_only_unknown_players_stops_pairing(self, store):
        scheduler = setup_event(store, make_players([1500, 1400]))
        store.add_matches(TID, [Match(TID, 1, "x", "y", 400, 300, "completed")])
        with pytest.raises(PlayerNotFoundException):
            scheduler.pair_round(TID, 2)
