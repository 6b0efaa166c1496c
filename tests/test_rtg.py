import json

import pytest

from kismetpairing.testing import (
    RandomTournamentGenerator,
    RatingDistribution,
    RTGConfig,
    build_pairing_rules,
    find_invariant_violations,
)
from kismetpairing.testing.__main__ import run_standard_mode
from kismetpairing.testing.rtg import PAIRING_PLANS, create_small_tournament
from kismetpairing.tournament import validate_rules


@pytest.mark.parametrize("plan", PAIRING_PLANS)
def test_plans_produce_consistent_events(plan):
    config = RTGConfig(num_players=13, num_rounds=7, pairing_plan=plan, seed=2025)
    data = RandomTournamentGenerator(config).generate_complete_tournament()

    assert data["violations"] == []
    assert len(data["rounds"]) == 7
    assert all(r["matches"] for r in data["rounds"])


@pytest.mark.parametrize("num_rounds", [1, 3, 4, 9])
def test_mixed_plan_rules_are_valid(num_rounds):
    rules = build_pairing_rules("mixed", num_rounds)
    validate_rules(rules, total_rounds=num_rounds)
    covered = [r for rule in rules for r in range(rule.start_round, rule.end_round + 1)]
    assert covered == list(range(1, num_rounds + 1))


def test_mixed_plan_layout():
    methods = [r.pairing_method for r in build_pairing_rules("mixed", 8)]
    assert methods == ["australian_draw", "swiss", "chew", "king_of_the_hill"]


def test_unknown_plan():
    with pytest.raises(ValueError):
        build_pairing_rules("lottery", 5)


def test_divisions_are_ranked_separately():
    config = RTGConfig(
        num_players=30,
        num_rounds=5,
        rating_distribution=RatingDistribution.UNIFORM,
        num_divisions=2,
        seed=17,
    )
    data = RandomTournamentGenerator(config).generate_complete_tournament()
    assert data["violations"] == []
    leaders = [s for s in data["standings"] if s["rank"] == 1]
    assert {s["player"]["division_id"] for s in leaders} == {"div1", "div2"}


def test_forfeits_keep_invariants():
    config = RTGConfig(num_players=10, num_rounds=6, forfeit_rate=0.3, seed=5)
    data = RandomTournamentGenerator(config).generate_complete_tournament()
    assert data["violations"] == []
    forfeits = [
        m for r in data["rounds"] for m in r["matches"] if m["is_forfeit"]
    ]
    assert forfeits


def test_same_seed_same_event():
    first = create_small_tournament(10, seed=99, pairing_plan="mixed")
    second = create_small_tournament(10, seed=99, pairing_plan="mixed")
    assert first.generate_complete_tournament() == second.generate_complete_tournament()


def test_exported_event_can_be_rechecked():
    generator = create_small_tournament(8, seed=3)
    data = generator.generate_complete_tournament()
    reloaded = json.loads(generator.export_json_format(data))
    assert find_invariant_violations(reloaded) == []


def test_checker_reports_broken_events():
    generator = create_small_tournament(6, seed=4)
    data = generator.generate_complete_tournament()
    match = data["rounds"][0]["matches"][0]
    match["player_b_id"] = match["player_a_id"]
    data["standings"][0]["cumulative_spread"] += 10

    violations = find_invariant_violations(data)
    assert any("themselves" in v for v in violations)
    assert any("sum to 10" in v for v in violations)


def test_cli_generate_and_validate(tmp_path, capsys):
    output = tmp_path / "event.json"
    code = run_standard_mode(
        ["generate", "--players", "9", "--rounds", "4", "--plan", "chew",
         "--seed", "8", "--output", str(output)]
    )
    assert code == 0
    assert output.exists()

    report = tmp_path / "report.json"
    code = run_standard_mode(["validate", "--file", str(output), "--export", str(report)])
    assert code == 0
    assert json.loads(report.read_text()) == []
    assert "All invariants hold" in capsys.readouterr().out
