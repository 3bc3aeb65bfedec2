import pytest

from colosseum.__main__ import main
from colosseum.records import BattleArchive


def _base(roster_file, tmp_path):
    return ["--roster", str(roster_file), "--archive", str(tmp_path / "battles.yaml")]


def test_fighters_list_and_show(roster_file, tmp_path, capsys):
    assert main(_base(roster_file, tmp_path) + ["fighters", "list"]) == 0
    assert capsys.readouterr().out.split() == ["Kougra", "Shoyru"]

    assert main(_base(roster_file, tmp_path) + ["fighters", "show", "Kougra"]) == 0
    assert "HP: 120" in capsys.readouterr().out


def test_fight_prints_log_and_is_reproducible(roster_file, tmp_path, capsys):
    args = _base(roster_file, tmp_path) + ["fight", "Kougra", "Shoyru", "--seed", "7", "--max-turns", "15"]
    assert main(args) == 0
    first = capsys.readouterr().out
    assert main(args) == 0
    second = capsys.readouterr().out
    assert first == second
    assert "Battle over" in first


def test_fight_save_then_list_and_watch(roster_file, tmp_path, capsys):
    base = _base(roster_file, tmp_path)
    assert main(base + ["fight", "Kougra", "Shoyru", "--seed", "3", "--save"]) == 0
    out = capsys.readouterr().out
    battle_id = out.strip().splitlines()[-1].split()[-1]

    assert main(base + ["battles", "list"]) == 0
    assert "Completed" in capsys.readouterr().out

    assert main(base + ["battles", "watch", battle_id]) == 0
    assert "Battle over" in capsys.readouterr().out


def test_pending_battle_create_and_run(roster_file, tmp_path, capsys):
    base = _base(roster_file, tmp_path)
    assert main(base + ["battles", "create", "Kougra", "Shoyru", "--seed", "11"]) == 0
    battle_id = capsys.readouterr().out.split()[-1]

    assert main(base + ["battles", "watch", battle_id]) == 1
    capsys.readouterr()

    assert main(base + ["battles", "run", battle_id]) == 0
    assert "Battle over" in capsys.readouterr().out

    assert main(base + ["battles", "clear"]) == 0
    capsys.readouterr()
    assert main(base + ["battles", "list"]) == 0
    assert "No battles found." in capsys.readouterr().out


def test_unknown_fighter_exits_with_error(roster_file, tmp_path, capsys):
    assert main(_base(roster_file, tmp_path) + ["fight", "Kougra", "Ghost"]) == 1
    assert "No fighter named 'Ghost'" in capsys.readouterr().err


def test_fight_against_itself_exits_with_error(roster_file, tmp_path, capsys):
    assert main(_base(roster_file, tmp_path) + ["fight", "Kougra", "Kougra"]) == 1
    assert "cannot battle itself" in capsys.readouterr().err


@pytest.mark.parametrize("command", [
    ["fight", "Kougra", "Shoyru", "--max-turns", "0"],
    ["battles", "create", "Kougra", "Shoyru", "--max-turns", "-1"],
])
def test_non_positive_turn_cap_exits_with_error(roster_file, tmp_path, capsys, command):
    assert main(_base(roster_file, tmp_path) + command) == 1
    assert "--max-turns must be >= 1" in capsys.readouterr().err


def test_saved_fight_keeps_its_turn_cap(roster_file, tmp_path, capsys):
    base = _base(roster_file, tmp_path)
    assert main(base + ["fight", "Kougra", "Shoyru", "--seed", "9", "--max-turns", "30", "--save"]) == 0
    battle_id = capsys.readouterr().out.strip().splitlines()[-1].split()[-1]

    record = BattleArchive.load(tmp_path / "battles.yaml").get(battle_id)
    assert record.max_turns == 30
    assert record.seed == 9


def test_battles_pending_lists_only_unrun_battles(roster_file, tmp_path, capsys):
    base = _base(roster_file, tmp_path)
    assert main(base + ["battles", "pending"]) == 0
    assert "No pending battles." in capsys.readouterr().out

    assert main(base + ["battles", "create", "Kougra", "Shoyru", "--seed", "1"]) == 0
    pending_id = capsys.readouterr().out.split()[-1]
    assert main(base + ["fight", "Shoyru", "Kougra", "--seed", "2", "--save"]) == 0
    capsys.readouterr()

    assert main(base + ["battles", "pending"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 1
    assert lines[0].startswith(pending_id)
    created_at = BattleArchive.load(tmp_path / "battles.yaml").get(pending_id).created_at
    assert lines[0].endswith(created_at)
