import pytest

import conslist as cl
from cons_cli import make_vm, main, run_line, run_program_lines


PROGRAM = [
    "# build two lists sharing a suffix",
    "let a = nil",
    "let b = cons 1 a",
    "let c = cons 2 b",
    "let d = tail c",
    "let e = cons hello d",
    "show c",
    "drop c",
    "show e",
    "head e",
    "audit",
]


def test_run_program_lines_shares_and_audits(capsys):
    vm = run_program_lines(PROGRAM, validate_mode="strict")
    out = capsys.readouterr().out
    assert "c = \x1b[92m[2, 1]" in out
    assert "[hello, 1]" in out
    assert "'hello'" in out
    assert "stopped at shared suffix" in out
    assert "OK" in out
    assert sorted(vm.env) == ["a", "b", "d", "e"]
    assert vm.arena.live_count == 2
    assert cl.audit_arena(vm.arena, vm.env.values()).ok


def test_rebinding_drops_previous_handle():
    vm = make_vm(cl.ArenaConfig(initial_capacity=4))
    run_program_lines(["let a = nil", "let a = cons 1 a", "let a = cons 2 a"], vm)
    assert vm.arena.live_count == 2
    run_line(vm, "let a = tail a")
    assert vm.arena.live_count == 1
    assert vm.lookup("a").head() == 1


def test_drop_reports_shared_stop(capsys):
    vm = run_program_lines(
        ["let a = nil", "let b = cons 1 a", "let c = share b", "drop b"]
    )
    out = capsys.readouterr().out
    assert "stopped at shared suffix" in out
    assert vm.arena.live_count == 1


def test_bad_statements_raise():
    vm = make_vm()
    with pytest.raises(SyntaxError):
        run_line(vm, "frobnicate x")
    with pytest.raises(SyntaxError):
        run_line(vm, "let a nil")
    with pytest.raises(NameError):
        run_line(vm, "show missing")
    with pytest.raises(NameError):
        run_line(vm, "drop missing")


def test_parse_value_types():
    vm = make_vm()
    run_program_lines(["let a = nil", "let b = cons 3 a", "let c = cons 2.5 b"], vm)
    assert vm.lookup("c").head() == 2.5
    assert vm.lookup("b").head() == 3


def test_main_runs_program_file(tmp_path, capsys):
    path = tmp_path / "prog.cons"
    path.write_text("\n".join(PROGRAM) + "\n", encoding="utf-8")
    assert main([str(path), "--validate-mode", "strict", "--capacity=8"]) == 0
    out = capsys.readouterr().out
    assert "[hello, 1]" in out


def test_main_rejects_unknown_validate_mode():
    with pytest.raises(cl.ConsValidateModeError):
        main(["--validate-mode=paranoid"])
