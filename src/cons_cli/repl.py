import shlex
import time

# Statements:
#   let NAME = nil | cons VALUE NAME | tail NAME | share NAME
#   head NAME | show NAME | debug NAME | len NAME | drop NAME
#   stats | audit
from typing import Dict

from cons_core.alloc import NodeArena
from cons_core.audit import audit_arena, require_audit_ok
from cons_core.config import ArenaConfig, arena_config_from_env
from cons_core.modes import ValidateMode, coerce_validate_mode
from cons_list.handle import List
from cons_list.render import render, render_debug
from cons_metrics.metrics import arena_sharing_snapshot


class ConsVM:
    def __init__(self, cfg: ArenaConfig | None = None):
        print("⚡ conslist: Initializing Node Arena...")
        self.arena = NodeArena(cfg)
        self.env: Dict[str, List] = {}

    def lookup(self, name: str) -> List:
        try:
            return self.env[name]
        except KeyError:
            raise NameError(f"unbound list: {name}") from None

    def bind(self, name: str, lst: List) -> None:
        old = self.env.get(name)
        self.env[name] = lst
        if old is not None:
            old.drop()

    def unbind(self, name: str):
        lst = self.env.pop(name, None)
        if lst is None:
            raise NameError(f"unbound list: {name}")
        return lst.drop()

    def eval_expr(self, tokens) -> List:
        if tokens == ["nil"]:
            return List.new(self.arena)
        if len(tokens) == 3 and tokens[0] == "cons":
            return self.lookup(tokens[2]).prepend(parse_value(tokens[1]))
        if len(tokens) == 2 and tokens[0] == "tail":
            return self.lookup(tokens[1]).tail()
        if len(tokens) == 2 and tokens[0] == "share":
            return self.lookup(tokens[1]).share()
        raise SyntaxError(f"bad expression: {' '.join(tokens)}")


def parse_value(token: str):
    try:
        return int(token)
    except ValueError:
        pass
    try:
        return float(token)
    except ValueError:
        return token


def make_vm(cfg: ArenaConfig | None = None) -> ConsVM:
    return ConsVM(cfg if cfg is not None else arena_config_from_env())


def run_line(vm: ConsVM, inp: str) -> None:
    tokens = shlex.split(inp)
    cmd, args = tokens[0], tokens[1:]
    if cmd == "let":
        if len(args) < 3 or args[1] != "=":
            raise SyntaxError(f"bad let: {inp}")
        start_live = vm.arena.live_count
        t0 = time.perf_counter()
        vm.bind(args[0], vm.eval_expr(args[2:]))
        build_ms = (time.perf_counter() - t0) * 1000
        print(f"   ├─ Build   : {build_ms:.3f}ms")
        print(f"   ├─ Arena   : {vm.arena.live_count - start_live:+d} nodes")
        print(f"   └─ {args[0]} = \033[92m{render(vm.lookup(args[0]))}\033[0m")
    elif cmd == "head" and len(args) == 1:
        print(f"   └─ {vm.lookup(args[0]).head()!r}")
    elif cmd == "show" and len(args) == 1:
        print(f"   └─ {render(vm.lookup(args[0]))}")
    elif cmd == "debug" and len(args) == 1:
        print(f"   └─ {render_debug(vm.lookup(args[0]))}")
    elif cmd == "len" and len(args) == 1:
        print(f"   └─ {len(vm.lookup(args[0]))}")
    elif cmd == "drop" and len(args) == 1:
        stats = vm.unbind(args[0])
        freed = stats.freed if stats is not None else 0
        shared = stats is not None and stats.stopped_shared
        print(f"   ├─ Freed   : {freed} nodes")
        print(f"   └─ Shared  : {'stopped at shared suffix' if shared else 'no'}")
    elif cmd == "stats" and not args:
        stats = vm.arena.stats()
        sharing = arena_sharing_snapshot(vm.arena)
        print(f"   ├─ Live    : {stats.live_count} / {stats.capacity - 1} slots")
        print(f"   ├─ Allocs  : {stats.total_allocs} (freed {stats.total_frees})")
        print(f"   └─ Shared  : {sharing['shared']} slots (max rc {sharing['max_refcount']})")
    elif cmd == "audit" and not args:
        report = audit_arena(vm.arena, vm.env.values())
        status = "\033[92mOK\033[0m" if report.ok else "\033[91mFAIL\033[0m"
        print(f"   ├─ Live    : {report.live}")
        print(
            f"   ├─ Issues  : mismatched={report.mismatched} "
            f"leaked={report.leaked} dangling={report.dangling}"
        )
        print(f"   └─ Audit   : {status}")
    else:
        raise SyntaxError(f"unknown statement: {inp}")


def run_program_lines(
    lines,
    vm=None,
    validate_mode: ValidateMode = ValidateMode.NONE,
):
    validate_mode = coerce_validate_mode(validate_mode, context="run_program_lines")
    if vm is None:
        vm = make_vm()
    for inp in lines:
        inp = inp.strip()
        if not inp or inp.startswith("#"):
            continue
        run_line(vm, inp)
        require_audit_ok(
            vm.arena,
            vm.env.values(),
            validate_mode=validate_mode,
            context="run_program_lines",
        )
    return vm


def repl(validate_mode: ValidateMode = ValidateMode.NONE, cfg=None):
    validate_mode = coerce_validate_mode(validate_mode, context="repl")
    vm = make_vm(cfg)
    print("\n🔗 conslist shell")
    print("   Try: let a = nil")
    print("   Try: let b = cons 1 a")
    while True:
        try:
            inp = input("\nλ> ").strip()
            if inp in ("exit", "quit"):
                break
            if not inp:
                continue
            run_program_lines([inp], vm, validate_mode=validate_mode)
        except EOFError:
            break
        except Exception as e:
            print(f"   ERROR: {e}")
    return vm


def main(argv=None):
    import sys

    args = sys.argv[1:] if argv is None else list(argv)
    validate_mode: ValidateMode = ValidateMode.NONE
    capacity = None
    path = None
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--validate-mode" and i + 1 < len(args):
            validate_mode = coerce_validate_mode(args[i + 1], context="cli")
            i += 2
            continue
        if arg.startswith("--validate-mode="):
            validate_mode = coerce_validate_mode(
                arg.split("=", 1)[1], context="cli"
            )
            i += 1
            continue
        if arg == "--capacity" and i + 1 < len(args):
            capacity = int(args[i + 1])
            i += 2
            continue
        if arg.startswith("--capacity="):
            capacity = int(arg.split("=", 1)[1])
            i += 1
            continue
        if path is None:
            path = arg
            i += 1
            continue
        i += 1
    cfg = arena_config_from_env()
    if capacity is not None:
        cfg = ArenaConfig(
            initial_capacity=capacity,
            max_capacity=cfg.max_capacity,
            guard_cfg=cfg.guard_cfg,
        )
    if path:
        with open(path) as f:
            lines = f.readlines()
        run_program_lines(lines, make_vm(cfg), validate_mode=validate_mode)
    else:
        repl(validate_mode=validate_mode, cfg=cfg)
    return 0


__all__ = [
    "ConsVM",
    "make_vm",
    "parse_value",
    "run_line",
    "run_program_lines",
    "repl",
    "main",
]
