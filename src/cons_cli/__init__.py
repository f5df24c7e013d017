"""CLI helpers and the host-facing list shell."""

from cons_cli.repl import (
    ConsVM,
    make_vm,
    repl,
    run_line,
    run_program_lines,
    main,
)

__all__ = [
    "ConsVM",
    "make_vm",
    "repl",
    "run_line",
    "run_program_lines",
    "main",
]
