#!/usr/bin/env python3
"""
brainf — command-line harness

Opens the program, input and output streams, runs the engine and turns the
RunResult into a report and an exit code.

Usage:
    brainf run <source> [-i INPUT] [-o OUTPUT]   Run a program file
    brainf eval <code> [-i INPUT] [-o OUTPUT]    Run a program given inline

INPUT defaults to stdin and OUTPUT to stdout; the literal names "stdin" and
"stdout" select them explicitly. Diagnostics always go to stderr.

Exit codes:
    0  completed
    2  unmatched start loop
    3  unmatched end loop
    4  I/O fault
    5  source or input file unavailable
"""

from __future__ import annotations

import argparse
import sys
import textwrap
import time
from typing import Optional

from brainf import __version__
from brainf.engine import Engine, EngineConfig, RunResult, CELL_WIDTHS, EOF_SENTINEL
from brainf.errors import EngineError
from brainf.streams import SourceStream, open_input, open_output, open_source


# ============================================================================
# Formatting helpers
# ============================================================================

class C:
    """ANSI colors."""
    BOLD = "\033[1m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    CYAN = "\033[36m"
    RESET = "\033[0m"

    @staticmethod
    def off():
        C.BOLD = C.DIM = C.RED = C.GREEN = C.YELLOW = C.CYAN = C.RESET = ""


def header(text: str) -> str:
    return f"\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}\n{C.BOLD}  {text}{C.RESET}\n{C.BOLD}{C.CYAN}{'─' * 60}{C.RESET}"


def ok(text: str) -> str:
    return f"  {C.GREEN}✓{C.RESET} {text}"


def fail(text: str) -> str:
    return f"  {C.RED}✗{C.RESET} {text}"


def dim(text: str) -> str:
    return f"{C.DIM}{text}{C.RESET}"


def report(text: str = "") -> None:
    print(text, file=sys.stderr)


def error_block(error: EngineError) -> str:
    rule = "-" * 18
    return (
        f"\n\n{C.RED}{rule}\n"
        f"ERROR : {error.message}\n"
        f"LOCATION : Byte {error.offset}\n"
        f"{rule}{C.RESET}\n"
    )


def tape_dump(result: RunResult, radius: int = 8) -> str:
    tape = result.tape
    cells = []
    for offset, value in tape.window(radius):
        text = f"{value:03}"
        if offset == tape.position:
            cells.append(f"{C.BOLD}{C.YELLOW}[{text}]{C.RESET}")
        else:
            cells.append(f" {text} ")
    low, high = tape.span
    return (
        f"  {C.BOLD}Tape{C.RESET} cursor={tape.position} span=[{low}..{high}] cells={len(tape)}\n"
        f"    {''.join(cells)}"
    )


# ============================================================================
# Running
# ============================================================================

def execute(source: SourceStream, args, label: str) -> int:
    """Run `source` with the streams and settings named in `args`."""
    config = EngineConfig(cell_bits=args.cell_bits, eof_value=args.eof)
    try:
        program_in = open_input(args.input)
    except EngineError:
        source.close()
        raise
    try:
        program_out = open_output(args.output)
    except EngineError:
        source.close()
        _close(program_in, args.input, "stdin")
        raise

    engine = Engine(config, trace=args.verbose)
    start = time.process_time()
    try:
        result = engine.run(source, program_in, program_out)
    finally:
        elapsed = time.process_time() - start
        source.close()
        _close(program_in, args.input, "stdin")
        _close(program_out, args.output, "stdout")

    if args.verbose:
        report(header(f"RUN: {label}"))
        for entry in result.trace:
            report(dim(
                f"    step {entry['step']:>6}  {entry['event']:<6} "
                f"loop@{entry['start']:<5} depth={entry['depth']} "
                f"cell[{entry['position']}]={entry['cell']}"
            ))
        report(result.summary())

    if args.dump:
        report(tape_dump(result))

    if args.time:
        report(f"\n\n{'-' * 18}\nCPU time used : {elapsed:f}\n{'-' * 18}\n")

    if not result.success:
        report(error_block(result.error))
        return result.error.kind.exit_code

    if args.verbose:
        report(ok(f"Completed — {result.steps} instructions, {result.output_bytes} bytes written"))
    return 0


def _close(stream, name: Optional[str], standard: str) -> None:
    if name not in (None, standard):
        stream.close()


# ============================================================================
# Commands
# ============================================================================

def cmd_run(args) -> int:
    """Run a program file."""
    return execute(open_source(args.source), args, args.source)


def cmd_eval(args) -> int:
    """Run a program given on the command line."""
    return execute(SourceStream.of(args.code), args, "<eval>")


# ============================================================================
# Main
# ============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="brainf",
        description="brainf — source-stream tape language interpreter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
        examples:
          brainf run hello.b
          brainf run rot13.b -i message.txt -o encoded.txt
          brainf run mandelbrot.b --time
          brainf eval '++++++++[>++++++++<-]>+.' --dump
        """),
    )
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-i", "--input", help="Program input file (default: stdin)")
    common.add_argument("-o", "--output", help="Program output file (default: stdout)")
    common.add_argument("--time", action="store_true", help="Report CPU time used")
    common.add_argument("--cell-bits", type=int, default=8, choices=CELL_WIDTHS,
                        help="Tape cell width in bits (default: 8)")
    common.add_argument("--eof", type=int, default=EOF_SENTINEL,
                        help="Value stored on end of input (default: -1)")
    common.add_argument("--dump", action="store_true", help="Show the tape around the cursor after the run")
    common.add_argument("-v", "--verbose", action="store_true", help="Trace loop events and show run statistics")

    sub = parser.add_subparsers(dest="command", help="Command to run")

    p = sub.add_parser("run", parents=[common], help="Run a program file")
    p.add_argument("source", help="Program source file")

    p = sub.add_parser("eval", aliases=["e"], parents=[common], help="Run a program given inline")
    p.add_argument("code", help="Program text")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.no_color:
        C.off()

    if not args.command:
        parser.print_help()
        return 1

    commands = {
        "run": cmd_run,
        "eval": cmd_eval, "e": cmd_eval,
    }

    try:
        return commands[args.command](args)
    except EngineError as e:
        report(error_block(e))
        return e.kind.exit_code
    except KeyboardInterrupt:
        report(fail("Interrupted"))
        return 130


if __name__ == "__main__":
    sys.exit(main())
