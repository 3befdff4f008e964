"""
brainf Execution Engine

Interprets a program straight off its source stream, one byte at a time.

The Engine:
1. Reads one byte from the source and notes the offset just past it
2. Dispatches recognized instructions to the tape, the loop tracker or I/O
3. Ignores every other byte (they are comments)
4. Stops at end of source (Completed) or at the first fault (Error)

There is no bracket-matching pass. A '[' with a non-zero cell records its
offset on the loop stack; a ']' seeks back to one byte before that offset so
the '[' is read again and its entry check decides whether to go round once
more. A '[' with a zero cell scans forward for its matching ']'.

Usage:
    engine = Engine(EngineConfig(cell_bits=8))
    result = engine.run(b"+++.", input=b"", output=sys.stdout.buffer)

    # Or with an in-memory output buffer:
    result = run("++++++++[>++++++++<-]>+.")
    result.output   # b"A"
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Optional

from brainf.errors import EngineError, ErrorKind
from brainf.loops import LoopTracker, scan_past_close
from brainf.streams import InputStream, OutputStream, SourceStream
from brainf.tape import Tape


CELL_WIDTHS = (8, 16, 32, 64)

# C's EOF
EOF_SENTINEL = -1


@dataclass(frozen=True)
class EngineConfig:
    """Per-run engine settings.

    Attributes:
        cell_bits: Width of a tape cell; arithmetic wraps modulo 2**cell_bits
        eof_value: Stored into the cell when ',' finds the input exhausted
    """
    cell_bits: int = 8
    eof_value: int = EOF_SENTINEL

    def __post_init__(self) -> None:
        if self.cell_bits not in CELL_WIDTHS:
            raise ValueError(
                f"Unsupported cell width {self.cell_bits}. "
                f"Choose one of {list(CELL_WIDTHS)}"
            )

    @property
    def mask(self) -> int:
        return (1 << self.cell_bits) - 1


class RunStatus(Enum):
    RUNNING = auto()
    COMPLETED = auto()
    ERROR = auto()


@dataclass
class ExecutionState:
    """Everything one run owns."""
    source: SourceStream
    input: InputStream
    output: OutputStream
    tape: Tape
    loops: LoopTracker = field(default_factory=LoopTracker)
    status: RunStatus = RunStatus.RUNNING
    # Offset just past the byte most recently read
    offset: int = 0
    steps: int = 0
    output_bytes: int = 0
    tracing: bool = False
    trace: list[dict[str, Any]] = field(default_factory=list)

    def log(self, event: str, start: int) -> None:
        """Add a loop event to the trace."""
        if not self.tracing:
            return
        self.trace.append({
            "step": self.steps,
            "event": event,
            "start": start,
            "depth": self.loops.depth,
            "cell": self.tape.value,
            "position": self.tape.position,
        })


@dataclass
class RunResult:
    """The result of running a program."""
    status: RunStatus
    error: Optional[EngineError] = None
    output: bytes = b""
    steps: int = 0
    output_bytes: int = 0
    tape: Optional[Tape] = None
    trace: list[dict[str, Any]] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return self.status is RunStatus.COMPLETED

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error else None

    @property
    def offset(self) -> Optional[int]:
        return self.error.offset if self.error else None

    @property
    def message(self) -> str:
        return self.error.message if self.error else "Completed"

    @property
    def cells(self) -> int:
        return len(self.tape) if self.tape is not None else 0

    def summary(self) -> str:
        lines = [
            f"Run {'COMPLETED' if self.success else 'FAILED'}",
            f"  Instructions: {self.steps}",
            f"  Output bytes: {self.output_bytes}",
            f"  Tape cells:   {self.cells}",
        ]
        if self.error:
            lines.append(f"  Error: {self.error.message} (byte {self.error.offset})")
        return "\n".join(lines)

    def __repr__(self) -> str:
        if self.error:
            return f"<RunResult: {self.error.kind.name} at byte {self.error.offset}>"
        return f"<RunResult: {self.status.name} steps={self.steps}>"


class Engine:
    """Source-stream interpreter.

    Each call to run() gets a fresh tape and loop stack, so one Engine can
    run any number of programs one after another.
    """

    def __init__(self, config: Optional[EngineConfig] = None, trace: bool = False) -> None:
        self.config = config or EngineConfig()
        self.trace = trace
        self._handlers: dict[int, Callable[[ExecutionState], None]] = {
            ord(">"): self._exec_right,
            ord("<"): self._exec_left,
            ord("+"): self._exec_increment,
            ord("-"): self._exec_decrement,
            ord("."): self._exec_output,
            ord(","): self._exec_input,
            ord("["): self._exec_open,
            ord("]"): self._exec_close,
        }

    def run(self, source, input=None, output=None) -> RunResult:
        """Run a program to completion or to its first error.

        Args:
            source: Program text (str), raw bytes, a seekable binary file or
                a SourceStream
            input: Bytes, a binary reader or an InputStream; None means the
                input is empty
            output: A binary writer or an OutputStream; None collects the
                output in memory (see RunResult.output)
        """
        try:
            source = SourceStream.of(source)
        except EngineError as e:
            return RunResult(status=RunStatus.ERROR, error=e)

        state = ExecutionState(
            source=source,
            input=InputStream.of(input),
            output=OutputStream.of(output),
            tape=Tape(self.config.cell_bits),
            tracing=self.trace,
        )

        try:
            self._execute(state)
            self._flush(state)
        except EngineError as e:
            state.status = RunStatus.ERROR
            return self._result(state, e)
        except OSError as e:
            # Input and output faults are converted by their handlers
            state.status = RunStatus.ERROR
            return self._result(state, EngineError(
                ErrorKind.IO_FAULT, state.offset, f"Source could not be read: {e}"))

        state.status = RunStatus.COMPLETED
        return self._result(state)

    def _result(self, state: ExecutionState, error: Optional[EngineError] = None) -> RunResult:
        return RunResult(
            status=state.status,
            error=error,
            output=state.output.getvalue(),
            steps=state.steps,
            output_bytes=state.output_bytes,
            tape=state.tape,
            trace=state.trace,
        )

    def _execute(self, state: ExecutionState) -> None:
        """The dispatch loop."""
        source = state.source
        handlers = self._handlers
        while True:
            char = source.read_one_byte()
            if char is None:
                if state.loops:
                    # An entered loop whose ']' never came
                    raise EngineError(ErrorKind.UNMATCHED_OPEN, state.loops.top.start)
                return
            state.offset = source.current_offset()

            handler = handlers.get(char)
            if handler is None:
                continue
            state.steps += 1
            handler(state)

    def _flush(self, state: ExecutionState) -> None:
        try:
            state.output.flush()
        except (OSError, ValueError) as e:
            raise EngineError(ErrorKind.IO_FAULT, state.offset,
                              f"Output could not be written: {e}")

    # ------------------------------------------------------------------
    # Instruction handlers
    # ------------------------------------------------------------------

    def _exec_right(self, state: ExecutionState) -> None:
        state.tape.move_right()

    def _exec_left(self, state: ExecutionState) -> None:
        state.tape.move_left()

    def _exec_increment(self, state: ExecutionState) -> None:
        state.tape.increment()

    def _exec_decrement(self, state: ExecutionState) -> None:
        state.tape.decrement()

    def _exec_output(self, state: ExecutionState) -> None:
        try:
            state.output.write_one_byte(state.tape.read())
        except (OSError, ValueError) as e:
            raise EngineError(ErrorKind.IO_FAULT, state.offset,
                              f"Output could not be written: {e}")
        state.output_bytes += 1

    def _exec_input(self, state: ExecutionState) -> None:
        try:
            byte = state.input.read_one_byte()
        except (OSError, ValueError) as e:
            raise EngineError(ErrorKind.IO_FAULT, state.offset,
                              f"Input could not be read: {e}")
        state.tape.write(self.config.eof_value if byte is None else byte)

    def _exec_open(self, state: ExecutionState) -> None:
        """'[' — enter (or re-enter) the loop, or skip past its ']'."""
        start = state.offset
        if state.tape.value != 0:
            pushed = state.loops.enter(start)
            state.log("enter" if pushed else "repeat", start)
            return

        if state.loops.leave(start):
            state.log("exit", start)
        else:
            state.log("skip", start)

        if not scan_past_close(state.source):
            raise EngineError(ErrorKind.UNMATCHED_OPEN, start)
        state.offset = state.source.current_offset()

    def _exec_close(self, state: ExecutionState) -> None:
        """']' — jump back so the loop's '[' is read again."""
        top = state.loops.top
        if top is None:
            raise EngineError(ErrorKind.UNMATCHED_CLOSE, state.offset)
        state.source.seek_to(top.start - 1)


def run(source, input=None, output=None, cell_bits: int = 8,
        eof_value: int = EOF_SENTINEL, trace: bool = False) -> RunResult:
    """Run a program with a one-off Engine."""
    engine = Engine(EngineConfig(cell_bits=cell_bits, eof_value=eof_value), trace=trace)
    return engine.run(source, input=input, output=output)
