"""
brainf Engine Test Suite

Tests the execution engine:
1. Straight-line programs and byte output
2. Loops: entry, repetition, skip, nesting
3. Structural faults and their offsets
4. Input and the end-of-input sentinel
5. Comment bytes are inert
6. I/O faults from the collaborators
7. Configuration, statistics and trace
"""

import io
import random
import sys
import os
import tempfile

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from brainf import Engine, EngineConfig, ErrorKind, RunStatus, SourceStream, run


HELLO = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]"
    ">>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


class BrokenWriter:
    def write(self, data):
        raise OSError("disk full")

    def flush(self):
        pass


class BrokenReader:
    def read(self, n):
        raise OSError("device not ready")


class FailingSource(io.BytesIO):
    def read(self, n=-1):
        raise OSError("bad sector")


# --- Test 1: Straight-line programs ---

def test_increment_and_output():
    result = run("+++.")
    assert result.success
    assert result.status is RunStatus.COMPLETED
    assert result.output == b"\x03"


def test_empty_program_completes():
    result = run("")
    assert result.success
    assert result.output == b""
    assert result.steps == 0


def test_output_to_supplied_writer():
    sink = io.BytesIO()
    result = Engine().run("++.+.", output=sink)
    assert result.success
    assert sink.getvalue() == b"\x02\x03"


def test_hello_world():
    result = run(HELLO)
    assert result.success
    assert result.output == b"Hello World!\n"


def test_source_from_seekable_file():
    with tempfile.NamedTemporaryFile(suffix=".b", delete=False) as f:
        f.write(HELLO.encode())
        path = f.name
    try:
        with open(path, "rb") as source:
            result = run(source)
        assert result.output == b"Hello World!\n"
    finally:
        os.unlink(path)


# --- Test 2: Loops ---

def test_loop_runs_until_cell_is_zero():
    result = run("+[-]")
    assert result.success
    assert result.output == b""
    assert result.tape.value == 0


def test_loop_on_zero_cell_is_skipped():
    result = run("[-]", trace=True)
    assert result.success
    assert result.tape.value == 0
    assert result.steps == 1
    assert [e["event"] for e in result.trace] == ["skip"]


def test_skipped_loop_body_never_executes():
    result = run("[+++.>>]+.")
    assert result.output == b"\x01"
    assert result.tape.position == 0


def test_multiplication_with_nested_loop():
    result = run("++[>+++[>+<-]<-]>>.")
    assert result.success
    assert result.output == b"\x06"


def test_nested_clear_and_move():
    result = run("+>+<[[-]>]")
    assert result.success
    assert result.tape.position == 2
    assert [result.tape.cell(i) for i in range(3)] == [0, 0, 0]


def test_nested_loops_on_left_of_origin():
    result = run("<+++[>++<-]>.")
    assert result.output == b"\x06"


def test_skip_resumes_after_matching_close():
    result = run("[[]+]++.")
    assert result.output == b"\x02"


def test_consecutive_loops_share_no_frames():
    result = run("++[-]+++[-]+.")
    assert result.success
    assert result.output == b"\x01"


# --- Test 3: Structural faults ---

@pytest.mark.parametrize("code, offset", [
    ("[", 1),
    ("ab[cd", 3),
    ("+>[[-]", 3),
])
def test_unmatched_open_reports_scan_start(code, offset):
    result = run(code)
    assert not result.success
    assert result.status is RunStatus.ERROR
    assert result.kind is ErrorKind.UNMATCHED_OPEN
    assert result.offset == offset


def test_entered_loop_without_close_is_unmatched_open():
    result = run("+[")
    assert result.kind is ErrorKind.UNMATCHED_OPEN
    assert result.offset == 2


@pytest.mark.parametrize("code, offset", [
    ("]", 1),
    ("+-]", 3),
    ("+[-]]", 5),
    ("x]", 2),
])
def test_unmatched_close_reports_its_offset(code, offset):
    result = run(code)
    assert result.kind is ErrorKind.UNMATCHED_CLOSE
    assert result.offset == offset
    assert result.message == "Unmatched end loop encountered."


def test_error_stops_the_run_immediately():
    result = run("+.].")
    assert result.kind is ErrorKind.UNMATCHED_CLOSE
    assert result.output == b"\x01"
    assert "UNMATCHED_CLOSE" in repr(result)


# --- Test 4: Input ---

def test_input_byte_is_echoed():
    result = run(",.", input=bytes([65]))
    assert result.success
    assert result.output == b"A"


def test_end_of_input_stores_sentinel():
    result = run(",.", input=b"")
    assert result.success
    assert result.output == b"\xff"
    assert result.tape.value == 255


def test_no_input_stream_reads_as_end_of_input():
    result = run(",.")
    assert result.output == b"\xff"


def test_custom_sentinel():
    result = run(",.", eof_value=0)
    assert result.output == b"\x00"


def test_cat_stops_on_default_sentinel():
    result = run(",+[-.,+]", input=b"hi there")
    assert result.success
    assert result.output == b"hi there"


def test_cat_with_zero_sentinel():
    result = run(",[.,]", input=b"abc", eof_value=0)
    assert result.output == b"abc"


# --- Test 5: Comments ---

def test_non_instruction_bytes_are_inert():
    noisy = "This + is + a + program + and + it + prints + . three?"
    assert run(noisy).output == bytes([7])


def test_inserting_comments_changes_nothing():
    rng = random.Random(7)
    filler = "abcxyz \n\t#!0123456789"
    noisy = "".join(c + rng.choice(filler) * rng.randint(0, 3) for c in HELLO)
    plain = run(HELLO)
    commented = run(noisy)
    assert commented.status is plain.status
    assert commented.output == plain.output


def test_inserting_comments_keeps_error_kind():
    plain = run("+[-]]")
    commented = run("x+ [ - ] y ]")
    assert commented.kind is plain.kind is ErrorKind.UNMATCHED_CLOSE


# --- Test 6: I/O faults ---

def test_output_fault_is_io_fault():
    result = Engine().run("+.", output=BrokenWriter())
    assert result.kind is ErrorKind.IO_FAULT
    assert result.offset == 2
    assert "disk full" in result.message


def test_input_fault_is_io_fault():
    result = Engine().run("+,", input=BrokenReader())
    assert result.kind is ErrorKind.IO_FAULT
    assert result.offset == 2


def test_pipe_source_is_io_fault():
    read_end, write_end = os.pipe()
    os.write(write_end, b"+[-].")
    os.close(write_end)
    with os.fdopen(read_end, "rb") as pipe:
        result = run(pipe)
    assert result.kind is ErrorKind.IO_FAULT
    assert result.offset == 0
    assert "not seekable" in result.message


def test_source_read_fault_is_io_fault():
    result = run(FailingSource(b"+++."))
    assert not result.success
    assert result.kind is ErrorKind.IO_FAULT
    assert "bad sector" in result.message


def test_text_mode_source_is_rejected(tmp_path):
    path = tmp_path / "prog.b"
    path.write_text("+++.")
    with open(path, "r") as source:
        with pytest.raises(TypeError, match="binary mode"):
            run(source)


# --- Test 7: Configuration, statistics, trace ---

def test_wide_cells_wrap_at_their_width():
    result = run("-.", cell_bits=16)
    assert result.tape.value == 65535
    assert result.output == b"\xff"


def test_unsupported_cell_width_is_rejected():
    with pytest.raises(ValueError):
        EngineConfig(cell_bits=12)


def test_config_mask():
    assert EngineConfig().mask == 0xFF
    assert EngineConfig(cell_bits=32).mask == 0xFFFFFFFF


def test_engine_is_reusable():
    engine = Engine()
    first = engine.run("+++.")
    second = engine.run(".")
    assert first.output == b"\x03"
    assert second.output == b"\x00"


def test_statistics():
    result = run("+>+< comment .")
    assert result.steps == 5
    assert result.output_bytes == 1
    assert result.cells == 2
    assert "Instructions: 5" in result.summary()


def test_trace_records_loop_lifecycle():
    result = run("++[-]", trace=True)
    events = [(e["event"], e["start"]) for e in result.trace]
    assert events == [("enter", 3), ("repeat", 3), ("exit", 3)]


def test_trace_is_off_by_default():
    assert run("++[-]").trace == []


def test_source_stream_is_accepted_directly():
    source = SourceStream.of(b"+++.")
    assert run(source).output == b"\x03"
