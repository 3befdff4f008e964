"""
brainf - a source-stream interpreter for the eight-instruction tape language

Tape: unbounded in both directions, cells created on first visit
Loops: matched lazily by re-scanning the source, no jump table
Engine: reads the program one byte at a time and returns a typed RunResult
"""

__version__ = "0.1.0"

from brainf.tape import Tape
from brainf.loops import LoopFrame, LoopTracker
from brainf.errors import EngineError, ErrorKind
from brainf.streams import SourceStream, InputStream, OutputStream
from brainf.engine import Engine, EngineConfig, RunResult, RunStatus, run

__all__ = [
    "Tape",
    "LoopFrame",
    "LoopTracker",
    "EngineError",
    "ErrorKind",
    "SourceStream",
    "InputStream",
    "OutputStream",
    "Engine",
    "EngineConfig",
    "RunResult",
    "RunStatus",
    "run",
]
