"""
Wire-level type definitions.

This module contains the value types and constants of the wire format:
- Opcode, the one-byte discriminants written before encoded values
- Symbol and Cons, the non-primitive values that can be sent
- WireConst, protocol constants shared by the codec and the session
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Iterable, NamedTuple, Union


class WireConst:
    """Constants for the wire protocol"""
    NUMBER_LENGTH = 4
    SYMBOL_TRAILER = b"SKANK"  # Written after every symbol name; the peer never explains it
    EVALUATE = "EVALUATE"
    NIL = "NIL"
    RESERVED_PREFIX = b"\x00"  # Slot 0 of a fresh receive buffer; reading starts at 1
    COMPACTION_THRESHOLD = 100000
    DEFAULT_ENCODING = "utf-8"
    DEFAULT_PORT = 4005


class Opcode(IntEnum):
    """Payload kinds, only ever written (replies are untagged)"""
    FUNCALL = 6
    NUMBER = 7
    STRING = 8
    SYMBOL = 9
    CONS = 13


class WireState(Enum):
    DISCONNECTED = 0
    CONNECTED = 1
    CLOSED = 2


@dataclass(frozen=True)
class Symbol:
    """A Lisp symbol, sent by name"""
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Cons:
    """An ordered pair; right-nested conses form lists"""
    head: "WireValue"
    tail: "WireValue"


WireValue = Union[int, str, bytes, bytearray, Symbol, Cons]

NIL = Symbol(WireConst.NIL)


class EvalReply(NamedTuple):
    """Reply to an EVALUATE funcall"""
    status: int
    condition: str
    result: str

    @property
    def ok(self) -> bool:
        return self.status == 0


def wire_list(items: Iterable[WireValue], terminator: WireValue = NIL) -> WireValue:
    """Build a right-nested chain of conses ending in ``terminator``."""
    result = terminator
    for item in reversed(list(items)):
        result = Cons(item, result)
    return result
