"""
Wire-level protocol implementation.

This module contains the lowest-level communication components:
- Codec - Encoding values and funcalls, decoding numbers and strings
- Transport, TcpTransport - Raw byte stream to the peer
- Wire - Receive buffer, read cursor and the remote evaluation call
"""

from .codec import (
    BytesSource,
    decode_number,
    decode_string,
    encode_cons,
    encode_funcall,
    encode_number,
    encode_string,
    encode_symbol,
    encode_value,
    to_bytes,
)
from .transport import Transport, TcpTransport
from .types import Cons, EvalReply, NIL, Opcode, Symbol, WireConst, WireState, WireValue, wire_list
from .wire import Wire

__all__ = [
    "Wire",
    "Transport",
    "TcpTransport",
    "BytesSource",
    "encode_number",
    "encode_string",
    "encode_symbol",
    "encode_cons",
    "encode_value",
    "encode_funcall",
    "decode_number",
    "decode_string",
    "to_bytes",
    "Opcode",
    "Symbol",
    "Cons",
    "NIL",
    "EvalReply",
    "WireConst",
    "WireState",
    "WireValue",
    "wire_list",
]
