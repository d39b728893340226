"""
lispwire Python Library

A Python client for the binary wire protocol spoken by Lisp evaluation servers.

This library provides two layers of abstraction:

1. **lispwire.io**: Wire-level protocol implementation (codec, TCP transport, Wire session)
2. **lispwire.interface**: LispSession, serialized evaluation with reconnection after failures

Example usage:
    import lispwire

    # High-level interface (recommended for most users)
    async with lispwire.LispSession(host="127.0.0.1", port=4005) as session:
        print(await session.evaluate_or_raise("(+ 40 2)"))

    # Low-level Wire access (for advanced users)
    async with await lispwire.Wire.create("127.0.0.1", 4005) as wire:
        status, condition, result = await wire.remote_eval("(+ 40 2)")
"""

# High-level interface (recommended for most users)
from .interface import LispSession

# Configuration
from .config import WireConfig, load_config

# Low-level models (wire level)
from .io import (
    Wire,
    Transport,
    TcpTransport,
    BytesSource,
    EvalReply,
    Opcode,
    Symbol,
    Cons,
    NIL,
    WireConst,
    WireState,
    wire_list,
    encode_number,
    encode_string,
    encode_symbol,
    encode_cons,
    encode_value,
    encode_funcall,
    decode_number,
    decode_string,
    to_bytes,
)

# Exceptions
from .exceptions import (
    WireError,
    WireConnectionError,
    WireCommunicationError,
    WireProtocolError,
    WireUnsupportedTypeError,
    WireTimeoutError,
    WireConfigurationError,
    LispEvaluationError,
)

# Utilities
from .utils import run_with_keyboard_interrupt

__version__ = "0.1.0"

# Public API - these are the main classes users should import
__all__ = [
    # High-level interface (recommended)
    "LispSession",

    # Configuration
    "WireConfig",
    "load_config",

    # Wire level (for advanced users)
    "Wire",
    "Transport",
    "TcpTransport",
    "BytesSource",
    "EvalReply",

    # Values and opcodes
    "Opcode",
    "Symbol",
    "Cons",
    "NIL",
    "WireConst",
    "WireState",
    "wire_list",

    # Codec
    "encode_number",
    "encode_string",
    "encode_symbol",
    "encode_cons",
    "encode_value",
    "encode_funcall",
    "decode_number",
    "decode_string",
    "to_bytes",

    # Exceptions
    "WireError",
    "WireConnectionError",
    "WireCommunicationError",
    "WireProtocolError",
    "WireUnsupportedTypeError",
    "WireTimeoutError",
    "WireConfigurationError",
    "LispEvaluationError",

    # Utilities
    "run_with_keyboard_interrupt",
]
