"""
Wire-level value codec.

Encoders append to a byte sink (a bytearray); decoders pull one byte at a time
from a source exposing ``async read_byte()`` and a ``position`` attribute.
Nothing here performs I/O of its own.

Wire format:
  Number:  4 bytes, big-endian, unsigned
  String:  Number(length) + raw bytes
  Symbol:  [0x09] + String(name) + String("SKANK")
  Cons:    [0x0D] + value(head) + value(tail)
  Funcall: [0x06, argc] + value(function) + value(arg)...

Example usage:
    sink = bytearray()
    encode_funcall(sink, "EVALUATE", "(+ 40 2)")
    transport.write(bytes(sink))
"""

from typing import Callable, Optional, Protocol

from ..exceptions import WireProtocolError, WireUnsupportedTypeError
from .types import Cons, Opcode, Symbol, WireConst, WireValue


class ByteSource(Protocol):
    position: int

    async def read_byte(self) -> int: ...


class BytesSource:
    """Decoder source over bytes that are already in memory"""

    def __init__(self, data: bytes, position: int = 0):
        self.data = bytes(data)
        self.position = position

    async def read_byte(self) -> int:
        if self.position >= len(self.data):
            raise WireProtocolError("Unexpected end of input", offset=self.position)
        byte = self.data[self.position]
        self.position += 1
        return byte

    def remaining(self) -> int:
        return len(self.data) - self.position


# ============================
# ENCODING
# ============================

def encode_number(sink: bytearray, n: int, length: int = WireConst.NUMBER_LENGTH) -> None:
    """Write ``n`` as ``length`` big-endian bytes. Bits that don't fit are dropped."""
    digits = bytearray(length)
    for i in range(length - 1, -1, -1):
        digits[i] = n % 256
        n //= 256
    sink.extend(digits)


def encode_string(sink: bytearray, s: str | bytes | bytearray, encoding: str = WireConst.DEFAULT_ENCODING) -> None:
    raw = s.encode(encoding) if isinstance(s, str) else bytes(s)
    encode_number(sink, len(raw))
    sink.extend(raw)


def encode_symbol(sink: bytearray, name: str, encoding: str = WireConst.DEFAULT_ENCODING) -> None:
    """Write a symbol. The trailer has no read-side counterpart but legacy peers expect it."""
    sink.append(Opcode.SYMBOL)
    encode_string(sink, name, encoding)
    encode_string(sink, WireConst.SYMBOL_TRAILER)


def encode_cons(sink: bytearray, pair: Cons, encoding: str = WireConst.DEFAULT_ENCODING) -> None:
    # Tails are walked in a loop so long lists don't hit the recursion limit;
    # the bytes match head-then-tail recursion exactly.
    node: WireValue = pair
    while isinstance(node, Cons):
        sink.append(Opcode.CONS)
        encode_value(sink, node.head, encoding)
        node = node.tail
    encode_value(sink, node, encoding)


def encode_value(sink: bytearray, value: WireValue, encoding: str = WireConst.DEFAULT_ENCODING) -> None:
    """
    Write one value preceded by its opcode.

    Raises:
        WireUnsupportedTypeError: for anything other than int, str/bytes, Symbol or Cons
    """
    match value:
        case bool():
            raise WireUnsupportedTypeError(value)
        case int():
            sink.append(Opcode.NUMBER)
            encode_number(sink, value)
        case str() | bytes() | bytearray():
            sink.append(Opcode.STRING)
            encode_string(sink, value, encoding)
        case Symbol():
            encode_symbol(sink, value.name, encoding)
        case Cons():
            encode_cons(sink, value, encoding)
        case _:
            raise WireUnsupportedTypeError(value)


def encode_funcall(sink: bytearray, function: str | Symbol, *args: WireValue, encoding: str = WireConst.DEFAULT_ENCODING) -> None:
    """
    Write a remote function call.

    A plain string function name is sent as a Symbol. The argument count is a
    single byte, so at most 255 arguments can be described; larger counts wrap.
    """
    if isinstance(function, str):
        function = Symbol(function)
    sink.append(Opcode.FUNCALL)
    sink.append(len(args) & 0xFF)
    encode_value(sink, function, encoding)
    for arg in args:
        encode_value(sink, arg, encoding)


def to_bytes(encoder: Callable[..., None], *args, **kwargs) -> bytes:
    """Run an encoder into a fresh sink and return the bytes"""
    sink = bytearray()
    encoder(sink, *args, **kwargs)
    return bytes(sink)


# ============================
# DECODING
# ============================

async def decode_number(source: ByteSource, length: int = WireConst.NUMBER_LENGTH) -> int:
    accum = 0
    for _ in range(length):
        accum = accum * 256 + await source.read_byte()
    return accum


async def decode_string(source: ByteSource) -> bytes:
    """
    Read a length-prefixed byte string.

    Raises:
        WireProtocolError: if the length is negative as a signed 32-bit value.
            No payload bytes are consumed in that case.
    """
    start: Optional[int] = getattr(source, "position", None)
    length = await decode_number(source)
    if length >= 1 << (8 * WireConst.NUMBER_LENGTH - 1):
        signed = length - (1 << (8 * WireConst.NUMBER_LENGTH))
        raise WireProtocolError(f"Negative string length {signed}", offset=start, length=signed)
    payload = bytearray()
    for _ in range(length):
        payload.append(await source.read_byte())
    return bytes(payload)
