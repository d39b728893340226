import pytest

from lispwire import (
    BytesSource,
    Cons,
    NIL,
    Opcode,
    Symbol,
    WireProtocolError,
    WireUnsupportedTypeError,
    decode_number,
    decode_string,
    encode_cons,
    encode_funcall,
    encode_number,
    encode_string,
    encode_symbol,
    encode_value,
    to_bytes,
    wire_list,
)


def test_opcode_values():
    assert [int(op) for op in Opcode] == [6, 7, 8, 9, 13]


@pytest.mark.parametrize("n, expected", [
    (0, b"\x00\x00\x00\x00"),
    (1, b"\x00\x00\x00\x01"),
    (256, b"\x00\x00\x01\x00"),
    (0xDEADBEEF, b"\xde\xad\xbe\xef"),
    (2**32 - 1, b"\xff\xff\xff\xff"),
])
def test_encode_number_big_endian(n, expected):
    assert to_bytes(encode_number, n) == expected


def test_encode_number_truncates_high_bits():
    assert to_bytes(encode_number, 2**32 + 5) == b"\x00\x00\x00\x05"
    assert to_bytes(encode_number, 0x12345, length=2) == b"\x23\x45"


@pytest.mark.asyncio
@pytest.mark.parametrize("n", [0, 1, 255, 256, 65535, 2**31, 2**32 - 1])
async def test_number_roundtrip(n):
    assert await decode_number(BytesSource(to_bytes(encode_number, n))) == n


@pytest.mark.asyncio
@pytest.mark.parametrize("s", [b"", b"x", b"hello world", bytes(range(256))])
async def test_string_roundtrip(s):
    source = BytesSource(to_bytes(encode_string, s))
    assert await decode_string(source) == s
    assert source.remaining() == 0


def test_encode_string_uses_encoding():
    assert to_bytes(encode_string, "é") == b"\x00\x00\x00\x02\xc3\xa9"
    assert to_bytes(encode_string, "é", encoding="latin-1") == b"\x00\x00\x00\x01\xe9"


def test_encode_symbol_writes_trailer():
    assert to_bytes(encode_symbol, "F") == (
        b"\x09"
        + b"\x00\x00\x00\x01F"
        + b"\x00\x00\x00\x05SKANK"
    )


def test_symbol_name_sent_as_given():
    assert b"car" in to_bytes(encode_value, Symbol("car"))


def test_encode_cons():
    assert to_bytes(encode_cons, Cons(1, "a")) == (
        b"\x0d"
        + b"\x07\x00\x00\x00\x01"
        + b"\x08\x00\x00\x00\x01a"
    )


def test_wire_list_is_right_nested():
    assert wire_list([1, 2]) == Cons(1, Cons(2, NIL))
    assert wire_list([]) == NIL


def test_encode_list_matches_nested_encoding():
    nil = to_bytes(encode_symbol, "NIL")
    one = b"\x07\x00\x00\x00\x01"
    two = b"\x07\x00\x00\x00\x02"
    assert to_bytes(encode_value, wire_list([1, 2])) == b"\x0d" + one + b"\x0d" + two + nil


def test_encode_long_list():
    data = to_bytes(encode_value, wire_list(range(20000)))
    nil = to_bytes(encode_symbol, "NIL")
    assert len(data) == 20000 * 6 + len(nil)
    assert data[:6] == b"\x0d\x07\x00\x00\x00\x00"
    assert data.endswith(nil)


@pytest.mark.parametrize("value", [None, 1.5, True, [1, 2], {"a": 1}, object()])
def test_encode_value_rejects_unsupported(value):
    with pytest.raises(WireUnsupportedTypeError) as e:
        to_bytes(encode_value, value)
    assert e.value.value_type is type(value)
    assert isinstance(e.value, TypeError)


def test_unsupported_value_inside_cons():
    with pytest.raises(WireUnsupportedTypeError):
        to_bytes(encode_value, Cons(1, 2.0))


@pytest.mark.asyncio
async def test_funcall_read_back():
    source = BytesSource(to_bytes(encode_funcall, "F", 1, "x"))
    assert await source.read_byte() == Opcode.FUNCALL
    assert await source.read_byte() == 2
    assert await source.read_byte() == Opcode.SYMBOL
    assert await decode_string(source) == b"F"
    assert await decode_string(source) == b"SKANK"
    assert await source.read_byte() == Opcode.NUMBER
    assert await decode_number(source) == 1
    assert await source.read_byte() == Opcode.STRING
    assert await decode_string(source) == b"x"
    assert source.remaining() == 0


def test_funcall_accepts_symbol_function():
    assert to_bytes(encode_funcall, Symbol("F")) == to_bytes(encode_funcall, "F")


def test_funcall_argument_count_is_one_byte():
    data = to_bytes(encode_funcall, "F", *([0] * 256))
    assert data[1] == 0


@pytest.mark.asyncio
async def test_decode_string_negative_length():
    source = BytesSource(b"\xff\xff\xff\xfe" + b"abc")
    with pytest.raises(WireProtocolError) as e:
        await decode_string(source)
    assert e.value.length == -2
    assert e.value.offset == 0
    assert source.position == 4


@pytest.mark.asyncio
async def test_decode_string_largest_positive_length_is_accepted():
    # 0x7FFFFFFF is not negative, so decoding proceeds until input runs out
    source = BytesSource(b"\x7f\xff\xff\xff" + b"ab")
    with pytest.raises(WireProtocolError) as e:
        await decode_string(source)
    assert e.value.length is None
    assert source.position == 6


@pytest.mark.asyncio
async def test_bytes_source_end_of_input():
    source = BytesSource(b"\x00\x00")
    with pytest.raises(WireProtocolError):
        await decode_number(source)
