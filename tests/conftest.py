import asyncio
from typing import Optional

import pytest

from lispwire.io import Transport, decode_string, encode_number, encode_string


class FakeTransport(Transport):
    """In-memory transport; tests feed() peer bytes and inspect what was written"""

    def __init__(self, *chunks: bytes):
        self.written = bytearray()
        self.polls = 0
        self._pending = bytearray()
        self._open = True
        self._data_ready = asyncio.Event()
        for chunk in chunks:
            self.feed(chunk)

    def feed(self, data: bytes) -> None:
        self._pending.extend(data)
        self._data_ready.set()

    def write(self, data: bytes) -> None:
        self.written.extend(data)

    async def poll_for_more_input(self, timeout: Optional[float] = None) -> bytes:
        self.polls += 1
        if not self._pending and self._open:
            self._data_ready.clear()
            try:
                await asyncio.wait_for(self._data_ready.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                pass
        data = bytes(self._pending)
        self._pending.clear()
        return data

    def is_open(self) -> bool:
        return self._open

    def close(self) -> None:
        self._open = False
        self._data_ready.set()


class StreamSource:
    """Decoder source over an asyncio.StreamReader, used by stub peers"""

    def __init__(self, reader: asyncio.StreamReader):
        self.reader = reader
        self.position = 0

    async def read_byte(self) -> int:
        byte = (await self.reader.readexactly(1))[0]
        self.position += 1
        return byte


def reply_bytes(status: int, condition: bytes | str = b"", result: bytes | str = b"") -> bytes:
    sink = bytearray()
    encode_number(sink, status)
    encode_string(sink, condition)
    encode_string(sink, result)
    return bytes(sink)


async def read_eval_request(reader: asyncio.StreamReader) -> str:
    """Read one EVALUATE funcall from a client and return its expression text"""
    source = StreamSource(reader)
    opcode = await source.read_byte()
    argc = await source.read_byte()
    assert (opcode, argc) == (6, 1)
    assert await source.read_byte() == 9
    assert await decode_string(source) == b"EVALUATE"
    assert await decode_string(source) == b"SKANK"
    assert await source.read_byte() == 8
    return (await decode_string(source)).decode("utf-8")


@pytest.fixture
def transport_factory():
    return FakeTransport


@pytest.fixture
def reply():
    return reply_bytes


@pytest.fixture
def read_request():
    return read_eval_request


@pytest.fixture
def stub_server():
    """Factory starting a TCP stub peer on an ephemeral port; returns the port"""
    servers: list[asyncio.Server] = []

    async def start(handler) -> int:
        server = await asyncio.start_server(handler, "127.0.0.1", 0)
        servers.append(server)
        return server.sockets[0].getsockname()[1]

    yield start

    for server in servers:
        if not server.get_loop().is_closed():
            server.close()
