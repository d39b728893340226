"""
Byte stream transports.

A Transport is the duplex byte stream underneath a Wire. The Wire only needs
three things from it: write bytes, wait for more input, and report whether the
stream is still open.

Example usage:
async def main():
    transport = await TcpTransport.create(("127.0.0.1", 4005))
    transport.write(b"...")
    chunk = await transport.poll_for_more_input(timeout=1.0)
    transport.close()

asyncio.run(main())
"""

import asyncio
import logging
from typing import Optional, Self, Tuple

from ..exceptions import WireConnectionError


class Transport:
    """Duplex byte stream used by a Wire"""

    def write(self, data: bytes) -> None:
        """Queue bytes for delivery to the peer, in order"""
        raise NotImplementedError()

    async def poll_for_more_input(self, timeout: Optional[float] = None) -> bytes:
        """
        Wait until more bytes arrive, the stream closes or ``timeout`` expires.

        Returns the bytes received since the last call, or b"" if nothing arrived.
        """
        raise NotImplementedError()

    def is_open(self) -> bool:
        raise NotImplementedError()

    def close(self) -> None:
        raise NotImplementedError()


class WireStreamProtocol(asyncio.Protocol):
    def __init__(self, data_handler, lost_handler, logger: Optional[logging.Logger] = None):
        self.data_handler = data_handler
        self.lost_handler = lost_handler
        self.logger = logger or logging.getLogger(__name__)
        self.transport: Optional[asyncio.Transport] = None

    def connection_made(self, transport):
        self.transport = transport

    def data_received(self, data):
        self.data_handler(data)

    def eof_received(self):
        self.logger.info("Peer closed its side of the stream")
        return False  # Let asyncio close the transport

    def connection_lost(self, exc):
        if exc:
            self.logger.error(f"Stream connection lost: {exc}")
        else:
            self.logger.info("Stream connection closed")
        self.lost_handler(exc)


class TcpTransport(Transport):
    """
    TCP stream transport built on an asyncio.Protocol.

    Incoming bytes accumulate in a pending buffer until the next
    poll_for_more_input() call collects them. Closing the connection, from
    either side, wakes any pending poll.
    """

    def __init__(self, server: Tuple[str, int], logger: Optional[logging.Logger] = None):
        self.server = server
        self.logger = logger or logging.getLogger(__name__)
        self._transport: Optional[asyncio.Transport] = None
        self._pending = bytearray()
        self._data_ready = asyncio.Event()
        self._closed = False

    @classmethod
    async def create(cls, server: Tuple[str, int], logger: Optional[logging.Logger] = None, connect_timeout: Optional[float] = None) -> Self:
        self = cls(server, logger)
        loop = asyncio.get_running_loop()
        try:
            transport, _ = await asyncio.wait_for(
                loop.create_connection(
                    lambda: WireStreamProtocol(self._receive_data, self._connection_lost, self.logger),
                    host=server[0],
                    port=server[1],
                ),
                timeout=connect_timeout,
            )
        except (OSError, OverflowError, ValueError, asyncio.TimeoutError) as e:
            self.logger.error(f"Failed to connect to {server[0]}:{server[1]}: {e}")
            raise WireConnectionError(server[0], server[1], e) from e
        self._transport = transport
        self.logger.info(f"Connected to peer at {server[0]}:{server[1]}")
        return self

    def _receive_data(self, data: bytes):
        self._pending.extend(data)
        self._data_ready.set()

    def _connection_lost(self, exc: Optional[BaseException]):
        self._closed = True
        self._data_ready.set()

    def write(self, data: bytes) -> None:
        if not self.is_open():
            raise RuntimeError("Transport is closed")
        self._transport.write(data)

    async def poll_for_more_input(self, timeout: Optional[float] = None) -> bytes:
        if not self._pending and self.is_open():
            self._data_ready.clear()
            try:
                await asyncio.wait_for(self._data_ready.wait(), timeout=timeout)
            except asyncio.TimeoutError:
                pass
        data = bytes(self._pending)
        self._pending.clear()
        return data

    def is_open(self) -> bool:
        return self._transport is not None and not self._closed and not self._transport.is_closing()

    def close(self) -> None:
        if self._transport:
            self._transport.close()
        self._closed = True
        self._data_ready.set()
