"""
Wire session.

A Wire owns one transport, a receive buffer that only grows between
compactions, and a cursor into that buffer. Every read on the reply path goes
through read_byte(), which waits on the transport whenever the cursor has
caught up with the bytes received so far.

Terms:
- Funcall = A request asking the peer to call a named function with arguments
- Reply = The untagged Number(status) + String(condition) + String(result)
  the peer sends back for an EVALUATE funcall
- Compaction = Dropping consumed bytes from the receive buffer between calls

Example usage:
async def main():
    async with await Wire.create("127.0.0.1", 4005) as wire:
        status, condition, result = await wire.remote_eval("(+ 40 2)")
        print(result)

asyncio.run(main())
"""

import asyncio
import logging
import time
from typing import Optional, Self

from colorama import Fore, Style

from ..exceptions import WireCommunicationError, WireTimeoutError
from .codec import decode_number, decode_string, encode_funcall, to_bytes
from .transport import TcpTransport, Transport
from .types import EvalReply, Symbol, WireConst, WireState, WireValue


class Wire:
    """
    One connection to an evaluation peer.

    Only one call may be in flight at a time; the protocol has no correlation
    identifiers. Callers sharing a Wire must serialize access themselves.
    """

    def __init__(self,
                 transport: Optional[Transport] = None,
                 logger: Optional[logging.Logger] = None,
                 print_traffic: bool = False,
                 timeout: Optional[float] = None,
                 compaction_threshold: int = WireConst.COMPACTION_THRESHOLD,
                 encoding: str = WireConst.DEFAULT_ENCODING):
        self.logger = logger or logging.getLogger(__name__)
        self.print_traffic = print_traffic
        self.timeout = timeout
        self.compaction_threshold = compaction_threshold
        self.encoding = encoding
        self.transport: Optional[Transport] = transport
        self.state = WireState.CONNECTED if transport is not None and transport.is_open() else WireState.DISCONNECTED
        self._buffer = bytearray(WireConst.RESERVED_PREFIX)
        self._position = len(WireConst.RESERVED_PREFIX)

    @classmethod
    async def create(cls,
                     host: str,
                     port: int = WireConst.DEFAULT_PORT,
                     connect_timeout: Optional[float] = None,
                     **kwargs) -> Self:
        """Connect to host:port. Raises WireConnectionError on failure."""
        self = cls(**kwargs)
        await self.open(host, port, connect_timeout=connect_timeout)
        return self

    async def open(self, host: str, port: int = WireConst.DEFAULT_PORT, connect_timeout: Optional[float] = None) -> None:
        if self.state is not WireState.DISCONNECTED:
            raise RuntimeError(f"Wire cannot be opened from state {self.state.name}")
        self.transport = await TcpTransport.create((host, port), logger=self.logger, connect_timeout=connect_timeout)
        self.state = WireState.CONNECTED

    @property
    def position(self) -> int:
        """Offset of the next unread byte in the receive buffer"""
        return self._position

    @property
    def buffered(self) -> int:
        """Number of bytes held in the receive buffer"""
        return len(self._buffer)

    def is_connected(self) -> bool:
        return self.state is WireState.CONNECTED and self.transport is not None and self.transport.is_open()

    # ============================
    # READING
    # ============================

    async def read_byte(self) -> int:
        """
        Return the byte at the cursor and advance past it.

        Waits for the transport while the byte has not arrived yet.

        Raises:
            WireCommunicationError: the transport closed before the byte arrived
            WireTimeoutError: a read timeout is configured and expired
        """
        while self._position >= len(self._buffer):
            await self._wait_for_input()
        byte = self._buffer[self._position]
        self._position += 1
        return byte

    async def read_number(self) -> int:
        return await decode_number(self)

    async def read_string(self) -> bytes:
        return await decode_string(self)

    async def _wait_for_input(self) -> None:
        transport = self.transport
        if transport is None or self.state is not WireState.CONNECTED:
            raise WireCommunicationError("Wire is closed", offset=self._position)

        loop = asyncio.get_running_loop()
        deadline = None if self.timeout is None else loop.time() + self.timeout
        while True:
            remaining = None if deadline is None else max(0.0, deadline - loop.time())
            chunk = await transport.poll_for_more_input(remaining)
            if chunk:
                self._buffer.extend(chunk)
                return
            if not transport.is_open():
                offset = self._position
                self.logger.error(f"Transport closed while waiting for byte at offset {offset}")
                await self.close()
                raise WireCommunicationError("Transport closed while waiting for input", offset=offset)
            if deadline is not None and loop.time() >= deadline:
                raise WireTimeoutError(self.timeout, offset=self._position)

    # ============================
    # CALLS
    # ============================

    async def funcall(self, function: str | Symbol, *args: WireValue) -> bytes:
        """
        Send a funcall without waiting for a reply. Returns the bytes written.

        Raises:
            WireCommunicationError: the Wire or its transport is closed; the Wire is closed first
        """
        transport = self.transport
        if transport is None or self.state is not WireState.CONNECTED:
            raise WireCommunicationError("Wire is closed", offset=self._position)
        request = to_bytes(encode_funcall, function, *args, encoding=self.encoding)
        if not transport.is_open():
            offset = self._position
            self.logger.error(f"Transport closed before sending funcall at offset {offset}")
            await self.close()
            raise WireCommunicationError("Transport closed before the request was sent", offset=offset)
        transport.write(request)
        return request

    async def remote_eval(self, expression: str) -> EvalReply:
        """
        Ask the peer to evaluate ``expression`` and wait for its reply.

        Returns:
            EvalReply(status, condition, result); condition is empty on success
        """
        started = time.time()
        reply_start = self._position
        request = await self.funcall(WireConst.EVALUATE, expression)

        status = await self.read_number()
        condition = await self.read_string()
        result = await self.read_string()
        reply = EvalReply(
            status,
            condition.decode(self.encoding, errors="replace"),
            result.decode(self.encoding, errors="replace"),
        )

        if self.print_traffic:
            self._print_traffic(request, bytes(self._buffer[reply_start:self._position]), started)
        self.logger.debug(f"EVALUATE {expression!r} -> status {status}")

        self._compact()
        return reply

    def _compact(self) -> bool:
        if self._position <= self.compaction_threshold:
            return False
        consumed = self._position
        # Unread bytes (there should be none between calls) stay at the front
        del self._buffer[:consumed]
        self._position = 0
        self.logger.debug(f"Compacted receive buffer, dropped {consumed} consumed bytes")
        return True

    def _print_traffic(self, request: bytes, response: bytes, started: float) -> None:
        rtt_ms = (time.time() - started) * 1000
        print(Fore.MAGENTA + f"REQUEST: [{', '.join(f'0x{b:02X}' for b in request)}]  "
              + Fore.WHITE + Style.DIM + f"RTT: {rtt_ms:.0f}ms".ljust(10)
              + Style.BRIGHT + Fore.CYAN + f"  RESPONSE: [{', '.join(f'0x{b:02X}' for b in response)}]"
              + Style.RESET_ALL)

    # ============================
    # LIFECYCLE
    # ============================

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self) -> None:
        """Close the transport and discard the receive buffer. Safe to call twice."""
        if self.transport is not None:
            if self.transport.is_open():
                self.transport.close()
            self.logger.info("Wire closed")
        self.transport = None
        self._buffer = bytearray()
        self._position = 0
        self.state = WireState.CLOSED
