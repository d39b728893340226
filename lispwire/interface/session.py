import asyncio
import logging
from typing import Optional

from ..config import WireConfig
from ..exceptions import LispEvaluationError, WireCommunicationError, WireProtocolError, WireTimeoutError
from ..io import EvalReply, Wire, WireConst

"""
===================================================================================
This module takes the Wire and provides a higher level interface intended for
use by applications that talk to an evaluation peer from several coroutines.
===================================================================================

Terms:
Wire = One connection, its receive buffer and read cursor.
LispSession = Owns at most one live Wire, serializes calls onto it, and builds
              a fresh Wire after the previous one failed.
"""


class LispSession:
    def __init__(self,
                 config: Optional[WireConfig] = None,
                 host: Optional[str] = None,
                 port: int = WireConst.DEFAULT_PORT,
                 logger: Optional[logging.Logger] = None,
                 print_traffic: bool = False):
        if config is None:
            if host is None:
                raise ValueError("Either config or host is required")
            config = WireConfig(host=host, port=port, print_traffic=print_traffic)
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.wire: Optional[Wire] = None
        self._lock = asyncio.Lock()

    # ============================
    # Connect / Close
    # ============================

    async def connect(self) -> Wire:
        """Return the live Wire, opening a new one if needed"""
        if self.wire is None or not self.wire.is_connected():
            if self.wire is not None:
                await self.wire.close()
            self.wire = await Wire.create(
                self.config.host,
                self.config.port,
                connect_timeout=self.config.connect_timeout,
                logger=self.logger,
                print_traffic=self.config.print_traffic,
                timeout=self.config.timeout,
                compaction_threshold=self.config.compaction_threshold,
                encoding=self.config.encoding,
            )
        return self.wire

    async def close(self) -> None:
        """Close the Wire. Does not wait for the lock, so a pending call fails instead of hanging."""
        if self.wire is not None:
            wire, self.wire = self.wire, None
            await wire.close()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ============================
    # Evaluation
    # ============================

    async def evaluate(self, expression: str) -> EvalReply:
        """
        Evaluate an expression on the peer, one call at a time.

        A Wire that fails mid-call is closed and dropped; the error is re-raised
        and the next call connects again. The failed call itself is not retried.
        """
        async with self._lock:
            wire = await self.connect()
            try:
                return await wire.remote_eval(expression)
            except (WireCommunicationError, WireTimeoutError, WireProtocolError) as e:
                # Part of the reply may be unread; the Wire can't be trusted
                self.logger.error(f"Evaluation of {expression!r} failed: {e}")
                await wire.close()
                if self.wire is wire:
                    self.wire = None
                raise

    async def evaluate_or_raise(self, expression: str) -> str:
        """Evaluate and return the result text, raising LispEvaluationError on a non-zero status"""
        reply = await self.evaluate(expression)
        if not reply.ok:
            raise LispEvaluationError(reply.status, reply.condition, expression)
        return reply.result
