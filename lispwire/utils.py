"""
Utility functions for the lispwire library
"""
import asyncio
import sys
from typing import Awaitable, Callable


def run_with_keyboard_interrupt(main_func: Callable[[], Awaitable[int]]) -> int:
    """
    Run an async main function with graceful KeyboardInterrupt handling.

    Args:
        main_func: The async main function to run; returns an exit status

    Returns:
        The exit status of main_func, 130 if interrupted
    """
    try:
        return asyncio.run(main_func())
    except KeyboardInterrupt:
        print("\nInterrupted by user (Ctrl+C)", file=sys.stderr)
        return 130
