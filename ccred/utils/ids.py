"""
Human-readable identifiers and credit serial numbers.
"""

import uuid
from datetime import datetime, timedelta
from typing import Callable, Awaitable

from ccred.utils.time import epoch_millis


def new_id(prefix: str) -> str:
    """Return an id such as ``PRJ-1a2b3c4d``."""
    return f"{prefix}-{uuid.uuid4().hex[:8]}"


def credit_serial_number(project_id: str, vintage: str, at: datetime) -> str:
    """
    Serial number for a credit issued at ``at``.

    Format: ``<project_id>-<vintage>-<epoch milliseconds>``.
    """
    return f"{project_id}-{vintage}-{epoch_millis(at)}"


async def unique_serial_number(
    project_id: str,
    vintage: str,
    at: datetime,
    exists: Callable[[str], Awaitable[bool]]
) -> str:
    """
    Serial number that ``exists`` reports as unused.

    Collisions (two credits for the same project and vintage within one
    millisecond) advance the millisecond component until a free serial is found.
    """
    offset = 0
    while True:
        serial = credit_serial_number(project_id, vintage, at + timedelta(milliseconds=offset))
        if not await exists(serial):
            return serial
        offset += 1
