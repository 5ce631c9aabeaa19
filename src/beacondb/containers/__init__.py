"""
The record shapes persisted by the beacon chain database.

All records are strict, frozen pydantic models.
"""

from .block import Block
from .execution_payload import ExecutionPayload, Withdrawal
from .genesis import Genesis

__all__ = [
    "Block",
    "ExecutionPayload",
    "Genesis",
    "Withdrawal",
]
