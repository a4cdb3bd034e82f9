"""
Domain models for ledger-bench.

`AccountRow` mirrors the `accounts` table used by the relational and ledger
backends. `LedgerAccount` is the backend-neutral view of an accounting-engine
account as the benchmark creates and reads it.
"""
from __future__ import annotations

from pydantic import BaseModel, Field

USER_DATA_FACTOR = 10
LEDGER_TAG = 1


class AccountRow(BaseModel):
    """
    Representation of a single row in the `accounts` table.
    """

    id: int = Field(..., ge=0, description="Primary key, sequential within a run.")
    user_data: int = Field(..., description="Auxiliary value, always id * 10.")
    timestamp: int = Field(0, description="Unix time (seconds) at insert.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }

    @classmethod
    def for_index(cls, index: int, timestamp: int) -> "AccountRow":
        return cls(id=index, user_data=index * USER_DATA_FACTOR, timestamp=timestamp)


class LedgerAccount(BaseModel):
    """
    An account in the accounting engine: 128-bit id, ledger tag and 16-bit code.
    """

    id: int = Field(..., ge=0, lt=2**128, description="128-bit account identifier.")
    ledger: int = Field(LEDGER_TAG, description="Grouping tag shared by all benchmark accounts.")
    code: int = Field(..., ge=0, lt=2**16, description="Category code derived from the id.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "arbitrary_types_allowed": False,
    }


__all__ = ["AccountRow", "LEDGER_TAG", "LedgerAccount", "USER_DATA_FACTOR"]
