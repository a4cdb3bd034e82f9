"""
Domain package for ledger-bench.

Exports the record models and the pure helpers (id encoding, batch
partitioning) shared by the backends and the orchestrator.
"""

from ledger_bench.domain.batching import partition
from ledger_bench.domain.identifiers import (
    account_ids,
    category_code,
    decode_id,
    encode_id,
    run_base,
    to_uint128,
)
from ledger_bench.domain.models import AccountRow, LedgerAccount

__all__ = [
    "AccountRow",
    "LedgerAccount",
    "account_ids",
    "category_code",
    "decode_id",
    "encode_id",
    "partition",
    "run_base",
    "to_uint128",
]
