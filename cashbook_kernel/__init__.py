"""
cashbook_kernel -- Ledger balance and report aggregation engine.

Pure domain logic (fiscal years, ordering, balances, date buckets, duplicate
detection, validation) lives in ``cashbook_kernel.domain`` and performs no I/O.
Persistence and write orchestration live in ``cashbook_kernel.db``,
``cashbook_kernel.models`` and ``cashbook_kernel.services``.
"""
