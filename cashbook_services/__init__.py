"""
cashbook_services -- read-side reporting over the record store.

Responsibility:
    Cash book pages, search-filtered books, ledger summaries and detail,
    dashboard counters and CSV rendering.  ``CachedRecordStore`` sits in
    front of the store so repeated views of one filter query it once.

Architecture position:
    Services -- depends on cashbook_kernel; nothing in the kernel imports
    from here.
"""

from cashbook_services.export_service import (
    export_file_name,
    render_cash_book_csv,
    render_ledger_summary_csv,
    render_transactions_csv,
)
from cashbook_services.query_cache import CachedRecordStore
from cashbook_services.report_service import (
    CashBookPage,
    CashBookReportService,
    DashboardSummary,
    LedgerDetail,
    LedgerLine,
    LedgerSummary,
    matches_search,
)

__all__ = [
    "CachedRecordStore",
    "CashBookPage",
    "CashBookReportService",
    "DashboardSummary",
    "LedgerDetail",
    "LedgerLine",
    "LedgerSummary",
    "export_file_name",
    "matches_search",
    "render_cash_book_csv",
    "render_ledger_summary_csv",
    "render_transactions_csv",
]
