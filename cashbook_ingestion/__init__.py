"""
cashbook_ingestion -- fee, salary and cash book file imports.

Adapters read CSV / XLSX files into row dicts, the domain layer folds rows
into canonical records, and ImportService writes them through the kernel's
BulkImportService.
"""
