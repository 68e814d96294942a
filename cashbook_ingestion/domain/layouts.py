"""
cashbook_ingestion.domain.layouts -- versioned column layouts of the import files.

ZERO I/O.  A layout names the header columns a source file carries and the
subset that must be present for the file to be read as that layout.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from cashbook_kernel.exceptions import UnknownColumnLayoutError


class LayoutKind(str, Enum):
    FEE_COLLECTION = "fee_collection"
    SALARY_DEDUCTION = "salary_deduction"
    CASH_BOOK_REPORT = "cash_book_report"


@dataclass(frozen=True)
class ColumnLayout:
    """A fixed, versioned header set."""

    name: str
    kind: LayoutKind
    version: int
    columns: tuple[str, ...]
    required: tuple[str, ...]

    def matches(self, columns: Iterable[str]) -> bool:
        present = {c.strip() for c in columns}
        return all(r in present for r in self.required)

    def missing(self, columns: Iterable[str]) -> tuple[str, ...]:
        present = {c.strip() for c in columns}
        return tuple(r for r in self.required if r not in present)


FEE_COLLECTION_V1 = ColumnLayout(
    name="FEE_COLLECTION_V1",
    kind=LayoutKind.FEE_COLLECTION,
    version=1,
    columns=(
        "Sl No", "Student Name", "Father Name", "Year", "Course", "Reg No",
        "Cat", "Adm Type", "Adm Cat", "Date", "Rpt",
        "Adm", "Tution", "Lib", "RR", "Sports", "Lab", "DVP", "Mag", "ID",
        "Ass", "SWF", "TWF", "NSS", "Fine",
        "Acdmc Year", "In/Out", "Remarks",
    ),
    required=("Date", "Rpt"),
)

SALARY_DEDUCTION_V1 = ColumnLayout(
    name="SALARY_DEDUCTION_V1",
    kind=LayoutKind.SALARY_DEDUCTION,
    version=1,
    columns=(
        "Date", "Month", "Year", "Gross_Salary",
        "IT_Deduction", "PT_Deduction", "GSLIC_Deduction", "LIC_Deduction",
        "FBF_Deduction", "Total_Deductions",
    ),
    required=("Date", "Month", "Year", "Gross_Salary"),
)

CASH_BOOK_REPORT_V1 = ColumnLayout(
    name="CASH_BOOK_REPORT_V1",
    kind=LayoutKind.CASH_BOOK_REPORT,
    version=1,
    columns=(
        "Sl No", "R.Date", "R.Chq", "R.Amount", "R.Heads", "R.Notes",
        "P.Date", "P.Chq", "P.Amount", "P.Heads", "P.Notes",
    ),
    required=(
        "R.Date", "R.Chq", "R.Amount", "R.Heads", "R.Notes",
        "P.Date", "P.Chq", "P.Amount", "P.Heads", "P.Notes",
    ),
)

LAYOUTS: tuple[ColumnLayout, ...] = (
    CASH_BOOK_REPORT_V1,
    SALARY_DEDUCTION_V1,
    FEE_COLLECTION_V1,
)

LAYOUTS_BY_NAME = {layout.name: layout for layout in LAYOUTS}


def detect_layout(columns: Iterable[str]) -> ColumnLayout:
    """
    Pick the layout whose required columns are all present.

    When several qualify, the one with the most required columns wins
    (a salary sheet also carries "Date").

    Raises:
        UnknownColumnLayoutError: no layout matches.
    """
    columns = tuple(columns)
    candidates = [layout for layout in LAYOUTS if layout.matches(columns)]
    if not candidates:
        raise UnknownColumnLayoutError(columns)
    return max(candidates, key=lambda layout: len(layout.required))


def header_keywords() -> frozenset[str]:
    """Every known column name, lower-cased, for spreadsheet header detection."""
    return frozenset(c.lower() for layout in LAYOUTS for c in layout.columns)
