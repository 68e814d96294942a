"""
Tests for the date-bucketed cash book builder.

Covers bucket balances, the opening balance fold-in, the carried-in balance
used for pages and search windows, and the two row views.
"""

from datetime import UTC, date, datetime
from decimal import Decimal

from hypothesis import given
from hypothesis import strategies as st

from cashbook_kernel.domain.cash_book import (
    build_cash_book,
    build_date_buckets,
    list_rows,
    side_by_side_rows,
)
from cashbook_kernel.domain.ordering import net_balance, order_records
from cashbook_kernel.domain.records import CashRecord, EntryKind
from tests.builders import payment, receipt

D1 = date(2025, 4, 1)
D2 = date(2025, 4, 2)
D3 = date(2025, 4, 3)
T0 = datetime(2025, 4, 1, 9, 0, tzinfo=UTC)


def example_records():
    return order_records(
        [
            receipt(D1, 100, "Fees", created_at=T0),
            payment(D2, 40, "Rent", created_at=T0),
            receipt(D2, 20, "Fees", created_at=T0),
        ]
    )


class TestBuildDateBuckets:
    def test_example_scenario(self):
        buckets = build_date_buckets(example_records())

        assert [b.date for b in buckets] == [D1, D2]
        first, second = buckets
        assert (first.opening_balance, first.total_receipts, first.total_payments, first.closing_balance) == (
            Decimal("0"),
            Decimal("100"),
            Decimal("0"),
            Decimal("100"),
        )
        assert (second.opening_balance, second.total_receipts, second.total_payments, second.closing_balance) == (
            Decimal("100"),
            Decimal("20"),
            Decimal("40"),
            Decimal("80"),
        )

    def test_empty_input(self):
        assert build_date_buckets([]) == []
        report = build_cash_book([], Decimal("55"))
        assert report.is_empty
        assert report.closing_balance == Decimal("55")

    def test_carried_in_balance_opens_first_bucket(self):
        buckets = build_date_buckets(example_records(), Decimal("500"))
        assert buckets[0].opening_balance == Decimal("500")
        assert buckets[-1].closing_balance == Decimal("580")

    def test_within_date_order_is_preserved(self):
        a = receipt(D1, 1, "Govt Salary Grants", created_at=T0)
        b = receipt(D1, 2, "I Tax", created_at=T0)
        c = payment(D1, 3, "Govt Salary Account", created_at=T0)
        d = payment(D1, 4, "Receivable Account", created_at=T0)
        (bucket,) = build_date_buckets(order_records([d, c, b, a]))
        assert bucket.receipts == (a, b)
        assert bucket.payments == (c, d)

    def test_only_first_bucket_folds_opening_balance(self):
        buckets = build_date_buckets(example_records(), Decimal("10"))
        first, second = buckets
        assert first.opening_folded
        assert first.displayed_receipts_total == Decimal("110")
        assert not first.shows_opening_line
        assert not second.opening_folded
        assert second.displayed_receipts_total == Decimal("20")
        assert second.shows_opening_line

    def test_fold_can_be_disabled(self):
        buckets = build_date_buckets(example_records(), fold_opening_balance=False)
        assert not any(b.opening_folded for b in buckets)


class TestPagination:
    @given(
        st.lists(
            st.builds(
                CashRecord,
                date=st.dates(min_value=D1, max_value=date(2025, 4, 10)),
                kind=st.sampled_from(EntryKind),
                amount=st.decimals(min_value=Decimal("0.01"), max_value=Decimal("9999"), places=2),
                category=st.sampled_from(["Adm Fee", "Rent", "Misc"]),
                created_at=st.datetimes(
                    min_value=datetime(2025, 4, 1), max_value=datetime(2025, 4, 30), timezones=st.just(UTC)
                ),
                id=st.uuids(),
            ),
            min_size=1,
            max_size=30,
            unique_by=lambda r: r.id,
        ),
        st.data(),
    )
    def test_second_page_matches_unsplit_book(self, records, data):
        """
        Page 2 built with the closing balance of page 1 as carried-in closes
        every date exactly where the unsplit book does.
        """
        ordered = order_records(records)
        split = data.draw(st.integers(min_value=0, max_value=len(ordered)))
        page_one, page_two = ordered[:split], ordered[split:]

        full = {b.date: b.closing_balance for b in build_date_buckets(ordered)}
        paged = build_date_buckets(page_two, carried_in_balance=net_balance(page_one))

        for bucket in paged:
            assert bucket.closing_balance == full[bucket.date]
        if paged:
            assert paged[-1].closing_balance == net_balance(ordered)


class TestViews:
    def test_side_by_side_pads_shorter_side(self):
        records = order_records(
            [
                receipt(D1, 1, "A", created_at=T0),
                receipt(D1, 2, "B", created_at=T0),
                payment(D1, 3, "C", created_at=T0),
                payment(D3, 4, "D", created_at=T0),
            ]
        )
        rows = list(side_by_side_rows(build_date_buckets(records)))

        assert [r.sl_no for r in rows] == [1, 2, 3]
        assert rows[0].receipt.category == "A" and rows[0].payment.category == "C"
        assert rows[1].receipt.category == "B" and rows[1].payment is None
        assert rows[2].receipt is None and rows[2].payment.category == "D"

    def test_list_rows_carry_running_balance(self):
        rows = list(list_rows(build_date_buckets(example_records(), Decimal("5"))))
        assert [r.balance for r in rows] == [Decimal("105"), Decimal("125"), Decimal("85")]
        assert [r.record.kind for r in rows] == [EntryKind.RECEIPT, EntryKind.RECEIPT, EntryKind.PAYMENT]

    def test_report_totals(self):
        report = build_cash_book(example_records())
        assert report.total_receipts == Decimal("120")
        assert report.total_payments == Decimal("40")
        assert report.closing_balance == Decimal("80")
