from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from ledger_support import NOW, LedgerTestCase

from pocketbook.models import DailySummary, PocketType, TransactionType
from pocketbook.schemas.dashboard import TimeRange
from pocketbook.schemas.transaction import TransactionCreate
from pocketbook.services import dashboard, transactions

TODAY = date(2026, 3, 15)


def _entry(tx_type: str, amount: str, name: str = "Uncategorized", category_id: str | None = None) -> dict:
    return {"type": tx_type, "category_id": category_id, "category_name": name, "amount": amount}


class ResolveRangeTests(LedgerTestCase):
    async def test_window_starts(self) -> None:
        self.assertEqual(dashboard.resolve_range(TimeRange.SEVEN_DAYS, TODAY), date(2026, 3, 8))
        self.assertEqual(dashboard.resolve_range(TimeRange.ONE_MONTH, TODAY), date(2026, 3, 1))
        self.assertEqual(dashboard.resolve_range(TimeRange.THREE_MONTHS, TODAY), date(2025, 12, 1))
        self.assertEqual(dashboard.resolve_range(TimeRange.DEFAULT, TODAY), date(2026, 2, 13))


class HybridDashboardTests(LedgerTestCase):
    async def asyncSetUp(self) -> None:
        await super().asyncSetUp()
        self.food_id = "7a0f5e43-3a59-4b88-9a8e-5f1f2a0c1d11"
        self.session.add_all(
            [
                DailySummary(
                    user_id=self.user.id,
                    date=TODAY - timedelta(days=2),
                    total_income=Decimal("100"),
                    total_expense=Decimal("20"),
                    category_breakdown=[
                        _entry("income", "100.00", "Salary", "1d7e3c55-2b0f-4f0e-8d7a-3e5b8f9a2c01"),
                        _entry("expense", "20.00", "Food", self.food_id),
                    ],
                ),
                DailySummary(
                    user_id=self.user.id,
                    date=TODAY - timedelta(days=1),
                    total_income=Decimal("50"),
                    total_expense=Decimal("0"),
                    category_breakdown=[_entry("income", "50.00")],
                ),
                DailySummary(
                    user_id=self.user.id,
                    date=TODAY - timedelta(days=20),
                    total_income=Decimal("999"),
                    total_expense=Decimal("999"),
                    category_breakdown=[_entry("income", "999.00"), _entry("expense", "999.00")],
                ),
            ]
        )
        await self.session.commit()
        self.pocket = await self.make_pocket("Main", balance="100", pocket_type=PocketType.MAIN)
        await transactions.create_transaction(
            self.session,
            TransactionCreate(
                user_id=self.user.id,
                type=TransactionType.EXPENSE,
                amount=Decimal("30"),
                pocket_from_id=self.pocket.id,
            ),
            now=NOW,
        )

    async def test_summary_adds_live_today_to_stored_days(self) -> None:
        summary = await dashboard.get_summary(self.session, self.user.id, TimeRange.SEVEN_DAYS, now=NOW)

        self.assertEqual(summary.start, date(2026, 3, 8))
        self.assertEqual(summary.end, TODAY)
        self.assertEqual(summary.period_income, Decimal("150.00"))
        self.assertEqual(summary.period_expense, Decimal("50.00"))
        self.assertEqual(summary.period_net, Decimal("100.00"))
        self.assertEqual(summary.total_net_worth, Decimal("70.00"))

    async def test_longer_range_includes_older_summaries(self) -> None:
        summary = await dashboard.get_summary(self.session, self.user.id, TimeRange.DEFAULT, now=NOW)

        self.assertEqual(summary.period_income, Decimal("1149.00"))
        self.assertEqual(summary.period_expense, Decimal("1049.00"))

    async def test_live_window_ignores_later_transactions(self) -> None:
        summary = await dashboard.get_summary(
            self.session, self.user.id, TimeRange.SEVEN_DAYS, now=NOW.replace(hour=0, minute=0)
        )

        self.assertEqual(summary.period_expense, Decimal("20.00"))

    async def test_charts_fill_every_day_and_append_today(self) -> None:
        charts = await dashboard.get_charts(self.session, self.user.id, TimeRange.SEVEN_DAYS, now=NOW)

        self.assertEqual(len(charts.cash_flow), 8)
        self.assertEqual(charts.cash_flow[0].date, date(2026, 3, 8))
        self.assertEqual(charts.cash_flow[0].net, Decimal("0.00"))
        self.assertEqual(charts.cash_flow[-2].income, Decimal("50.00"))
        self.assertEqual(charts.cash_flow[-1].date, TODAY)
        self.assertEqual(charts.cash_flow[-1].expense, Decimal("30.00"))
        self.assertEqual(
            sum((point.income for point in charts.cash_flow), Decimal("0")),
            Decimal("150.00"),
        )

    async def test_category_charts_merge_history_with_today(self) -> None:
        charts = await dashboard.get_charts(self.session, self.user.id, TimeRange.SEVEN_DAYS, now=NOW)

        income = [(entry.category_name, entry.amount, entry.percentage) for entry in charts.income_categories]
        self.assertEqual(
            income,
            [("Salary", Decimal("100.00"), Decimal("66.67")), ("Uncategorized", Decimal("50.00"), Decimal("33.33"))],
        )
        expense = {entry.category_name: entry.amount for entry in charts.expense_categories}
        self.assertEqual(expense, {"Uncategorized": Decimal("30.00"), "Food": Decimal("20.00")})

    async def test_other_user_sees_empty_dashboard(self) -> None:
        stranger = await self.make_user()

        summary = await dashboard.get_summary(self.session, stranger.id, TimeRange.SEVEN_DAYS, now=NOW)
        charts = await dashboard.get_charts(self.session, stranger.id, TimeRange.SEVEN_DAYS, now=NOW)

        self.assertEqual(summary.period_net, Decimal("0.00"))
        self.assertEqual(summary.total_net_worth, Decimal("0.00"))
        self.assertEqual(charts.income_categories, [])
        self.assertTrue(all(point.net == 0 for point in charts.cash_flow))
