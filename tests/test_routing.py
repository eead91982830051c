from __future__ import annotations

import unittest
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from uuid import UUID, uuid4
from unittest.mock import ANY, AsyncMock, patch

from fastapi.testclient import TestClient

from pocketbook.db import get_db
from pocketbook.main import app
from pocketbook.schemas.dashboard import TimeRange
from pocketbook.services.errors import (
    ForbiddenError,
    InternalError,
    InvalidShapeError,
    NotFoundError,
    TransientError,
)


def build_transaction_payload(*, user_id: UUID, transaction_id: UUID | None = None) -> dict:
    """Create a dictionary shaped like a Transaction ORM instance."""
    now = datetime.now(timezone.utc)
    return {
        "id": transaction_id or uuid4(),
        "user_id": user_id,
        "type": "expense",
        "amount": Decimal("12.34"),
        "currency": "IDR",
        "date": now,
        "pocket_from_id": uuid4(),
        "pocket_to_id": None,
        "user_platform_from_id": None,
        "user_platform_to_id": None,
        "category_id": None,
        "note": "Groceries",
        "ref": None,
        "created_at": now,
        "updated_at": now,
    }


def build_user_payload(*, user_id: UUID | None = None) -> dict:
    """Create a dictionary shaped like a User ORM instance."""
    now = datetime.now(timezone.utc)
    return {
        "id": user_id or uuid4(),
        "telegram_id": 123456,
        "full_name": "Test User",
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }


def build_pocket_payload(*, user_id: UUID) -> dict:
    now = datetime.now(timezone.utc)
    return {
        "id": uuid4(),
        "user_id": user_id,
        "name": "Main Pocket",
        "type": "main",
        "category_id": None,
        "balance": Decimal("250.00"),
        "target_balance": None,
        "is_default": True,
        "is_active": True,
        "is_locked": False,
        "last_use_at": None,
        "created_at": now,
        "updated_at": now,
    }


class RoutingTests(unittest.TestCase):
    """Ensure FastAPI routers respond and delegate as expected."""

    _lifecycle = {"init_db", "init_bot", "shutdown_bot"}

    @classmethod
    def setUpClass(cls) -> None:
        cls._patchers = {
            "init_db": patch("pocketbook.main.init_db", new=AsyncMock()),
            "init_bot": patch("pocketbook.main.init_bot", new=AsyncMock()),
            "shutdown_bot": patch("pocketbook.main.shutdown_bot", new=AsyncMock()),
            "start_scheduler": patch("pocketbook.main.start_scheduler"),
            "shutdown_scheduler": patch("pocketbook.main.shutdown_scheduler"),
            "create_transaction": patch("pocketbook.api.transactions.create_transaction", new_callable=AsyncMock),
            "list_transactions": patch("pocketbook.api.transactions.list_transactions", new_callable=AsyncMock),
            "get_transaction": patch("pocketbook.api.transactions.get_transaction", new_callable=AsyncMock),
            "cancel_transaction": patch("pocketbook.api.transactions.cancel_transaction", new_callable=AsyncMock),
            "get_summary": patch("pocketbook.api.dashboard.get_summary", new_callable=AsyncMock),
            "get_charts": patch("pocketbook.api.dashboard.get_charts", new_callable=AsyncMock),
            "backfill": patch("pocketbook.api.daily_summaries.backfill_daily_summaries", new_callable=AsyncMock),
            "list_pockets": patch("pocketbook.api.pockets.list_pockets", new_callable=AsyncMock),
            "delete_pocket": patch("pocketbook.api.pockets.delete_pocket", new_callable=AsyncMock),
            "list_allocation_logs": patch(
                "pocketbook.api.allocations.list_allocation_logs", new_callable=AsyncMock
            ),
            "create_user": patch("pocketbook.api.users.create_user", new_callable=AsyncMock),
            "list_users": patch("pocketbook.api.users.list_users", new_callable=AsyncMock),
            "get_user": patch("pocketbook.api.users.get_user", new_callable=AsyncMock),
            "get_user_by_telegram_id": patch(
                "pocketbook.api.users.get_user_by_telegram_id", new_callable=AsyncMock
            ),
            "handle_update": patch("pocketbook.api.telegram.handle_update", new_callable=AsyncMock),
            "bot_is_running": patch("pocketbook.api.telegram.bot_is_running", return_value=True),
            "telegram_settings": patch(
                "pocketbook.api.telegram.get_settings",
                return_value=SimpleNamespace(telegram_webhook_secret="secret123"),
            ),
        }
        cls.mocks = {name: patcher.start() for name, patcher in cls._patchers.items()}

        class _DummySession:
            async def refresh(self, *_args, **_kwargs):
                return None

        cls._dummy_session = _DummySession()

        async def _override_db():
            yield cls._dummy_session

        app.dependency_overrides[get_db] = _override_db

        cls._client_ctx = TestClient(app)
        cls.client = cls._client_ctx.__enter__()

    @classmethod
    def tearDownClass(cls) -> None:
        cls._client_ctx.__exit__(None, None, None)
        app.dependency_overrides.pop(get_db, None)
        for patcher in cls._patchers.values():
            patcher.stop()

    def setUp(self) -> None:
        for name, mock in self.mocks.items():
            if name not in self._lifecycle and isinstance(mock, AsyncMock):
                mock.reset_mock(return_value=True, side_effect=True)

        self.user = build_user_payload()
        self.transaction = build_transaction_payload(user_id=self.user["id"])
        self.pocket = build_pocket_payload(user_id=self.user["id"])

        self.mocks["create_transaction"].return_value = {"transaction": self.transaction, "distribution": None}
        self.mocks["list_transactions"].return_value = [self.transaction]
        self.mocks["get_transaction"].return_value = self.transaction
        self.mocks["cancel_transaction"].return_value = self.transaction
        self.mocks["list_pockets"].return_value = [self.pocket]
        self.mocks["delete_pocket"].return_value = None
        self.mocks["list_allocation_logs"].return_value = []
        self.mocks["create_user"].return_value = self.user
        self.mocks["list_users"].return_value = [self.user]
        self.mocks["get_user"].return_value = self.user
        self.mocks["get_user_by_telegram_id"].return_value = self.user

    def test_healthcheck(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_lifespan_starts_and_stops_services(self) -> None:
        self.mocks["init_db"].assert_awaited()
        self.mocks["start_scheduler"].assert_called()
        self.mocks["init_bot"].assert_awaited()

    def test_create_transaction_route(self) -> None:
        payload = {
            "type": "EXPENSE",
            "amount": "12.34",
            "currency": "IDR",
            "pocket_from_id": str(self.transaction["pocket_from_id"]),
            "note": "Groceries",
            "user_id": str(self.user["id"]),
        }
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 201)
        self.mocks["create_transaction"].assert_awaited_once()
        sent = self.mocks["create_transaction"].await_args.args[1]
        self.assertEqual(sent.type.value, "expense")
        self.assertEqual(sent.amount, Decimal("12.34"))
        body = response.json()
        self.assertEqual(body["transaction"]["id"], str(self.transaction["id"]))
        self.assertIsNone(body["distribution"])

    def test_create_transaction_invalid_shape(self) -> None:
        self.mocks["create_transaction"].side_effect = InvalidShapeError("Income needs a destination pocket or platform.")
        payload = {"type": "income", "amount": "5", "user_id": str(self.user["id"])}
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {"error": {"code": "INVALID_INPUT", "message": "Income needs a destination pocket or platform."}},
        )

    def test_create_transaction_rejects_unknown_type(self) -> None:
        payload = {"type": "loan", "amount": "5", "user_id": str(self.user["id"])}
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 422)
        self.mocks["create_transaction"].assert_not_awaited()

    def test_create_transaction_rejects_sub_cent_amount(self) -> None:
        payload = {
            "type": "expense",
            "amount": "10.005",
            "pocket_from_id": str(self.transaction["pocket_from_id"]),
            "user_id": str(self.user["id"]),
        }
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 422)
        self.mocks["create_transaction"].assert_not_awaited()

    def test_locked_pocket_maps_to_forbidden(self) -> None:
        self.mocks["create_transaction"].side_effect = ForbiddenError("Pocket 'Reserve' is locked.")
        payload = {
            "type": "expense",
            "amount": "5",
            "pocket_from_id": str(uuid4()),
            "user_id": str(self.user["id"]),
        }
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"]["code"], "FORBIDDEN")

    def test_transient_error_is_retryable(self) -> None:
        self.mocks["create_transaction"].side_effect = TransientError()
        payload = {"type": "income", "amount": "5", "pocket_to_id": str(uuid4()), "user_id": str(self.user["id"])}
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 503)
        self.assertTrue(response.json()["error"]["retryable"])

    def test_internal_error_hides_details(self) -> None:
        self.mocks["create_transaction"].side_effect = InternalError("allocation 42 overshot")
        payload = {"type": "income", "amount": "5", "pocket_to_id": str(uuid4()), "user_id": str(self.user["id"])}
        response = self.client.post("/api/transactions", json=payload)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(), {"error": {"code": "INTERNAL_SERVER_ERROR", "message": "Internal server error."}}
        )

    def test_list_transactions_route(self) -> None:
        response = self.client.get(f"/api/transactions?user_id={self.user['id']}&limit=10&transaction_type=expense")
        self.assertEqual(response.status_code, 200)
        self.mocks["list_transactions"].assert_awaited_once()
        kwargs = self.mocks["list_transactions"].await_args.kwargs
        self.assertEqual(kwargs["limit"], 10)
        self.assertEqual(kwargs["transaction_type"].value, "expense")
        body = response.json()
        self.assertEqual(len(body), 1)
        self.assertEqual(body[0]["id"], str(self.transaction["id"]))

    def test_list_transactions_limit_is_bounded(self) -> None:
        response = self.client.get(f"/api/transactions?user_id={self.user['id']}&limit=500")
        self.assertEqual(response.status_code, 422)

    def test_get_transaction_route(self) -> None:
        tx_id = self.transaction["id"]
        response = self.client.get(f"/api/transactions/{tx_id}?user_id={self.user['id']}")
        self.assertEqual(response.status_code, 200)
        self.mocks["get_transaction"].assert_awaited_once_with(ANY, self.user["id"], tx_id)
        self.assertEqual(response.json()["id"], str(tx_id))

    def test_get_transaction_not_found(self) -> None:
        self.mocks["get_transaction"].side_effect = NotFoundError("Transaction not found.")
        response = self.client.get(f"/api/transactions/{uuid4()}?user_id={self.user['id']}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["message"], "Transaction not found.")

    def test_cancel_transaction_route(self) -> None:
        tx_id = self.transaction["id"]
        response = self.client.delete(f"/api/transactions/{tx_id}?user_id={self.user['id']}")
        self.assertEqual(response.status_code, 200)
        self.mocks["cancel_transaction"].assert_awaited_once_with(ANY, self.user["id"], tx_id)

    def test_dashboard_summary_route(self) -> None:
        self.mocks["get_summary"].return_value = {
            "range": "7d",
            "start": date(2026, 3, 8),
            "end": date(2026, 3, 15),
            "period_income": Decimal("150.00"),
            "period_expense": Decimal("50.00"),
            "period_net": Decimal("100.00"),
            "total_net_worth": Decimal("70.00"),
        }
        response = self.client.get(f"/api/dashboard/summary?user_id={self.user['id']}&range=7d")
        self.assertEqual(response.status_code, 200)
        self.mocks["get_summary"].assert_awaited_once_with(ANY, self.user["id"], TimeRange.SEVEN_DAYS)
        self.assertEqual(response.json()["period_net"], "100.00")

    def test_dashboard_rejects_unknown_range(self) -> None:
        response = self.client.get(f"/api/dashboard/summary?user_id={self.user['id']}&range=1y")
        self.assertEqual(response.status_code, 422)

    def test_dashboard_charts_route(self) -> None:
        self.mocks["get_charts"].return_value = {
            "range": "default",
            "start": date(2026, 2, 13),
            "end": date(2026, 3, 15),
            "cash_flow": [],
            "income_categories": [],
            "expense_categories": [],
        }
        response = self.client.get(f"/api/dashboard/charts?user_id={self.user['id']}")
        self.assertEqual(response.status_code, 200)
        self.mocks["get_charts"].assert_awaited_once_with(ANY, self.user["id"], TimeRange.DEFAULT)

    def test_rebuild_daily_summaries_route(self) -> None:
        self.mocks["backfill"].return_value = [
            {"date": date(2026, 3, 14), "processed": 3, "failed_user_ids": [], "timed_out": False}
        ]
        response = self.client.post("/api/daily-summaries/rebuild", json={"start": "2026-03-14"})
        self.assertEqual(response.status_code, 200)
        self.mocks["backfill"].assert_awaited_once_with(ANY, date(2026, 3, 14), None)
        self.assertEqual(response.json()[0]["processed"], 3)

    def test_list_pockets_route(self) -> None:
        response = self.client.get(f"/api/pockets?user_id={self.user['id']}&type=main")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.mocks["list_pockets"].await_args.kwargs["pocket_type"].value, "main")
        self.assertEqual(response.json()[0]["balance"], "250.00")

    def test_delete_main_pocket_is_forbidden(self) -> None:
        self.mocks["delete_pocket"].side_effect = ForbiddenError("The main pocket cannot be deleted.")
        response = self.client.delete(f"/api/pockets/{self.pocket['id']}?user_id={self.user['id']}")
        self.assertEqual(response.status_code, 403)

    def test_allocation_logs_route_is_not_shadowed(self) -> None:
        response = self.client.get(f"/api/allocations/logs?user_id={self.user['id']}")
        self.assertEqual(response.status_code, 200)
        self.mocks["list_allocation_logs"].assert_awaited_once()

    def test_telegram_webhook_route(self) -> None:
        payload = {"update_id": 1}
        response = self.client.post("/api/telegram/webhook/secret123", json=payload)
        self.assertEqual(response.status_code, 204)
        self.mocks["handle_update"].assert_awaited_once_with(payload)

    def test_telegram_webhook_bad_secret(self) -> None:
        response = self.client.post("/api/telegram/webhook/wrong", json={"update_id": 1})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": {"code": "NOT_FOUND", "message": "Not found."}})
        self.mocks["handle_update"].assert_not_awaited()

    def test_telegram_webhook_when_bot_is_not_running(self) -> None:
        self.mocks["bot_is_running"].return_value = False
        self.addCleanup(setattr, self.mocks["bot_is_running"], "return_value", True)

        response = self.client.post("/api/telegram/webhook/secret123", json={"update_id": 1})
        self.assertEqual(response.status_code, 503)
        self.assertEqual(
            response.json(),
            {
                "error": {
                    "code": "TRANSIENT",
                    "message": "The Telegram bot is not running.",
                    "retryable": True,
                }
            },
        )
        self.mocks["handle_update"].assert_not_awaited()

    def test_telegram_webhook_rejects_non_object_body(self) -> None:
        response = self.client.post("/api/telegram/webhook/secret123", json=[1, 2])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"]["code"], "INVALID_INPUT")
        self.mocks["handle_update"].assert_not_awaited()

    def test_create_user_route(self) -> None:
        payload = {"telegram_id": 123456, "full_name": "Test User"}
        response = self.client.post("/api/users", json=payload)
        self.assertEqual(response.status_code, 201)
        self.mocks["create_user"].assert_awaited_once()
        self.assertEqual(response.json()["id"], str(self.user["id"]))

    def test_list_users_route(self) -> None:
        response = self.client.get("/api/users")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(len(body), 1)
        self.assertEqual(body[0]["telegram_id"], self.user["telegram_id"])

    def test_get_user_route(self) -> None:
        user_id = self.user["id"]
        response = self.client.get(f"/api/users/{user_id}")
        self.assertEqual(response.status_code, 200)
        self.mocks["get_user"].assert_awaited_once_with(ANY, user_id)

    def test_get_user_not_found(self) -> None:
        self.mocks["get_user"].side_effect = NotFoundError("User not found.")
        response = self.client.get(f"/api/users/{uuid4()}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["error"]["code"], "NOT_FOUND")

    def test_get_user_by_telegram_route(self) -> None:
        response = self.client.get("/api/users/telegram/123456")
        self.assertEqual(response.status_code, 200)
        self.mocks["get_user_by_telegram_id"].assert_awaited_once_with(ANY, 123456)

    def test_get_user_by_telegram_not_found(self) -> None:
        self.mocks["get_user_by_telegram_id"].return_value = None
        response = self.client.get("/api/users/telegram/999999")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["detail"], "User not found")


if __name__ == "__main__":
    unittest.main()
