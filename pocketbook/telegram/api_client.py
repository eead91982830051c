from __future__ import annotations

from typing import Any

import httpx


class FinanceApiClient:
    """HTTP client that forwards Telegram entries to the FastAPI backend."""

    def __init__(self, api_base_url: str) -> None:
        self.client = httpx.AsyncClient(
            base_url=api_base_url,
            timeout=httpx.Timeout(timeout=60.0, connect=10.0),
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def ensure_user(self, telegram_id: int, full_name: str | None) -> dict[str, Any]:
        response = await self.client.get(f"/api/users/telegram/{telegram_id}")
        if response.status_code == 404:
            response = await self.client.post(
                "/api/users",
                json={"telegram_id": telegram_id, "full_name": full_name},
            )
        response.raise_for_status()
        return response.json()

    async def create_transaction(self, payload: dict[str, Any]) -> dict[str, Any]:
        response = await self.client.post("/api/transactions", json=payload)
        response.raise_for_status()
        return response.json()

    async def cancel_transaction(self, transaction_id: str, *, user_id: str) -> dict[str, Any]:
        response = await self.client.delete(
            f"/api/transactions/{transaction_id}", params={"user_id": user_id}
        )
        response.raise_for_status()
        return response.json()

    async def list_transactions(
        self,
        *,
        user_id: str,
        limit: int = 10,
        offset: int = 0,
    ) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "user_id": user_id,
            "limit": max(1, min(limit, 100)),
            "offset": max(offset, 0),
        }
        response = await self.client.get("/api/transactions", params=params)
        response.raise_for_status()
        return response.json()

    async def list_pockets(self, *, user_id: str, pocket_type: str | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {"user_id": user_id}
        if pocket_type:
            params["type"] = pocket_type
        response = await self.client.get("/api/pockets", params=params)
        response.raise_for_status()
        return response.json()

    async def dashboard_summary(self, *, user_id: str, time_range: str = "default") -> dict[str, Any]:
        response = await self.client.get(
            "/api/dashboard/summary", params={"user_id": user_id, "range": time_range}
        )
        response.raise_for_status()
        return response.json()
