from __future__ import annotations

from decimal import Decimal, InvalidOperation

import httpx


def parse_amount_token(raw: str) -> Decimal:
    try:
        value = Decimal(raw.replace(",", ""))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Invalid amount '{raw}'.") from exc
    if not value.is_finite() or value <= 0:
        raise ValueError("Amount must be greater than zero.")
    amount = value.quantize(Decimal("0.01"))
    if amount != value:
        raise ValueError("Amount cannot have more than two decimal places.")
    return amount


def format_amount_for_display(amount: str | Decimal, currency: str) -> str:
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return f"{amount} {currency}"

    currency_upper = currency.upper()

    def trimmed(val: Decimal, places: int = 2) -> str:
        quantized = val.quantize(Decimal(1).scaleb(-places))
        s = f"{quantized:,}"
        if "." in s:
            s = s.rstrip("0").rstrip(".")
        return s

    if currency_upper == "IDR" and abs(value) >= Decimal("1000"):
        thousands = (value / Decimal("1000")).quantize(Decimal("1"))
        return f"{thousands:,} K {currency_upper}"
    return f"{trimmed(value)} {currency_upper}"


def describe_api_error(exc: httpx.HTTPStatusError) -> str:
    """Pull the ledger error message out of an API error response."""
    try:
        body = exc.response.json()
    except ValueError:
        return exc.response.text
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if body.get("detail"):
            return str(body["detail"])
    return exc.response.text
