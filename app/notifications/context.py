"""
Event context and template parameter derivation.

NotificationContext carries whatever the triggering operation knows about
the event. build_params projects it into the flat string map the locale
templates are rendered with. Kind-specific values (spend progress, budget
percentage) come from the DERIVED_PARAMS table; a kind without an entry
gets only the common parameters.

Example:
    context = NotificationContext(
        actor_id=7,
        actor_name="Anna",
        project_id="p-1",
        project_name="Renovation",
        before_spent=Decimal("800"),
        after_spent=Decimal("950"),
        budget_limit=Decimal("1000"),
    )
    build_params(NotificationKind.TRANSACTION_ADDED, context)["amount"]
    # "800.00 (80.0%) → 950.00 (95.0%)"
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import TYPE_CHECKING

from notifications.models import NotificationKind

if TYPE_CHECKING:
    from collections.abc import Callable
    from typing import Any


@dataclass(frozen=True)
class NotificationContext:
    """What is known about the event. Every field is optional."""

    actor_id: int | None = None
    actor_name: str | None = None
    project_id: str | None = None
    project_name: str | None = None
    transaction_id: str | None = None
    transaction_name: str | None = None
    before_spent: Decimal | None = None
    after_spent: Decimal | None = None
    budget_limit: Decimal | None = None
    details: str | None = None
    system_message: str | None = None

    _DECIMAL_FIELDS = ("before_spent", "after_spent", "budget_limit")

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe dict; decimals become strings, unset fields are dropped."""
        data = {}
        for key, value in asdict(self).items():
            if value is None:
                continue
            data[key] = str(value) if isinstance(value, Decimal) else value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> NotificationContext:
        """Rebuild a context from to_dict() output; unknown keys are ignored."""
        data = data or {}
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in data.items():
            if key not in known or value is None:
                continue
            if key in cls._DECIMAL_FIELDS:
                value = _to_decimal(value)
            values[key] = value
        return cls(**values)


def _to_decimal(value) -> Decimal | None:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


# =============================================================================
# Formatting
# =============================================================================


CENTS = Decimal("0.01")
TENTHS = Decimal("0.1")


def _round_half_up(value, step: Decimal) -> Decimal:
    return Decimal(str(value)).quantize(step, rounding=ROUND_HALF_UP)


def format_money(value: Decimal) -> str:
    """Two decimals with a thousands separator: 1234.5 -> "1,234.50". Halves round up."""
    return f"{_round_half_up(value, CENTS):,.2f}"


def percent_of(value: Decimal, limit: Decimal) -> Decimal:
    """Share of limit consumed by value, in percent. A zero limit gives 0."""
    if not limit:
        return Decimal("0")
    return Decimal(value) * 100 / Decimal(limit)


def format_percent(value: Decimal) -> str:
    """One decimal place: 95 -> "95.0". Halves round up."""
    return f"{_round_half_up(value, TENTHS):.1f}"


# =============================================================================
# Parameter derivation
# =============================================================================


def _spend_progress(context: NotificationContext) -> dict[str, str]:
    before, after, limit = context.before_spent, context.after_spent, context.budget_limit
    if before is None or after is None or limit is None:
        return {}
    before_pct = format_percent(percent_of(before, limit))
    after_pct = format_percent(percent_of(after, limit))
    return {
        "amount": (
            f"{format_money(before)} ({before_pct}%) → {format_money(after)} ({after_pct}%)"
        ),
    }


def _budget_percent(context: NotificationContext) -> dict[str, str]:
    if context.after_spent is None or context.budget_limit is None:
        return {}
    return {"percent": format_percent(percent_of(context.after_spent, context.budget_limit))}


DERIVED_PARAMS: dict[str, Callable[[NotificationContext], dict[str, str]]] = {
    NotificationKind.TRANSACTION_ADDED: _spend_progress,
    NotificationKind.TRANSACTION_UPDATED: _spend_progress,
    NotificationKind.BUDGET_THRESHOLD: _budget_percent,
}

COMMON_PARAMS = {
    "projectId": "project_id",
    "projectName": "project_name",
    "actor": "actor_name",
    "txId": "transaction_id",
    "transactionName": "transaction_name",
    "details": "details",
    "message": "system_message",
}


def build_params(kind: str, context: NotificationContext) -> dict[str, str]:
    """
    Flatten a context into template parameters for a kind.

    Missing context fields leave their parameter out; rendering then keeps
    the placeholder as written.
    """
    params = {}
    for name, attr in COMMON_PARAMS.items():
        value = getattr(context, attr)
        if value is not None:
            params[name] = str(value)

    derive = DERIVED_PARAMS.get(kind)
    if derive is not None:
        params.update(derive(context))
    return params


def budget_threshold_crossed(
    after_spent: Decimal, budget_limit: Decimal, threshold_percent: Decimal
) -> bool:
    """
    Whether spending reached the caller's alert threshold.

    The threshold is the caller's policy; this only does the arithmetic.
    A zero or missing limit never crosses.
    """
    if not budget_limit:
        return False
    return percent_of(after_spent, budget_limit) >= Decimal(str(threshold_percent))
