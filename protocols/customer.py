"""Customer identity protocols.

The "logged-in customer" pointer lives on the client device, keyed by
restaurant. It is a convenience cache, not authentication: whatever it
returns is re-read from the database before use and balances are never
taken from it.
"""

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class CustomerInfo:
    """Read-only snapshot of a customer for the wallet view."""

    id: str
    restaurant_id: str
    name: str
    email: str
    total_points: int
    lifetime_points: int
    current_tier: str
    tier_progress: int
    next_tier: str | None = None
    points_to_next_tier: int = 0
    points_value: str = "0.00"


@runtime_checkable
class CustomerPointerStore(Protocol):
    """Device-scoped storage of the current customer id per restaurant."""

    def get(self, restaurant_id: str) -> str | None:
        """Return the stored customer id, if any."""
        ...

    def set(self, restaurant_id: str, customer_id: str) -> None:
        ...

    def clear(self, restaurant_id: str) -> None:
        ...


class InMemoryPointerStore:
    """Dict-backed CustomerPointerStore for tests and single-process use."""

    def __init__(self):
        self._pointers: dict[str, str] = {}

    def get(self, restaurant_id: str) -> str | None:
        return self._pointers.get(str(restaurant_id))

    def set(self, restaurant_id: str, customer_id: str) -> None:
        self._pointers[str(restaurant_id)] = str(customer_id)

    def clear(self, restaurant_id: str) -> None:
        self._pointers.pop(str(restaurant_id), None)
