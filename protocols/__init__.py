"""Rewardman protocols."""

from rewardman.protocols.customer import (
    CustomerInfo,
    CustomerPointerStore,
    InMemoryPointerStore,
)

__all__ = [
    "CustomerInfo",
    "CustomerPointerStore",
    "InMemoryPointerStore",
]
