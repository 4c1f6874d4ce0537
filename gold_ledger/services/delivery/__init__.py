"""Delivery services package."""

from gold_ledger.services.delivery.outbox import (
    DeliveryError,
    DeliveryInterface,
    OutboxDelivery,
)

__all__ = ["DeliveryError", "DeliveryInterface", "OutboxDelivery"]
