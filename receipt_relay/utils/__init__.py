"""Utility modules for receipt-relay."""

from receipt_relay.utils.logging import get_logger, setup_logging

__all__ = [
    "get_logger",
    "setup_logging",
]
