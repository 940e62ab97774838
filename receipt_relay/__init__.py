"""receipt-relay - chat message relay and receipt renderer."""

__version__ = "0.1.0"
