"""BoglePay payment gateway: webhook verification, order reconciliation and hosted checkout."""

__version__ = "0.1.0"
