"""Reality.eth question creation and cross-chain arbitration requests."""

__version__ = "0.1.0"
