"""Option strategy scanning, position and portfolio analytics, and risk and economic records."""

__version__ = "4.0.0"