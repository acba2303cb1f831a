"""Cross-provider reconciliation of DeFi positions (DeBank vs Zerion)."""

__version__ = "0.1.0"
