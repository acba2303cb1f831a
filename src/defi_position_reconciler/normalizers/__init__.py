"""Provider normalizers."""

# Import all normalizers to trigger auto-registration
from defi_position_reconciler.normalizers.base import BaseNormalizer
from defi_position_reconciler.normalizers.debank import DebankNormalizer
from defi_position_reconciler.normalizers.zerion import ZerionNormalizer

__all__ = [
    "BaseNormalizer",
    "DebankNormalizer",
    "ZerionNormalizer",
]
