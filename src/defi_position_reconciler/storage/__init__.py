"""Raw payload sources and comparison dataset output."""

from defi_position_reconciler.storage.output import load_comparison_file, write_comparison_file
from defi_position_reconciler.storage.payloads import PayloadSource

__all__ = [
    "PayloadSource",
    "load_comparison_file",
    "write_comparison_file",
]
