"""Packaged mapping tables and their loaders."""

from defi_position_reconciler.data.loader import (
    AliasTable,
    ChainEntry,
    ChainTable,
    load_address_list,
    load_alias_table,
    load_chain_table,
)

__all__ = [
    "AliasTable",
    "ChainEntry",
    "ChainTable",
    "load_address_list",
    "load_alias_table",
    "load_chain_table",
]
