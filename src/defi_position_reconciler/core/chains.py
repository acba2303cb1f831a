"""Chain identity mapping between provider vocabularies."""

from pathlib import Path
from types import MappingProxyType

from defi_position_reconciler.data.loader import ChainEntry, ChainTable, load_chain_table

EVM_PREFIX = "evm--"


class ChainIdentityMapper:
    """
    Translates provider-native chain identifiers into canonical chain keys.

    Canonical keys follow the Zerion vocabulary. Lookups never raise:
    an identifier the table does not track resolves to None and the
    caller is expected to skip that chain.

    Parameters
    ----------
    table : ChainTable
        Validated chain table

    """

    def __init__(self, table: ChainTable) -> None:
        self._entries = MappingProxyType(dict(table.chains))
        self._by_debank = MappingProxyType({e.debank: key for key, e in table.chains.items()})
        self._by_zerion = MappingProxyType({e.zerion: key for key, e in table.chains.items()})
        self._by_chain_id = MappingProxyType({e.chain_id: key for key, e in table.chains.items()})

    @classmethod
    def from_config(cls, path: Path | None = None) -> "ChainIdentityMapper":
        """Build a mapper from the packaged (or given) chains.yaml."""
        return cls(load_chain_table(path))

    def canonical_keys(self) -> list[str]:
        """
        Get all canonical chain keys.

        Returns
        -------
        list[str]
            Keys in configuration order

        """
        return list(self._entries)

    def entry(self, key: str) -> ChainEntry | None:
        return self._entries.get(key)

    def resolve_debank(self, slug: str) -> str | None:
        """
        Map a DeBank chain slug (e.g. 'matic') to its canonical key.

        Parameters
        ----------
        slug : str
            DeBank chain slug

        Returns
        -------
        str | None
            Canonical key, or None if the chain is not tracked

        """
        return self._by_debank.get(slug)

    def resolve_zerion(self, slug: str) -> str | None:
        return self._by_zerion.get(slug)

    def resolve_chain_id(self, chain_id: int | str) -> str | None:
        """
        Map a numeric EVM chain id to its canonical key.

        Accepts ints, decimal strings ('56') and 'evm--56' identifiers.

        Parameters
        ----------
        chain_id : int | str
            Numeric chain identifier

        Returns
        -------
        str | None
            Canonical key, or None if unknown or not numeric

        """
        if isinstance(chain_id, bool):
            return None
        if isinstance(chain_id, str):
            text = chain_id.strip()
            if text.startswith(EVM_PREFIX):
                text = text[len(EVM_PREFIX) :]
            if not text.isdecimal():
                return None
            chain_id = int(text)
        if not isinstance(chain_id, int):
            return None
        return self._by_chain_id.get(chain_id)

    def resolve(self, identifier: int | str | None) -> str | None:
        """
        Map any known chain identifier to its canonical key.

        Tries, in order: canonical key, Zerion slug, DeBank slug, numeric id.

        Parameters
        ----------
        identifier : int | str | None
            Chain identifier in any supported vocabulary

        Returns
        -------
        str | None
            Canonical key, or None if not tracked

        """
        if identifier is None:
            return None
        if isinstance(identifier, str):
            if identifier in self._entries:
                return identifier
            return (
                self.resolve_zerion(identifier)
                or self.resolve_debank(identifier)
                or self.resolve_chain_id(identifier)
            )
        return self.resolve_chain_id(identifier)

    def debank_slug(self, key: str) -> str | None:
        entry = self._entries.get(key)
        return entry.debank if entry else None

    def zerion_slug(self, key: str) -> str | None:
        entry = self._entries.get(key)
        return entry.zerion if entry else None

    def chain_id(self, key: str) -> int | None:
        entry = self._entries.get(key)
        return entry.chain_id if entry else None

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
