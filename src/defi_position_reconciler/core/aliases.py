"""Chain-scoped protocol name aliasing."""

from pathlib import Path
from types import MappingProxyType

from defi_position_reconciler.data.loader import AliasTable, load_alias_table


class ProtocolAliasResolver:
    """
    Maps Zerion protocol display names to DeBank display names per chain.

    Aliases are one-directional and scoped to the chain they are configured
    for. A name with no alias on the given chain is returned unchanged, even
    if another chain maps it (or maps something to it).

    Parameters
    ----------
    table : AliasTable
        Validated alias table

    """

    def __init__(self, table: AliasTable) -> None:
        self._aliases = MappingProxyType(
            {chain: MappingProxyType(dict(names)) for chain, names in table.aliases.items()}
        )

    @classmethod
    def from_config(cls, path: Path | None = None) -> "ProtocolAliasResolver":
        """Build a resolver from the packaged (or given) protocol_aliases.yaml."""
        return cls(load_alias_table(path))

    def resolve(self, chain: str, name: str) -> str:
        """
        Resolve a Zerion protocol name on a chain.

        Parameters
        ----------
        chain : str
            Canonical chain key
        name : str
            Zerion protocol display name

        Returns
        -------
        str
            DeBank display name if aliased on this chain, else ``name``

        """
        return self._aliases.get(chain, {}).get(name, name)

    def aliases_for(self, chain: str) -> dict[str, str]:
        return dict(self._aliases.get(chain, {}))

    def chains(self) -> list[str]:
        return list(self._aliases)
