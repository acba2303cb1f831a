"""Per-chain context handed to normalizers."""

from pydantic import BaseModel, ConfigDict

from defi_position_reconciler.core.aliases import ProtocolAliasResolver
from defi_position_reconciler.core.chains import ChainIdentityMapper


class NormalizationContext(BaseModel):
    """
    Lookup tables and chain key for normalizing one payload.

    Attributes
    ----------
    chain : str
        Canonical chain key the payload belongs to
    chains : ChainIdentityMapper
        Chain identity mapper
    aliases : ProtocolAliasResolver
        Protocol alias resolver

    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    chain: str
    chains: ChainIdentityMapper
    aliases: ProtocolAliasResolver
