"""Core functionality including models, mapping tables, registry, and assembler."""

from defi_position_reconciler.core.models import (
    AssetRole,
    CanonicalAsset,
    ComparisonDataset,
    ComparisonRecord,
    NormalizedChainSnapshot,
    NormalizedProtocol,
    PayloadResult,
    PayloadState,
    SourceDocument,
)
from defi_position_reconciler.core.aliases import ProtocolAliasResolver
from defi_position_reconciler.core.chains import ChainIdentityMapper
from defi_position_reconciler.core.context import NormalizationContext
from defi_position_reconciler.core.registry import NormalizerRegistry
from defi_position_reconciler.core.assembler import ProviderFeed, ReconciliationAssembler

__all__ = [
    "AssetRole",
    "CanonicalAsset",
    "ChainIdentityMapper",
    "ComparisonDataset",
    "ComparisonRecord",
    "NormalizationContext",
    "NormalizedChainSnapshot",
    "NormalizedProtocol",
    "NormalizerRegistry",
    "PayloadResult",
    "PayloadState",
    "ProtocolAliasResolver",
    "ProviderFeed",
    "ReconciliationAssembler",
    "SourceDocument",
]
