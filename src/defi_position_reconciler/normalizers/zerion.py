"""Zerion wallet positions normalizer."""

import logging
from typing import Any

from defi_position_reconciler.core.chains import ChainIdentityMapper
from defi_position_reconciler.core.context import NormalizationContext
from defi_position_reconciler.core.models import (
    AssetRole,
    CanonicalAsset,
    NormalizedChainSnapshot,
    PayloadResult,
)
from defi_position_reconciler.core.registry import NormalizerRegistry
from defi_position_reconciler.normalizers.base import BaseNormalizer, as_dict, clean_symbol, to_float

logger = logging.getLogger(__name__)

# Zerion position types folded into DeBank's supply role
SUPPLY_TYPES = frozenset({"locked", "staked"})

# Zerion position types that represent debt
DEBT_TYPES = frozenset({"loan", "borrowed"})

UNKNOWN_POSITION_TYPE = "unknown"


@NormalizerRegistry.register
class ZerionNormalizer(BaseNormalizer):
    """
    Normalizer for Zerion ``/v1/wallets/{address}/positions`` payloads.

    Accepts either the bare JSON:API ``data`` list or the ``{data, meta}``
    wrapper written by the fetcher. Positions without a protocol are plain
    wallet balances and are dropped. Protocol names go through the alias
    resolver for the payload's chain before bucketing.

    Position values are taken as reported: Zerion signs debt itself, so no
    negation is applied here.

    """

    provider = "zerion"

    def payload_key(self, chain: str, chains: ChainIdentityMapper) -> str | None:
        return chains.zerion_slug(chain)

    def unwrap(self, raw: Any) -> PayloadResult:
        if raw is None:
            return PayloadResult.absent("no position list")
        if isinstance(raw, list):
            return PayloadResult.from_items(raw)
        if isinstance(raw, dict):
            data = raw.get("data")
            if isinstance(data, list):
                return PayloadResult.from_items(data)
            return PayloadResult.malformed("wrapper object has no 'data' list")
        return PayloadResult.malformed(f"expected a list or a data wrapper, got {type(raw).__name__}")

    def accumulate(
        self,
        record: Any,
        snapshot: NormalizedChainSnapshot,
        context: NormalizationContext,
    ) -> None:
        if not isinstance(record, dict):
            return
        attributes = record.get("attributes")
        if not isinstance(attributes, dict):
            return

        protocol = attributes.get("protocol")
        if not protocol:
            # Wallet balance, not a protocol position
            return

        if not self._on_chain(record, context):
            return

        name = context.aliases.resolve(context.chain, str(protocol))
        bucket = snapshot.bucket(name)
        value = to_float(attributes.get("value"))
        position_type = str(attributes.get("position_type") or UNKNOWN_POSITION_TYPE)

        if position_type in DEBT_TYPES and value > 0:
            logger.warning(
                "Zerion reported %s position in %s on %s with positive value %s; keeping reported sign",
                position_type,
                name,
                context.chain,
                value,
            )

        snapshot.record(bucket, value, [self._position_asset(attributes, position_type, value)])

    def _on_chain(self, record: dict[str, Any], context: NormalizationContext) -> bool:
        """
        Check the position's chain relationship against the payload chain.

        Positions without a chain relationship are assumed to belong to the
        payload's chain.

        Parameters
        ----------
        record : dict[str, Any]
            Raw position
        context : NormalizationContext
            Normalization context

        Returns
        -------
        bool
            False when the position references an untracked or different chain

        """
        chain_ref = as_dict(as_dict(as_dict(record.get("relationships")).get("chain")).get("data")).get("id")
        if chain_ref is None:
            return True

        resolved = context.chains.resolve(chain_ref)
        if resolved is None:
            logger.debug("Skipping position on untracked chain %r", chain_ref)
            return False
        if resolved != context.chain:
            logger.debug("Skipping position on %s found in %s payload", resolved, context.chain)
            return False
        return True

    def _position_asset(self, attributes: dict[str, Any], position_type: str, value: float) -> CanonicalAsset:
        fungible_info = as_dict(attributes.get("fungible_info"))
        role = AssetRole.SUPPLY.value if position_type in SUPPLY_TYPES else position_type
        return CanonicalAsset(
            symbol=clean_symbol(fungible_info.get("symbol")),
            amount=to_float(as_dict(attributes.get("quantity")).get("float")),
            price=to_float(attributes.get("price")),
            value=value,
            role=role,
            flags=fungible_info.get("flags"),
        )
