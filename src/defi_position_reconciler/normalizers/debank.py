"""DeBank complex protocol list normalizer."""

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
from defi_position_reconciler.normalizers.base import BaseNormalizer, as_dict, as_list, clean_symbol, to_float

logger = logging.getLogger(__name__)

UNKNOWN_PROTOCOL = "Unknown"

# detail list -> role, in the order assets are emitted
TOKEN_LISTS = (
    ("supply_token_list", AssetRole.SUPPLY),
    ("borrow_token_list", AssetRole.BORROW),
    ("reward_token_list", AssetRole.REWARD),
)


@NormalizerRegistry.register
class DebankNormalizer(BaseNormalizer):
    """
    Normalizer for DeBank ``/v1/user/complex_protocol_list`` payloads.

    The payload is a list of protocol records, each holding a
    ``portfolio_item_list``. Protocol names are used verbatim (DeBank is the
    alias target). Each item's ``stats.net_usd_value`` is what is added to the
    protocol bucket and to the chain total; the detail token lists are
    decomposed into canonical assets.

    Borrowed tokens are always emitted with a negative value, whatever sign
    DeBank reports for the amount.

    """

    provider = "debank"

    def payload_key(self, chain: str, chains: ChainIdentityMapper) -> str | None:
        return chains.debank_slug(chain)

    def unwrap(self, raw: Any) -> PayloadResult:
        if raw is None:
            return PayloadResult.absent("no protocol list")
        if not isinstance(raw, list):
            return PayloadResult.malformed(f"expected a list of protocols, got {type(raw).__name__}")
        return PayloadResult.from_items(raw)

    def accumulate(
        self,
        record: Any,
        snapshot: NormalizedChainSnapshot,
        context: NormalizationContext,
    ) -> None:
        if not isinstance(record, dict):
            logger.debug("Skipping non-object protocol record on %s", context.chain)
            return

        name = record.get("name") or UNKNOWN_PROTOCOL
        protocol_id = record.get("id") if isinstance(record.get("id"), str) else None
        bucket = snapshot.bucket(str(name), protocol_id)

        for item in as_list(record.get("portfolio_item_list")):
            if not isinstance(item, dict):
                continue
            net_value = to_float(as_dict(item.get("stats")).get("net_usd_value"))
            snapshot.record(bucket, net_value, self._item_assets(as_dict(item.get("detail"))))

    def _item_assets(self, detail: dict[str, Any]) -> list[CanonicalAsset]:
        """
        Decompose a portfolio item's detail into canonical assets.

        Parameters
        ----------
        detail : dict[str, Any]
            ``portfolio_item.detail``

        Returns
        -------
        list[CanonicalAsset]
            Supply, borrow, reward, then vesting assets

        """
        assets = []
        for field, role in TOKEN_LISTS:
            for token in as_list(detail.get(field)):
                if isinstance(token, dict):
                    assets.append(self._token_asset(token, role))

        # Vesting items carry a single token instead of a list
        vesting = detail.get("token")
        if isinstance(vesting, dict):
            assets.append(self._token_asset(vesting, AssetRole.VESTING))

        return assets

    def _token_asset(self, token: dict[str, Any], role: AssetRole) -> CanonicalAsset:
        amount = to_float(token.get("amount"))
        price = to_float(token.get("price"))
        value = to_float(abs(amount * price))
        if role == AssetRole.BORROW and value:
            value = -value
        return CanonicalAsset(
            symbol=clean_symbol(token.get("symbol")),
            amount=amount,
            price=price,
            value=value,
            role=role.value,
        )
