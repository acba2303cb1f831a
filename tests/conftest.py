"""Pytest configuration for defi-position-reconciler tests."""

import json
from pathlib import Path
from typing import Any

import pytest

# Import all normalizers to trigger auto-registration
from defi_position_reconciler import normalizers  # noqa: F401
from defi_position_reconciler.core import ChainIdentityMapper, NormalizationContext, ProtocolAliasResolver
from defi_position_reconciler.data import AliasTable

ADDRESS = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"


@pytest.fixture(scope="session")
def chains() -> ChainIdentityMapper:
    """Mapper built from the packaged chain table."""
    return ChainIdentityMapper.from_config()


@pytest.fixture
def aliases() -> ProtocolAliasResolver:
    """Small alias table with deliberately contradictory entries across chains."""
    return ProtocolAliasResolver(
        AliasTable(
            aliases={
                "ethereum": {"Morpho Blue": "Morpho"},
                "optimism": {"Velodrome": "Velodrome V2"},
                "base": {"Velodrome V2": "Velodrome", "Morpho Blue": "Morpho Base"},
            }
        )
    )


@pytest.fixture
def make_context(chains, aliases):
    """Factory for a normalization context on a given chain."""

    def _make(chain: str = "ethereum") -> NormalizationContext:
        return NormalizationContext(chain=chain, chains=chains, aliases=aliases)

    return _make


@pytest.fixture
def write_payload():
    """Write a raw payload to ``<root>/<address>/<key>.json``."""

    def _write(root: Path, address: str, key: str, payload: Any) -> Path:
        path = root / address / f"{key}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(payload, str):
            path.write_text(payload, encoding="utf-8")
        else:
            path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write


def debank_protocol(name: str, protocol_id: str, items: list[dict]) -> dict:
    return {"id": protocol_id, "name": name, "chain": "eth", "portfolio_item_list": items}


def debank_item(net_usd_value: float, **detail: list[dict] | dict) -> dict:
    return {"stats": {"net_usd_value": net_usd_value}, "detail": detail}


def zerion_position(
    protocol: str | None,
    value: float,
    position_type: str = "deposit",
    symbol: str = "USDC",
    quantity: float = 1.0,
    price: float = 1.0,
    chain: str | None = "ethereum",
    flags: dict | None = None,
) -> dict:
    position = {
        "type": "positions",
        "id": f"{symbol}-{protocol}-{position_type}",
        "attributes": {
            "protocol": protocol,
            "value": value,
            "position_type": position_type,
            "price": price,
            "quantity": {"float": quantity, "numeric": str(quantity)},
            "fungible_info": {"symbol": symbol, "flags": flags or {"verified": True}},
        },
    }
    if chain is not None:
        position["relationships"] = {"chain": {"data": {"type": "chains", "id": chain}}}
    return position
