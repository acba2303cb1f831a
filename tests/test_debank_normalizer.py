"""Tests for the DeBank normalizer."""

import pytest
from conftest import debank_item, debank_protocol

from defi_position_reconciler.core.models import NormalizedChainSnapshot, PayloadState
from defi_position_reconciler.normalizers import DebankNormalizer


@pytest.fixture
def normalizer():
    return DebankNormalizer()


def test_aave_supply_scenario(normalizer, make_context):
    """A single supplied token becomes one trimmed supply asset."""
    raw = [
        {
            "name": "Aave V3",
            "id": "aave3",
            "portfolio_item_list": [
                {
                    "stats": {"net_usd_value": 100},
                    "detail": {"supply_token_list": [{"symbol": " USDC ", "amount": 100, "price": 1}]},
                }
            ],
        }
    ]

    snapshot = normalizer.normalize(raw, make_context())

    assert snapshot.to_json_dict() == {
        "protocols": {
            "Aave V3": {
                "name": "Aave V3",
                "id": "aave3",
                "value": 100,
                "assets": [{"symbol": "USDC", "amount": 100, "price": 1, "value": 100, "role": "supply"}],
            }
        },
        "totalValue": 100,
    }


class TestPayloadShapes:
    """Malformed and empty payloads degrade to empty snapshots."""

    @pytest.mark.parametrize("raw", [{"data": []}, "not a list", 42])
    def test_malformed_payload(self, normalizer, make_context, raw):
        assert normalizer.unwrap(raw).state == PayloadState.MALFORMED
        assert normalizer.normalize(raw, make_context()) == NormalizedChainSnapshot.empty()

    def test_absent_payload(self, normalizer, make_context):
        assert normalizer.unwrap(None).state == PayloadState.ABSENT
        assert normalizer.normalize(None, make_context()) == NormalizedChainSnapshot.empty()

    def test_empty_payload(self, normalizer, make_context):
        assert normalizer.unwrap([]).state == PayloadState.EMPTY
        snapshot = normalizer.normalize([], make_context())
        assert snapshot.protocols == {}
        assert snapshot.total_value == 0

    def test_non_object_records_skipped(self, normalizer, make_context):
        raw = ["junk", None, debank_protocol("Lido", "lido", [debank_item(10)])]
        snapshot = normalizer.normalize(raw, make_context())
        assert list(snapshot.protocols) == ["Lido"]
        assert snapshot.total_value == 10


class TestAssetDecomposition:
    """Each detail token list maps to one canonical role."""

    def test_borrow_is_negative(self, normalizer, make_context):
        raw = [
            debank_protocol(
                "Aave V3",
                "aave3",
                [
                    debank_item(
                        700,
                        supply_token_list=[{"symbol": "WETH", "amount": 1, "price": 1000}],
                        borrow_token_list=[{"symbol": "USDC", "amount": 300, "price": 1}],
                    )
                ],
            )
        ]

        assets = normalizer.normalize(raw, make_context()).protocols["Aave V3"].assets

        assert [a.role for a in assets] == ["supply", "borrow"]
        assert assets[0].value == 1000
        assert assets[1].value == -300

    def test_borrow_with_negative_raw_amount_stays_negative(self, normalizer, make_context):
        raw = [
            debank_protocol(
                "Compound",
                "compound3",
                [debank_item(-50, borrow_token_list=[{"symbol": "DAI", "amount": -50, "price": 1}])],
            )
        ]

        asset = normalizer.normalize(raw, make_context()).protocols["Compound"].assets[0]

        assert asset.value == -50
        assert asset.role == "borrow"

    def test_zero_borrow_is_not_negative_zero(self, normalizer, make_context):
        raw = [debank_protocol("Aave V3", "aave3", [debank_item(0, borrow_token_list=[{"symbol": "DAI", "amount": 0, "price": 1}])])]

        asset = normalizer.normalize(raw, make_context()).protocols["Aave V3"].assets[0]

        assert asset.value == 0
        assert str(asset.value) == "0.0"

    def test_reward_and_vesting(self, normalizer, make_context):
        raw = [
            debank_protocol(
                "Curve",
                "curve",
                [
                    debank_item(15, reward_token_list=[{"symbol": "CRV", "amount": 10, "price": 0.5}]),
                    debank_item(20, token={"symbol": "CRV ", "amount": 40, "price": 0.5}),
                ],
            )
        ]

        assets = normalizer.normalize(raw, make_context()).protocols["Curve"].assets

        assert [(a.symbol, a.role, a.value) for a in assets] == [("CRV", "reward", 5), ("CRV", "vesting", 20)]

    def test_symbol_case_and_inner_characters_kept(self, normalizer, make_context):
        raw = [debank_protocol("Pendle", "pendle", [debank_item(1, supply_token_list=[{"symbol": "\tPT-sUSDe ", "amount": 1, "price": 1}])])]

        asset = normalizer.normalize(raw, make_context()).protocols["Pendle"].assets[0]

        assert asset.symbol == "PT-sUSDe"

    def test_missing_fields_degrade(self, normalizer, make_context):
        raw = [
            {
                "portfolio_item_list": [
                    {"detail": {"supply_token_list": [{"amount": "abc"}]}},
                    {"stats": None, "detail": None},
                    "junk",
                ]
            }
        ]

        snapshot = normalizer.normalize(raw, make_context())

        protocol = snapshot.protocols["Unknown"]
        assert protocol.id == "Unknown"
        assert protocol.value == 0
        assert protocol.assets[0].symbol == "?"
        assert protocol.assets[0].amount == 0
        assert protocol.assets[0].price == 0
        assert snapshot.total_value == 0


class TestTotals:
    """Chain and protocol totals come from the items' net values."""

    def test_total_equals_sum_of_net_values(self, normalizer, make_context):
        raw = [
            debank_protocol("Aave V3", "aave3", [debank_item(100), debank_item(-20.5)]),
            debank_protocol("Lido", "lido", [debank_item(250)]),
        ]

        snapshot = normalizer.normalize(raw, make_context())

        assert snapshot.protocols["Aave V3"].value == pytest.approx(79.5)
        assert snapshot.total_value == pytest.approx(329.5)
        assert snapshot.total_value == pytest.approx(sum(p.value for p in snapshot.protocols.values()))

    def test_protocol_value_matches_assets_for_consistent_items(self, normalizer, make_context):
        raw = [
            debank_protocol(
                "Aave V3",
                "aave3",
                [
                    debank_item(
                        700,
                        supply_token_list=[{"symbol": "WETH", "amount": 1, "price": 1000}],
                        borrow_token_list=[{"symbol": "USDC", "amount": 300, "price": 1}],
                    )
                ],
            )
        ]

        protocol = normalizer.normalize(raw, make_context()).protocols["Aave V3"]

        assert protocol.value == pytest.approx(sum(a.value for a in protocol.assets))

    def test_duplicate_protocol_names_merge(self, normalizer, make_context):
        raw = [
            debank_protocol("Uniswap V3", "uniswap3", [debank_item(10, supply_token_list=[{"symbol": "ETH", "amount": 1, "price": 10}])]),
            debank_protocol("Uniswap V3", "uniswap3", [debank_item(5, supply_token_list=[{"symbol": "ARB", "amount": 5, "price": 1}])]),
        ]

        snapshot = normalizer.normalize(raw, make_context())

        assert list(snapshot.protocols) == ["Uniswap V3"]
        assert snapshot.protocols["Uniswap V3"].value == 15
        assert [a.symbol for a in snapshot.protocols["Uniswap V3"].assets] == ["ETH", "ARB"]

    def test_normalization_is_idempotent(self, normalizer, make_context):
        raw = [debank_protocol("Aave V3", "aave3", [debank_item(100, supply_token_list=[{"symbol": "USDC", "amount": 100, "price": 1}])])]

        first = normalizer.normalize(raw, make_context()).model_dump_json(by_alias=True)
        second = normalizer.normalize(raw, make_context()).model_dump_json(by_alias=True)

        assert first == second


def test_payload_key_uses_debank_slug(normalizer, chains):
    assert normalizer.payload_key("ethereum", chains) == "eth"
    assert normalizer.payload_key("binance-smart-chain", chains) == "bsc"
    assert normalizer.payload_key("unknown-chain", chains) is None


def test_out_of_range_numbers_degrade_to_zero(normalizer, make_context):
    """Integers too large for a float count as zero instead of failing the snapshot."""
    raw = [
        debank_protocol(
            "Aave V3",
            "aave3",
            [
                debank_item(10**400, supply_token_list=[{"symbol": "WETH", "amount": 10**400, "price": 1}]),
                debank_item(5, supply_token_list=[{"symbol": "USDC", "amount": 1e300, "price": 1e300}]),
            ],
        )
    ]

    snapshot = normalizer.normalize(raw, make_context())

    protocol = snapshot.protocols["Aave V3"]
    assert snapshot.total_value == 5
    assert protocol.value == 5
    assert protocol.assets[0].amount == 0
    assert protocol.assets[1].value == 0
