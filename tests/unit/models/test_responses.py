"""Tests for response models and their wire format."""

from decimal import Decimal

from swap_api.models.responses import LiquiditySource, SwapQuoteResponse
from swap_api.models.types import format_decimal, is_valid_address, normalize_address
from tests.helpers import DAI, EXCHANGE_PROXY, USDC


def make_response(**kwargs) -> SwapQuoteResponse:
    defaults = {
        "chain_id": 1,
        "price": Decimal("0.500000"),
        "guaranteed_price": Decimal("0.49"),
        "to": EXCHANGE_PROXY,
        "data": "0xabcdef",
        "value": 0,
        "gas": 150_000,
        "estimated_gas": 150_000,
        "gas_price": 50 * 10**9,
        "protocol_fee": 0,
        "minimum_protocol_fee": 0,
        "buy_token_address": USDC,
        "buy_amount": 500 * 10**6,
        "sell_token_address": DAI,
        "sell_amount": 10**21,
        "sources": [LiquiditySource(name="Uniswap_V2", proportion=Decimal(1))],
        "allowance_target": EXCHANGE_PROXY,
        "sell_token_to_eth_rate": Decimal(2000),
        "buy_token_to_eth_rate": Decimal("2000.000000"),
    }
    defaults.update(kwargs)
    return SwapQuoteResponse(**defaults)


class TestSwapQuoteResponse:
    def test_camel_case_wire_names(self):
        body = make_response().model_dump(by_alias=True, exclude_none=True)

        assert body["chainId"] == 1
        assert body["guaranteedPrice"] == "0.49"
        assert body["estimatedGas"] == "150000"
        assert body["sellAmount"] == str(10**21)
        assert body["sources"] == [{"name": "Uniswap_V2", "proportion": "1"}]
        assert "priceComparisons" not in body
        assert "decodedUniqueId" not in body

    def test_prices_rendered_without_trailing_zeros(self):
        body = make_response().model_dump(by_alias=True)

        assert body["price"] == "0.5"
        assert body["buyTokenToEthRate"] == "2000"

    def test_to_price_response_drops_transaction(self):
        price = make_response(decoded_unique_id="abc-1").to_price_response()
        body = price.model_dump(by_alias=True, exclude_none=True)

        assert "data" not in body
        assert "to" not in body
        assert "guaranteedPrice" not in body
        assert body["buyAmount"] == str(500 * 10**6)


class TestTypes:
    def test_format_decimal(self):
        assert format_decimal(Decimal("0E-18")) == "0"
        assert format_decimal(Decimal("1E+3")) == "1000"
        assert format_decimal(Decimal("0.000100")) == "0.0001"
        assert format_decimal(7) == "7"

    def test_addresses(self):
        assert normalize_address("ABCDEF" + "0" * 34) == "0xabcdef" + "0" * 34
        assert is_valid_address(DAI)
        assert not is_valid_address("0x1234")
        assert not is_valid_address("0x" + "zz" * 20)
