"""Tests for query-string parsing of the swap endpoints."""

from decimal import Decimal

import pytest

from swap_api.api.params import (
    parse_market_depth_request,
    parse_sources,
    parse_swap_quote_request,
)
from swap_api.constants import ETH_TOKEN_ADDRESS
from swap_api.errors import ValidationError, ValidationErrorCode
from swap_api.models.swap import AffiliateFeeType, MarketOperation
from swap_api.sources import ERC20BridgeSource as S
from tests.helpers import AFFILIATE, DAI, FEE_RECIPIENT, TAKER, USDC, WETH


def codes(error: ValidationError) -> dict[str, ValidationErrorCode]:
    return {item.field: item.code for item in error.items}


class TestParseSwapQuoteRequest:
    def test_symbols_resolve_to_addresses(self, registry):
        params = parse_swap_quote_request(
            {"sellToken": "DAI", "buyToken": "usdc", "sellAmount": "1000"}, registry
        )

        assert params.sell_token == DAI
        assert params.buy_token == USDC
        assert params.sell_amount == 1000
        assert params.buy_amount is None
        assert params.side is MarketOperation.SELL
        assert params.chain_id == 1

    def test_addresses_pass_through_lowercased(self, registry):
        unknown = "0x" + "AB" * 20
        params = parse_swap_quote_request(
            {"sellToken": unknown, "buyToken": DAI, "buyAmount": "5"}, registry
        )

        assert params.sell_token == unknown.lower()
        assert params.side is MarketOperation.BUY

    def test_defaults(self, registry):
        params = parse_swap_quote_request(
            {"sellToken": "DAI", "buyToken": "USDC", "sellAmount": "1"}, registry
        )

        assert params.slippage_percentage == Decimal("0.01")
        assert params.affiliate_fee.fee_type is AffiliateFeeType.NONE
        assert params.skip_validation is False
        assert params.taker_address is None

    def test_optional_fields(self, registry):
        params = parse_swap_quote_request(
            {
                "sellToken": "DAI",
                "buyToken": "USDC",
                "sellAmount": "1",
                "takerAddress": TAKER.upper().replace("0X", "0x"),
                "affiliateAddress": AFFILIATE,
                "slippagePercentage": "0.03",
                "gasPrice": "1000",
                "skipValidation": "true",
                "includePriceComparisons": "true",
            },
            registry,
        )

        assert params.taker_address == TAKER
        assert params.affiliate_address == AFFILIATE
        assert params.slippage_percentage == Decimal("0.03")
        assert params.gas_price == 1000
        assert params.skip_validation is True
        assert params.include_price_comparisons is True

    def test_native_sell(self, registry):
        params = parse_swap_quote_request(
            {"sellToken": "ETH", "buyToken": "DAI", "sellAmount": "1"}, registry
        )

        assert params.is_eth_sell is True
        assert params.sell_token == WETH
        assert params.is_wrap is False

    def test_native_sentinel_address(self, registry):
        params = parse_swap_quote_request(
            {"sellToken": "DAI", "buyToken": ETH_TOKEN_ADDRESS, "sellAmount": "1"}, registry
        )

        assert params.is_eth_buy is True
        assert params.buy_token == WETH

    def test_wrap_and_unwrap(self, registry):
        wrap = parse_swap_quote_request(
            {"sellToken": "ETH", "buyToken": "WETH", "sellAmount": "1"}, registry
        )
        unwrap = parse_swap_quote_request(
            {"sellToken": "WETH", "buyToken": "ETH", "buyAmount": "1"}, registry
        )

        assert wrap.is_wrap and not wrap.is_unwrap
        assert unwrap.is_unwrap and not unwrap.is_wrap

    def test_percentage_fee(self, registry):
        params = parse_swap_quote_request(
            {
                "sellToken": "DAI",
                "buyToken": "USDC",
                "sellAmount": "1",
                "feeRecipient": FEE_RECIPIENT,
                "buyTokenPercentageFee": "0.01",
            },
            registry,
        )

        assert params.affiliate_fee.fee_type is AffiliateFeeType.PERCENTAGE_FEE
        assert params.affiliate_fee.recipient == FEE_RECIPIENT
        assert params.affiliate_fee.buy_token_percentage_fee == Decimal("0.01")

    def test_positive_slippage_fee(self, registry):
        params = parse_swap_quote_request(
            {
                "sellToken": "DAI",
                "buyToken": "USDC",
                "sellAmount": "1",
                "feeRecipientTradeSurplus": FEE_RECIPIENT,
            },
            registry,
        )
        assert params.affiliate_fee.fee_type is AffiliateFeeType.POSITIVE_SLIPPAGE_FEE

    def test_sources(self, registry):
        params = parse_swap_quote_request(
            {
                "sellToken": "DAI",
                "buyToken": "USDC",
                "sellAmount": "1",
                "excludedSources": "Curve,Uniswap_V2",
            },
            registry,
        )
        assert params.excluded_sources == {S.CURVE, S.UNISWAP_V2}


class TestSwapQuoteRejections:
    def parse(self, registry, **query):
        base = {"sellToken": "DAI", "buyToken": "USDC", "sellAmount": "1"}
        base.update(query)
        return parse_swap_quote_request({k: v for k, v in base.items() if v is not None}, registry)

    def test_both_amounts(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, buyAmount="1")
        assert codes(exc_info.value) == {
            "sellAmount": ValidationErrorCode.REQUIRED_FIELD,
            "buyAmount": ValidationErrorCode.REQUIRED_FIELD,
        }

    def test_no_amount(self, registry):
        with pytest.raises(ValidationError):
            self.parse(registry, sellAmount=None)

    def test_zero_amount(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, sellAmount="0")
        assert codes(exc_info.value) == {"sellAmount": ValidationErrorCode.VALUE_OUT_OF_RANGE}

    def test_malformed_amount(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, sellAmount="1.5")
        assert codes(exc_info.value)["sellAmount"] is ValidationErrorCode.INCORRECT_FORMAT

    def test_missing_token(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, buyToken=None)
        assert codes(exc_info.value) == {"buyToken": ValidationErrorCode.REQUIRED_FIELD}

    def test_unknown_symbol(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, buyToken="NOPE")
        assert codes(exc_info.value) == {"buyToken": ValidationErrorCode.TOKEN_NOT_SUPPORTED}

    def test_same_token(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, buyToken=DAI)
        assert set(codes(exc_info.value)) == {"buyToken", "sellToken"}

    def test_invalid_taker(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, takerAddress="0x1234")
        assert codes(exc_info.value) == {"takerAddress": ValidationErrorCode.INVALID_ADDRESS}

    def test_slippage_above_one(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, slippagePercentage="1.5")
        assert codes(exc_info.value) == {
            "slippagePercentage": ValidationErrorCode.VALUE_OUT_OF_RANGE
        }

    def test_sell_token_fee_unsupported(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, sellTokenPercentageFee="0.01")
        assert codes(exc_info.value) == {
            "sellTokenPercentageFee": ValidationErrorCode.UNSUPPORTED_OPTION
        }

    def test_included_and_excluded_sources(self, registry):
        with pytest.raises(ValidationError):
            self.parse(registry, includedSources="Curve", excludedSources="Uniswap_V2")

    def test_unknown_source(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            self.parse(registry, excludedSources="NotADex")
        assert codes(exc_info.value) == {"excludedSources": ValidationErrorCode.FIELD_INVALID}


class TestParseSources:
    def test_empty(self):
        assert parse_sources(None, "excludedSources") == frozenset()
        assert parse_sources("", "excludedSources") == frozenset()

    def test_ignores_blank_entries(self):
        assert parse_sources("Curve, ,Native", "includedSources") == {S.CURVE, S.NATIVE}


class TestParseMarketDepthRequest:
    def test_resolves_tokens(self, registry):
        params = parse_market_depth_request(
            {"sellToken": "DAI", "buyToken": "USDC", "sellAmount": "100", "numSamples": "10"},
            registry,
        )

        assert params.sell_token == DAI
        assert params.buy_token == USDC
        assert params.sell_amount == 100
        assert params.num_samples == 10
        assert params.sample_distribution_base == Decimal("1.05")

    def test_native_quoted_as_wrapped(self, registry):
        params = parse_market_depth_request(
            {"sellToken": "ETH", "buyToken": "DAI", "sellAmount": "100"}, registry
        )
        assert params.sell_token == WETH

    def test_identical_pair_rejected(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            parse_market_depth_request(
                {"sellToken": "ETH", "buyToken": "WETH", "sellAmount": "100"}, registry
            )
        assert codes(exc_info.value) == {"buyToken": ValidationErrorCode.INVALID_ADDRESS}

    def test_requires_sell_amount(self, registry):
        with pytest.raises(ValidationError) as exc_info:
            parse_market_depth_request({"sellToken": "DAI", "buyToken": "USDC"}, registry)
        assert codes(exc_info.value) == {"sellAmount": ValidationErrorCode.REQUIRED_FIELD}
