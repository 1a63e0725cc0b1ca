"""Query-string parsing for the swap endpoints.

Raw query strings are first validated by pydantic models, then resolved
against the chain's token registry into domain request objects. Every
rejection is raised as an API ``ValidationError``.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import TypeVar

import pydantic
from pydantic import BaseModel, Field

from swap_api.constants import (
    DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE,
    MARKET_DEPTH_DEFAULT_DISTRIBUTION,
    MARKET_DEPTH_MAX_SAMPLES,
    NULL_ADDRESS,
)
from swap_api.errors import ValidationError, ValidationErrorCode, ValidationErrorItem
from swap_api.models.swap import (
    AffiliateFee,
    AffiliateFeeType,
    CalculateMarketDepthParams,
    GetSwapQuoteParams,
)
from swap_api.models.types import Address, Uint256, normalize_address
from swap_api.sources import ALL_SOURCES, ERC20BridgeSource, parse_source
from swap_api.tokens import TokenRegistry

_ADDRESS_FIELDS = frozenset(
    {"takerAddress", "affiliateAddress", "feeRecipient", "feeRecipientTradeSurplus"}
)

M = TypeVar("M", bound=BaseModel)


class SwapQuoteQuery(BaseModel):
    """Raw query parameters of ``/quote`` and ``/price``."""

    sell_token: str = Field(alias="sellToken", min_length=1)
    buy_token: str = Field(alias="buyToken", min_length=1)
    sell_amount: Uint256 | None = Field(default=None, alias="sellAmount")
    buy_amount: Uint256 | None = Field(default=None, alias="buyAmount")
    taker_address: Address | None = Field(default=None, alias="takerAddress")
    affiliate_address: Address | None = Field(default=None, alias="affiliateAddress")
    slippage_percentage: Decimal | None = Field(default=None, alias="slippagePercentage", ge=0)
    gas_price: Uint256 | None = Field(default=None, alias="gasPrice")
    excluded_sources: str | None = Field(default=None, alias="excludedSources")
    included_sources: str | None = Field(default=None, alias="includedSources")
    skip_validation: bool = Field(default=False, alias="skipValidation")
    include_price_comparisons: bool = Field(default=False, alias="includePriceComparisons")
    should_sell_entire_balance: bool = Field(default=False, alias="shouldSellEntireBalance")
    fee_recipient: Address | None = Field(default=None, alias="feeRecipient")
    buy_token_percentage_fee: Decimal | None = Field(
        default=None, alias="buyTokenPercentageFee", ge=0, lt=1
    )
    sell_token_percentage_fee: Decimal | None = Field(
        default=None, alias="sellTokenPercentageFee", ge=0
    )
    fee_recipient_trade_surplus: Address | None = Field(
        default=None, alias="feeRecipientTradeSurplus"
    )

    model_config = {"populate_by_name": True}


class MarketDepthQuery(BaseModel):
    """Raw query parameters of ``/depth``."""

    buy_token: str = Field(alias="buyToken", min_length=1)
    sell_token: str = Field(alias="sellToken", min_length=1)
    sell_amount: Uint256 = Field(alias="sellAmount")
    num_samples: int = Field(default=MARKET_DEPTH_MAX_SAMPLES, alias="numSamples", ge=1, le=1000)
    sample_distribution_base: Decimal = Field(
        default=MARKET_DEPTH_DEFAULT_DISTRIBUTION, alias="sampleDistributionBase", gt=0
    )
    excluded_sources: str | None = Field(default=None, alias="excludedSources")
    included_sources: str | None = Field(default=None, alias="includedSources")

    model_config = {"populate_by_name": True}


def _error_code(field: str, error_type: str) -> ValidationErrorCode:
    if error_type == "missing":
        return ValidationErrorCode.REQUIRED_FIELD
    if field in _ADDRESS_FIELDS and error_type == "string_pattern_mismatch":
        return ValidationErrorCode.INVALID_ADDRESS
    if error_type in ("greater_than", "greater_than_equal", "less_than", "less_than_equal"):
        return ValidationErrorCode.VALUE_OUT_OF_RANGE
    return ValidationErrorCode.INCORRECT_FORMAT


def validation_error_from_pydantic(error: pydantic.ValidationError) -> ValidationError:
    """Convert pydantic validation errors into the API error shape."""
    items = []
    for detail in error.errors():
        loc = [str(part) for part in detail.get("loc", ()) if part not in ("query", "body")]
        field = loc[0] if loc else "request"
        items.append(
            ValidationErrorItem(
                field=field,
                code=_error_code(field, detail.get("type", "")),
                reason=detail.get("msg", "Invalid value"),
            )
        )
    return ValidationError(items)


def _validate_query(model: type[M], query: Mapping[str, str]) -> M:
    try:
        return model.model_validate(dict(query))
    except pydantic.ValidationError as e:
        raise validation_error_from_pydantic(e) from e


def parse_sources(raw: str | None, field: str) -> frozenset[ERC20BridgeSource]:
    """Parse a comma-separated list of source names."""
    if not raw:
        return frozenset()
    sources = set()
    for name in (part.strip() for part in raw.split(",")):
        if not name:
            continue
        try:
            sources.add(parse_source(name))
        except ValueError as e:
            raise ValidationError.single(
                field, ValidationErrorCode.FIELD_INVALID, f"Unknown liquidity source: {name}"
            ) from e
    return frozenset(sources)


def parse_affiliate_fee(query: SwapQuoteQuery) -> AffiliateFee:
    """Resolve the affiliate fee options of a quote request."""
    if query.sell_token_percentage_fee is not None and query.sell_token_percentage_fee > 0:
        raise ValidationError.single(
            "sellTokenPercentageFee",
            ValidationErrorCode.UNSUPPORTED_OPTION,
            "Sell token fees are not supported",
        )

    if query.fee_recipient_trade_surplus is not None:
        return AffiliateFee(
            fee_type=AffiliateFeeType.POSITIVE_SLIPPAGE_FEE,
            recipient=normalize_address(query.fee_recipient_trade_surplus),
        )
    if query.fee_recipient is not None:
        return AffiliateFee(
            fee_type=AffiliateFeeType.PERCENTAGE_FEE,
            recipient=normalize_address(query.fee_recipient),
            buy_token_percentage_fee=query.buy_token_percentage_fee or Decimal(0),
        )
    return AffiliateFee.none()


def _resolve_token(registry: TokenRegistry, raw: str, field: str, *, is_native: bool) -> str:
    if is_native:
        return registry.chain.wrapped_native_address
    address = registry.find_address(raw)
    if address is None:
        raise ValidationError.single(
            field, ValidationErrorCode.TOKEN_NOT_SUPPORTED, f"Could not find token {raw}"
        )
    return address


def parse_swap_quote_request(
    query: Mapping[str, str], registry: TokenRegistry
) -> GetSwapQuoteParams:
    """Validate and resolve a ``/quote`` or ``/price`` query.

    Args:
        query: Raw query parameters
        registry: Token registry of the served chain

    Returns:
        The parsed request

    Raises:
        ValidationError: If any parameter is missing, malformed or inconsistent
    """
    parsed = _validate_query(SwapQuoteQuery, query)

    if (parsed.sell_amount is None) == (parsed.buy_amount is None):
        raise ValidationError(
            [
                ValidationErrorItem(
                    field=field,
                    code=ValidationErrorCode.REQUIRED_FIELD,
                    reason="Exactly one of sellAmount or buyAmount is required",
                )
                for field in ("sellAmount", "buyAmount")
            ]
        )
    amount_field = "sellAmount" if parsed.sell_amount is not None else "buyAmount"
    if int(parsed.sell_amount or parsed.buy_amount or 0) == 0:
        raise ValidationError.single(
            amount_field, ValidationErrorCode.VALUE_OUT_OF_RANGE, "Amount must be positive"
        )

    is_eth_sell = registry.is_native(parsed.sell_token)
    is_eth_buy = registry.is_native(parsed.buy_token)
    sell_token = _resolve_token(registry, parsed.sell_token, "sellToken", is_native=is_eth_sell)
    buy_token = _resolve_token(registry, parsed.buy_token, "buyToken", is_native=is_eth_buy)
    is_wrap = is_eth_sell and registry.is_native_wrapped(buy_token)
    is_unwrap = registry.is_native_wrapped(sell_token) and is_eth_buy

    if not is_wrap and not is_unwrap and sell_token == buy_token:
        raise ValidationError(
            [
                ValidationErrorItem(
                    field=field,
                    code=ValidationErrorCode.REQUIRED_FIELD,
                    reason="buyToken and sellToken must be different",
                )
                for field in ("buyToken", "sellToken")
            ]
        )
    if NULL_ADDRESS in (sell_token, buy_token):
        raise ValidationError(
            [
                ValidationErrorItem(
                    field=field,
                    code=ValidationErrorCode.FIELD_INVALID,
                    reason="Invalid token combination",
                )
                for field in ("buyToken", "sellToken")
            ]
        )

    slippage = (
        DEFAULT_QUOTE_SLIPPAGE_PERCENTAGE
        if parsed.slippage_percentage is None
        else parsed.slippage_percentage
    )
    if slippage > 1:
        raise ValidationError.single(
            "slippagePercentage",
            ValidationErrorCode.VALUE_OUT_OF_RANGE,
            "slippagePercentage must be between 0 and 1",
        )

    excluded = parse_sources(parsed.excluded_sources, "excludedSources")
    included = parse_sources(parsed.included_sources, "includedSources")
    if excluded and included:
        raise ValidationError.single(
            "includedSources",
            ValidationErrorCode.UNSUPPORTED_OPTION,
            "Cannot specify both includedSources and excludedSources",
        )
    if excluded >= ALL_SOURCES:
        raise ValidationError.single(
            "excludedSources",
            ValidationErrorCode.VALUE_OUT_OF_RANGE,
            "Request excluded all sources",
        )

    return GetSwapQuoteParams(
        chain_id=int(registry.chain.chain_id),
        sell_token=sell_token,
        buy_token=buy_token,
        sell_amount=int(parsed.sell_amount) if parsed.sell_amount is not None else None,
        buy_amount=int(parsed.buy_amount) if parsed.buy_amount is not None else None,
        taker_address=normalize_address(parsed.taker_address) if parsed.taker_address else None,
        slippage_percentage=slippage,
        gas_price=int(parsed.gas_price) if parsed.gas_price is not None else None,
        excluded_sources=excluded,
        included_sources=included,
        affiliate_address=(
            normalize_address(parsed.affiliate_address) if parsed.affiliate_address else None
        ),
        affiliate_fee=parse_affiliate_fee(parsed),
        is_eth_sell=is_eth_sell,
        is_eth_buy=is_eth_buy,
        is_wrap=is_wrap,
        is_unwrap=is_unwrap,
        skip_validation=parsed.skip_validation,
        include_price_comparisons=parsed.include_price_comparisons,
        should_sell_entire_balance=parsed.should_sell_entire_balance,
    )


def parse_market_depth_request(
    query: Mapping[str, str], registry: TokenRegistry
) -> CalculateMarketDepthParams:
    """Validate and resolve a ``/depth`` query.

    The native asset is quoted as its wrapped token.
    """
    parsed = _validate_query(MarketDepthQuery, query)

    wrapped_symbol = registry.chain.native_wrapped_symbol
    buy = wrapped_symbol if registry.is_native(parsed.buy_token) else parsed.buy_token
    sell = wrapped_symbol if registry.is_native(parsed.sell_token) else parsed.sell_token
    if buy.lower() == sell.lower():
        raise ValidationError.single(
            "buyToken", ValidationErrorCode.INVALID_ADDRESS, f"Invalid pair {sell}/{buy}"
        )

    buy_token = registry.find_address(buy)
    if buy_token is None:
        raise ValidationError.single(
            "buyToken", ValidationErrorCode.TOKEN_NOT_SUPPORTED, f"Could not find token {buy}"
        )
    sell_token = registry.find_address(sell)
    if sell_token is None:
        raise ValidationError.single(
            "sellToken", ValidationErrorCode.TOKEN_NOT_SUPPORTED, f"Could not find token {sell}"
        )

    return CalculateMarketDepthParams(
        buy_token=buy_token,
        sell_token=sell_token,
        sell_amount=int(parsed.sell_amount),
        num_samples=parsed.num_samples,
        sample_distribution_base=parsed.sample_distribution_base,
        excluded_sources=parse_sources(parsed.excluded_sources, "excludedSources"),
        included_sources=parse_sources(parsed.included_sources, "includedSources"),
    )
