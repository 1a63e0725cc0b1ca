"""Swap quote assembly.

``SwapService`` turns a parsed request into a quote response:

    obtain quote -> prices -> affiliate fee -> calldata -> (gas simulation) -> response

Native wrap/unwrap requests skip routing entirely and call the wrapped
token's ``deposit()``/``withdraw(uint256)`` at a 1:1 price with fixed gas.
"""

from __future__ import annotations

import decimal
from decimal import Decimal

import structlog
from eth_abi import encode  # type: ignore[attr-defined]

from swap_api.calldata.attribution import attribute_call_data
from swap_api.calldata.revert import RevertError
from swap_api.calldata.transformer import fix_call_data
from swap_api.chains import ChainConfig, get_chain_config
from swap_api.config import Settings
from swap_api.constants import (
    ETH_TOKEN_ADDRESS,
    MARKET_DEPTH_END_PRICE_SLIPPAGE_PERC,
    NULL_ADDRESS,
    PERCENTAGE_SIG_DIGITS,
    TX_BASE_GAS,
    WETH_DECIMALS,
)
from swap_api.errors import (
    InternalServerError,
    RevertAPIError,
    SwapAPIError,
    ValidationError,
    ValidationErrorCode,
)
from swap_api.fees.affiliate import AffiliateFeeCalculator, DefaultAffiliateFeeCalculator
from swap_api.gas.estimator import GasEstimator, apply_gas_buffer
from swap_api.market_depth import calculate_depth_for_side, scale_price_by_decimals
from swap_api.models.quote import MultiHopBreakdown, SwapQuote
from swap_api.models.responses import (
    BucketedPriceDepthResponse,
    DepthSideResponse,
    LiquiditySource,
    MarketDepthResponse,
    SourceComparisonResponse,
    SwapQuoteResponse,
    TokenDecimals,
)
from swap_api.models.swap import (
    AffiliateFeeType,
    CalculateMarketDepthParams,
    GetSwapQuoteParams,
    MarketOperation,
)
from swap_api.pricing import get_swap_quote_price
from swap_api.routing.interfaces import (
    CalldataOptions,
    MarketDepthOptions,
    RoutingEngine,
    SwapQuoteOptions,
    load_routing_engine,
)
from swap_api.rpc.client import JsonRpcClient, TxData
from swap_api.sources import ERC20BridgeSource, source_display_name
from swap_api.utils.decimal_utils import (
    DECIMAL_HIGH_PREC_CONTEXT,
    floor_to_int,
    round_to_decimals,
    to_significant_digits,
)

logger = structlog.get_logger()

# WETH9 entry points
DEPOSIT_SELECTOR = bytes.fromhex("d0e30db0")  # deposit()
WITHDRAW_SELECTOR = bytes.fromhex("2e1a7d4d")  # withdraw(uint256)

# Known routing engine failure prefixes
INSUFFICIENT_ASSET_LIQUIDITY = "INSUFFICIENT_ASSET_LIQUIDITY"
NO_OPTIMAL_PATH = "NO_OPTIMAL_PATH"
ASSET_UNAVAILABLE = "ASSET_UNAVAILABLE"

# Sources never sampled for market depth
DEPTH_EXCLUDED_SOURCES = frozenset({ERC20BridgeSource.MULTI_BRIDGE, ERC20BridgeSource.MULTI_HOP})


def classify_quote_error(error: Exception, params: GetSwapQuoteParams) -> SwapAPIError:
    """Map a failure while quoting onto the API error taxonomy.

    Args:
        error: The exception raised while building the quote
        params: The request being served

    Returns:
        The API error to surface to the caller
    """
    if isinstance(error, SwapAPIError):
        return error
    if isinstance(error, RevertError):
        return RevertAPIError(error)

    message = str(error)
    if message.startswith(INSUFFICIENT_ASSET_LIQUIDITY) or message.startswith(NO_OPTIMAL_PATH):
        return ValidationError.single(
            "sellAmount" if params.sell_amount is not None else "buyAmount",
            ValidationErrorCode.VALUE_OUT_OF_RANGE,
            INSUFFICIENT_ASSET_LIQUIDITY,
        )
    if message.startswith(ASSET_UNAVAILABLE):
        return ValidationError.single("token", ValidationErrorCode.VALUE_OUT_OF_RANGE, message)

    logger.error(
        "uncaught_quote_error",
        error=message,
        error_type=type(error).__name__,
        exc_info=error,
    )
    return InternalServerError(message)


def _to_eth_rate(rate: Decimal, token_decimals: int) -> Decimal:
    with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
        scaled = rate * Decimal(10) ** (WETH_DECIMALS - token_decimals)
    return round_to_decimals(scaled, token_decimals)


class SwapService:
    """Assembles swap quotes, wrap/unwrap quotes and market depth.

    Args:
        routing_engine: External engine providing quotes and calldata
        chain: Configuration of the chain being served
        gas_estimator: Simulates transactions when a taker is known
        fee_calculator: Sizes affiliate fees
        default_affiliate: Affiliate written into calldata when the request names none
        node: Node client owned by the service, closed by ``aclose``
    """

    def __init__(
        self,
        routing_engine: RoutingEngine,
        chain: ChainConfig,
        *,
        gas_estimator: GasEstimator | None = None,
        fee_calculator: AffiliateFeeCalculator | None = None,
        default_affiliate: str = NULL_ADDRESS,
        node: JsonRpcClient | None = None,
    ):
        self.routing_engine = routing_engine
        self.chain = chain
        self.gas_estimator = gas_estimator
        self.fee_calculator = fee_calculator or DefaultAffiliateFeeCalculator()
        self.default_affiliate = default_affiliate
        self.node = node

    async def aclose(self) -> None:
        if self.node is not None:
            await self.node.aclose()

    async def get_swap_quote(self, params: GetSwapQuoteParams) -> SwapQuoteResponse:
        """Serve a quote request, routing wrap/unwrap to the short path.

        Raises:
            SwapAPIError: Any failure, classified by ``classify_quote_error``
        """
        try:
            if params.is_unwrap:
                return await self.get_swap_quote_for_unwrap(params)
            if params.is_wrap:
                return await self.get_swap_quote_for_wrap(params)
            return await self.calculate_swap_quote(params)
        except Exception as e:
            raise classify_quote_error(e, params) from e

    async def calculate_swap_quote(self, params: GetSwapQuoteParams) -> SwapQuoteResponse:
        """Build a routed swap quote."""
        fee = params.affiliate_fee
        side = params.side

        use_no_vip = (
            params.is_meta_transaction
            or params.should_sell_entire_balance
            or fee.fee_type is AffiliateFeeType.PERCENTAGE_FEE
        )
        options = SwapQuoteOptions(
            slippage_percentage=params.slippage_percentage,
            gas_price=params.gas_price,
            excluded_sources=self.chain.excluded_sources | params.excluded_sources,
            included_sources=params.included_sources,
            excluded_fee_sources=self.chain.excluded_fee_sources,
            exchange_proxy_overhead=(
                self.chain.no_vip_overhead if use_no_vip else self.chain.vip_overhead
            ),
            include_price_comparisons=params.include_price_comparisons,
        )

        if side is MarketOperation.SELL:
            amount = params.amount
        else:
            with decimal.localcontext(DECIMAL_HIGH_PREC_CONTEXT):
                amount = floor_to_int(Decimal(params.amount) * (fee.buy_token_percentage_fee + 1))

        quote = await self.routing_engine.get_quote(
            params.buy_token, params.sell_token, amount, side, options
        )
        best = quote.best_case_quote_info
        worst = quote.worst_case_quote_info

        fee_amounts = self.fee_calculator.calculate(quote, fee)

        prepared = await self.routing_engine.get_calldata(
            quote,
            CalldataOptions(
                is_from_eth=params.is_eth_sell,
                is_to_eth=params.is_eth_buy,
                is_meta_transaction=params.is_meta_transaction,
                should_sell_entire_balance=params.should_sell_entire_balance,
                affiliate_fee=fee_amounts,
            ),
        )
        data = fix_call_data(
            prepared.data,
            quote.sell_token,
            quote.buy_token,
            pay_taker_nonce=self.chain.pay_taker_transformer_nonce,
        )
        attributed = attribute_call_data(
            data, params.affiliate_address, default_affiliate=self.default_affiliate
        )

        conservative_gas = (
            worst.gas
            + fee_amounts.gas_cost
            + (self.chain.wrap_unwrap_gas if params.is_eth_sell else 0)
            + (self.chain.wrap_unwrap_gas if params.is_eth_buy else 0)
        )

        if params.taker_address and not params.skip_validation:
            if self.gas_estimator is None:
                raise RuntimeError("Gas estimation requested but no estimator is configured")
            estimate = await self.gas_estimator.estimate_gas_or_throw(
                TxData(
                    to=prepared.to,
                    data=attributed.data,
                    from_=params.taker_address,
                    value=prepared.value,
                    gas_price=quote.gas_price,
                )
            )
            conservative_gas = max(
                apply_gas_buffer(estimate + prepared.gas_overhead), conservative_gas
            )

        worst_case_gas = (
            apply_gas_buffer(conservative_gas)
            if quote.has_undeterministic_fills
            else conservative_gas
        )

        prices = get_swap_quote_price(quote, fee.buy_token_percentage_fee)
        value = worst.protocol_fee + (worst.input_amount if params.is_eth_sell else 0)

        response = SwapQuoteResponse(
            chain_id=int(self.chain.chain_id),
            price=prices.price,
            guaranteed_price=prices.guaranteed_price,
            to=prepared.to,
            data=attributed.data,
            decoded_unique_id=attributed.decoded_unique_id,
            value=value,
            gas=worst_case_gas,
            estimated_gas=conservative_gas,
            gas_price=quote.gas_price,
            protocol_fee=worst.protocol_fee,
            minimum_protocol_fee=min(worst.protocol_fee, best.protocol_fee),
            buy_token_address=ETH_TOKEN_ADDRESS if params.is_eth_buy else params.buy_token,
            sell_token_address=ETH_TOKEN_ADDRESS if params.is_eth_sell else params.sell_token,
            buy_amount=best.output_amount - fee_amounts.buy_token_fee_amount,
            sell_amount=best.total_input_amount,
            sources=self.convert_source_breakdown(quote),
            allowance_target=NULL_ADDRESS if params.is_eth_sell else self.chain.exchange_proxy,
            sell_token_to_eth_rate=_to_eth_rate(quote.sell_token_per_eth, quote.sell_token_decimals),
            buy_token_to_eth_rate=_to_eth_rate(quote.buy_token_per_eth, quote.buy_token_decimals),
            price_comparisons=(
                self.convert_price_comparisons(quote) if params.include_price_comparisons else None
            ),
        )
        logger.info(
            "swap_quote_served",
            taker=params.taker_address,
            buy_token=params.buy_token,
            sell_token=params.sell_token,
            side=side.value,
            amount=params.amount,
            gas=worst_case_gas,
            decoded_unique_id=attributed.decoded_unique_id,
        )
        return response

    async def get_swap_quote_for_wrap(self, params: GetSwapQuoteParams) -> SwapQuoteResponse:
        return await self._get_swap_quote_for_native_wrapped(params, is_unwrap=False)

    async def get_swap_quote_for_unwrap(self, params: GetSwapQuoteParams) -> SwapQuoteResponse:
        return await self._get_swap_quote_for_native_wrapped(params, is_unwrap=True)

    async def _get_swap_quote_for_native_wrapped(
        self, params: GetSwapQuoteParams, *, is_unwrap: bool
    ) -> SwapQuoteResponse:
        amount = params.amount
        if is_unwrap:
            call_data = WITHDRAW_SELECTOR + encode(["uint256"], [amount])
        else:
            call_data = DEPOSIT_SELECTOR
        attributed = attribute_call_data(
            "0x" + call_data.hex(),
            params.affiliate_address,
            default_affiliate=self.default_affiliate,
        )
        gas_price = params.gas_price or await self.routing_engine.get_gas_price()
        gas = TX_BASE_GAS + self.chain.wrap_unwrap_gas
        wrapped = self.chain.wrapped_native_address

        logger.info(
            "unwrap_quote_served" if is_unwrap else "wrap_quote_served",
            taker=params.taker_address,
            amount=amount,
        )
        return SwapQuoteResponse(
            chain_id=int(self.chain.chain_id),
            price=Decimal(1),
            guaranteed_price=Decimal(1),
            to=wrapped,
            data=attributed.data,
            decoded_unique_id=attributed.decoded_unique_id,
            value=0 if is_unwrap else amount,
            gas=gas,
            estimated_gas=gas,
            gas_price=gas_price,
            protocol_fee=0,
            minimum_protocol_fee=0,
            buy_token_address=ETH_TOKEN_ADDRESS if is_unwrap else wrapped,
            sell_token_address=wrapped if is_unwrap else ETH_TOKEN_ADDRESS,
            buy_amount=amount,
            sell_amount=amount,
            sources=[],
            allowance_target=NULL_ADDRESS,
            sell_token_to_eth_rate=Decimal(1),
            buy_token_to_eth_rate=Decimal(1),
        )

    async def calculate_market_depth(self, params: CalculateMarketDepthParams) -> MarketDepthResponse:
        """Bucket the bid/ask liquidity curve of a token pair."""
        depth = await self.routing_engine.get_liquidity_curve(
            params.buy_token,
            params.sell_token,
            params.sell_amount,
            MarketDepthOptions(
                num_samples=params.num_samples,
                sample_distribution_base=params.sample_distribution_base,
                excluded_sources=params.excluded_sources | DEPTH_EXCLUDED_SOURCES,
                included_sources=params.included_sources,
            ),
        )
        num_buckets = params.num_samples * 2

        def side_depth(curves, side: MarketOperation) -> DepthSideResponse:
            buckets = calculate_depth_for_side(
                curves,
                side,
                num_buckets,
                params.sample_distribution_base,
                MARKET_DEPTH_END_PRICE_SLIPPAGE_PERC,
            )
            scaled = scale_price_by_decimals(
                buckets, depth.taker_token_decimals, depth.maker_token_decimals
            )
            return DepthSideResponse(
                depth=[BucketedPriceDepthResponse.model_validate(b) for b in scaled]
            )

        return MarketDepthResponse(
            asks=side_depth(depth.asks, MarketOperation.SELL),
            bids=side_depth(depth.bids, MarketOperation.BUY),
            buy_token=TokenDecimals(
                token_address=params.buy_token, decimals=depth.maker_token_decimals
            ),
            sell_token=TokenDecimals(
                token_address=params.sell_token, decimals=depth.taker_token_decimals
            ),
        )

    def convert_source_breakdown(self, quote: SwapQuote) -> list[LiquiditySource]:
        """Per-source proportions, listing every chain source (zero if unused)."""
        breakdown: dict[ERC20BridgeSource, Decimal | MultiHopBreakdown] = {
            source: Decimal(0) for source in self.chain.sources
        }
        breakdown.update(quote.source_breakdown)

        sources = []
        for source, entry in breakdown.items():
            if isinstance(entry, MultiHopBreakdown):
                sources.append(
                    LiquiditySource(
                        name=source.value,
                        proportion=to_significant_digits(entry.proportion, PERCENTAGE_SIG_DIGITS),
                        intermediate_token=entry.intermediate_token,
                        hops=[hop.value for hop in entry.hops],
                    )
                )
            else:
                sources.append(
                    LiquiditySource(
                        name=source_display_name(source),
                        proportion=to_significant_digits(entry, PERCENTAGE_SIG_DIGITS),
                    )
                )
        return sources

    def convert_price_comparisons(self, quote: SwapQuote) -> list[SourceComparisonResponse]:
        return [
            SourceComparisonResponse(
                name=source_display_name(c.name),
                price=c.price,
                gas=c.gas,
                savings_in_eth=c.savings_in_eth,
                buy_amount=c.buy_amount,
                sell_amount=c.sell_amount,
            )
            for c in quote.price_comparisons
        ]


def create_swap_service(settings: Settings) -> SwapService:
    """Create the service for a configured process.

    The node client is shared by the gas estimator and handed to the
    routing engine factory as ``node`` together with ``chain``.

    Raises:
        RuntimeError: If the RPC URL or routing engine factory is missing
    """
    if not settings.rpc_urls:
        raise RuntimeError("ETHEREUM_RPC_URL must be set")
    if not settings.routing_engine_factory:
        raise RuntimeError("ROUTING_ENGINE_FACTORY must be set")

    chain = get_chain_config(
        settings.chain_id,
        exchange_proxy=settings.exchange_proxy_address,
        fake_taker_bytecode=settings.fake_taker_bytecode,
    )
    node = JsonRpcClient(settings.rpc_urls, timeout_ms=settings.rpc_timeout_ms)
    engine = load_routing_engine(settings.routing_engine_factory, chain=chain, node=node)
    gas_estimator = GasEstimator(
        node,
        fake_taker_bytecode=chain.fake_taker_bytecode,
        supports_state_overrides=chain.supports_state_overrides,
    )
    if not chain.uses_state_overrides:
        logger.info("state_override_simulation_disabled", chain_id=int(chain.chain_id))
    return SwapService(
        engine,
        chain,
        gas_estimator=gas_estimator,
        default_affiliate=settings.fee_recipient_address,
        node=node,
    )


__all__ = ["SwapService", "classify_quote_error", "create_swap_service"]
