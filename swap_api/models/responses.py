"""Pydantic models for API responses.

Amounts and prices are serialized as decimal strings; field names follow the
camelCase wire format.
"""

from pydantic import BaseModel, Field

from swap_api.models.types import Address, Bytes, DecimalString, IntString


class LiquiditySource(BaseModel):
    """Share of the trade filled by one source."""

    name: str
    proportion: DecimalString
    intermediate_token: Address | None = Field(default=None, alias="intermediateToken")
    hops: list[str] | None = None

    model_config = {"populate_by_name": True}


class SourceComparisonResponse(BaseModel):
    name: str
    price: DecimalString | None = None
    gas: IntString | None = None
    savings_in_eth: DecimalString | None = Field(default=None, alias="savingsInEth")
    buy_amount: IntString | None = Field(default=None, alias="buyAmount")
    sell_amount: IntString | None = Field(default=None, alias="sellAmount")

    model_config = {"populate_by_name": True}


class PriceResponse(BaseModel):
    """Indicative price for a swap, without calldata."""

    chain_id: int = Field(alias="chainId")
    price: DecimalString
    value: IntString
    gas_price: IntString = Field(alias="gasPrice")
    gas: IntString
    estimated_gas: IntString = Field(alias="estimatedGas")
    protocol_fee: IntString = Field(alias="protocolFee")
    minimum_protocol_fee: IntString = Field(alias="minimumProtocolFee")
    buy_token_address: Address = Field(alias="buyTokenAddress")
    buy_amount: IntString = Field(alias="buyAmount")
    sell_token_address: Address = Field(alias="sellTokenAddress")
    sell_amount: IntString = Field(alias="sellAmount")
    sources: list[LiquiditySource]
    allowance_target: Address = Field(alias="allowanceTarget")
    sell_token_to_eth_rate: DecimalString = Field(alias="sellTokenToEthRate")
    buy_token_to_eth_rate: DecimalString = Field(alias="buyTokenToEthRate")
    price_comparisons: list[SourceComparisonResponse] | None = Field(
        default=None, alias="priceComparisons"
    )

    model_config = {"populate_by_name": True}


class SwapQuoteResponse(PriceResponse):
    """Firm quote: a price plus a ready-to-sign transaction."""

    guaranteed_price: DecimalString = Field(alias="guaranteedPrice")
    to: Address
    data: Bytes
    decoded_unique_id: str | None = Field(default=None, alias="decodedUniqueId")

    def to_price_response(self) -> PriceResponse:
        """Drop the transaction fields, keeping the indicative subset."""
        fields = set(PriceResponse.model_fields)
        return PriceResponse.model_validate(
            {name: getattr(self, name) for name in fields}
        )


class TokenRecord(BaseModel):
    symbol: str
    address: Address
    name: str
    decimals: int


class TokensResponse(BaseModel):
    records: list[TokenRecord]


class SourcesResponse(BaseModel):
    records: list[str]


class BucketedPriceDepthResponse(BaseModel):
    bucket: int
    price: DecimalString
    bucket_total: DecimalString = Field(alias="bucketTotal")
    cumulative: DecimalString

    model_config = {"populate_by_name": True, "from_attributes": True}


class DepthSideResponse(BaseModel):
    depth: list[BucketedPriceDepthResponse]


class TokenDecimals(BaseModel):
    token_address: Address = Field(alias="tokenAddress")
    decimals: int

    model_config = {"populate_by_name": True}


class MarketDepthResponse(BaseModel):
    asks: DepthSideResponse
    bids: DepthSideResponse
    buy_token: TokenDecimals = Field(alias="buyToken")
    sell_token: TokenDecimals = Field(alias="sellToken")

    model_config = {"populate_by_name": True}
