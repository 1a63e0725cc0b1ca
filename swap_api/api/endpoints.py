"""API endpoints for the swap service."""

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends, Request

from swap_api.api.params import parse_market_depth_request, parse_swap_quote_request
from swap_api.chains import ChainConfig, get_chain_config
from swap_api.config import Settings, load_settings
from swap_api.constants import NULL_ADDRESS, SWAP_DOCS_URL
from swap_api.models.responses import (
    MarketDepthResponse,
    PriceResponse,
    SourcesResponse,
    SwapQuoteResponse,
    TokenRecord,
    TokensResponse,
)
from swap_api.services.swap_service import SwapService, create_swap_service
from swap_api.sources import source_display_name
from swap_api.tokens import TokenRegistry

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process settings, read once from the environment."""
    return load_settings()


@lru_cache(maxsize=1)
def _default_swap_service() -> SwapService:
    return create_swap_service(get_settings())


async def close_default_swap_service() -> None:
    """Release the process-wide service's node connections, if it was built."""
    if _default_swap_service.cache_info().currsize:
        await _default_swap_service().aclose()
        _default_swap_service.cache_clear()


def get_chain() -> ChainConfig:
    """Dependency provider for the served chain's configuration."""
    settings = get_settings()
    return get_chain_config(
        settings.chain_id,
        exchange_proxy=settings.exchange_proxy_address,
        fake_taker_bytecode=settings.fake_taker_bytecode,
    )


def get_token_registry(chain: ChainConfig = Depends(get_chain)) -> TokenRegistry:
    return TokenRegistry(chain)


def get_swap_service() -> SwapService:
    """Dependency provider for the swap service.

    Override this in tests to inject a service backed by fakes:
        app.dependency_overrides[get_swap_service] = lambda: service

    Returns:
        The swap service to use for quoting.
    """
    return _default_swap_service()


@router.get("")
async def root() -> dict[str, str]:
    return {
        "message": f"This is the root of the Swap API. Visit {SWAP_DOCS_URL} "
        "for details about this API."
    }


@router.get("/tokens")
async def get_tokens(registry: TokenRegistry = Depends(get_token_registry)) -> TokensResponse:
    return TokensResponse(
        records=[
            TokenRecord(
                symbol=t.symbol, address=t.token_address, name=t.name, decimals=t.decimals
            )
            for t in registry.tokens
            if t.token_address != NULL_ADDRESS
        ]
    )


@router.get("/sources")
async def get_sources(chain: ChainConfig = Depends(get_chain)) -> SourcesResponse:
    names = sorted((source_display_name(s) for s in chain.sources), key=str.lower)
    return SourcesResponse(records=names)


@router.get("/quote", response_model_exclude_none=True)
async def get_quote(
    request: Request,
    registry: TokenRegistry = Depends(get_token_registry),
    service: SwapService = Depends(get_swap_service),
) -> SwapQuoteResponse:
    """Firm quote with calldata ready to sign.

    Error Handling:
        - Invalid parameters: 400 with validation errors
        - Simulation revert: 400 with the decoded revert
        - Unexpected failure: 500
    """
    params = parse_swap_quote_request(request.query_params, registry)
    logger.info(
        "swap_request",
        endpoint="quote",
        excluded_sources=sorted(s.value for s in params.excluded_sources),
    )
    return await service.get_swap_quote(params)


@router.get("/price", response_model_exclude_none=True)
async def get_price(
    request: Request,
    registry: TokenRegistry = Depends(get_token_registry),
    service: SwapService = Depends(get_swap_service),
) -> PriceResponse:
    """Indicative price: the quote path without gas simulation or calldata."""
    params = parse_swap_quote_request(request.query_params, registry)
    quote = await service.get_swap_quote(params.with_skip_validation())
    logger.info(
        "indicative_quote_served",
        taker=params.taker_address,
        buy_token=params.buy_token,
        sell_token=params.sell_token,
        buy_amount=params.buy_amount,
        sell_amount=params.sell_amount,
    )
    return quote.to_price_response()


@router.get("/depth")
async def get_market_depth(
    request: Request,
    registry: TokenRegistry = Depends(get_token_registry),
    service: SwapService = Depends(get_swap_service),
) -> MarketDepthResponse:
    params = parse_market_depth_request(request.query_params, registry)
    return await service.calculate_market_depth(params)
