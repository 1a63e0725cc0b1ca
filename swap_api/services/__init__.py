"""Request-level services."""

from swap_api.services.swap_service import (
    SwapService,
    classify_quote_error,
    create_swap_service,
)

__all__ = ["SwapService", "classify_quote_error", "create_swap_service"]
