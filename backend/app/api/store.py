"""Store API endpoints: Shopify orders, products and dashboard metrics."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.crypto import CredentialCipher, get_cipher
from app.core.database import get_db
from app.core.exceptions import (
    AppError,
    InvalidUserIdError,
    StoreNotFoundError,
    UpstreamUnavailableError,
)
from app.core.logging import get_logger, store_domain_var, user_id_var
from app.models.database import Store
from app.models.shopify import StoreConnectRequest, StoreResponse
from app.services import mock_data
from app.services.metrics_service import calculate_metrics, generate_sparkline_data
from app.services.shopify_service import FetchResult, ShopifyService
from app.services.store_service import store_service

logger = get_logger(__name__)

router = APIRouter(prefix="/api/store", tags=["store"])


async def get_user_id(user_id: Optional[str] = Query(None, alias="userId")) -> int:
    """
    Parse the userId query parameter.

    This would normally come from authentication middleware.
    """
    try:
        parsed = int(user_id)
    except (TypeError, ValueError):
        raise InvalidUserIdError(user_id) from None
    if parsed <= 0:
        raise InvalidUserIdError(user_id)

    user_id_var.set(str(parsed))
    return parsed


async def _shopify_for_user(
    db: AsyncSession, cipher: CredentialCipher, user_id: int
) -> Tuple[Store, ShopifyService]:
    """Look up the user's store and build a client with its decrypted token."""
    store = await store_service.get_active_store(db, user_id)
    if not store:
        raise StoreNotFoundError(user_id)

    store_domain_var.set(store.shopify_domain)
    access_token = store_service.decrypt_access_token(cipher, store)
    return store, ShopifyService(store.shopify_domain, access_token)


def _empty_result_response(
    store: Store,
    result: FetchResult,
    mock_payload: Dict[str, Any],
    empty_payload: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Decide what to send when Shopify gave back no records.

    By default an empty result is treated as a failed call and answered with
    sample data. With report_upstream_failures on, a failed call becomes a
    502 and a genuinely empty store gets an empty payload.
    """
    if settings.report_upstream_failures:
        if result.failed:
            raise UpstreamUnavailableError(store.shopify_domain)
        return empty_payload

    logger.info(f"Shopify API returned empty results for domain: {store.shopify_domain}")
    if settings.mock_fallback_enabled:
        return mock_payload
    return empty_payload


@router.get("/orders")
async def get_orders(
    user_id: int = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_cipher),
):
    """Fetch the user's Shopify orders, or sample orders when none come back."""
    try:
        store, shopify = await _shopify_for_user(db, cipher, user_id)
        result = await shopify.fetch_orders_result()
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching Shopify orders: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch Shopify orders"})

    if not result.records:
        return _empty_result_response(
            store, result, {"orders": mock_data.mock_orders()}, {"orders": []}
        )

    return {"orders": result.records}


@router.get("/dashboard-metrics")
async def get_dashboard_metrics(
    user_id: int = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_cipher),
):
    """
    Summary metrics and a daily sales sparkline for the recent window.

    Orders are fetched from settings.dashboard_window_days ago (30 by default).
    """
    since = datetime.now(timezone.utc) - timedelta(days=settings.dashboard_window_days)
    created_at_min = since.isoformat(timespec="milliseconds").replace("+00:00", "Z")

    try:
        store, shopify = await _shopify_for_user(db, cipher, user_id)
        result = await shopify.fetch_orders_result(250, "any", created_at_min)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching dashboard metrics: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch dashboard metrics"})

    if not result.records:
        return _empty_result_response(
            store,
            result,
            mock_data.MOCK_DASHBOARD_RESPONSE,
            {
                "metrics": calculate_metrics([]).model_dump(by_alias=True),
                "sparkline": [],
            },
        )

    metrics = calculate_metrics(result.records)
    sparkline = generate_sparkline_data(result.records)

    return {
        "metrics": metrics.model_dump(by_alias=True),
        "sparkline": [point.model_dump(by_alias=True) for point in sparkline],
    }


@router.get("/products")
async def get_products(
    user_id: int = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_cipher),
):
    """Fetch the user's Shopify products, or sample products when none come back."""
    try:
        store, shopify = await _shopify_for_user(db, cipher, user_id)
        result = await shopify.fetch_products_result()
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error fetching Shopify products: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "Failed to fetch Shopify products"})

    if not result.records:
        return _empty_result_response(
            store, result, {"products": mock_data.MOCK_PRODUCTS}, {"products": []}
        )

    return {"products": result.records}


@router.post("/connect")
async def connect_store(
    request: StoreConnectRequest,
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_cipher),
):
    """Save (or replace) the encrypted credentials of a user's store."""
    user_id_var.set(str(request.user_id))
    store = await store_service.connect_store(
        db,
        cipher,
        user_id=request.user_id,
        shopify_domain=request.shopify_domain,
        access_token=request.access_token,
        api_key=request.api_key,
    )
    return {
        "success": True,
        "store": StoreResponse(
            id=store.id,
            user_id=store.user_id,
            shopify_domain=store.shopify_domain,
            is_active=store.is_active,
        ).model_dump(by_alias=True),
    }


@router.delete("")
async def disconnect_store(
    user_id: int = Depends(get_user_id),
    db: AsyncSession = Depends(get_db),
):
    """Deactivate the user's active store."""
    store = await store_service.disconnect_store(db, user_id)
    return {"success": True, "shopifyDomain": store.shopify_domain}
