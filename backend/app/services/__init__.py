"""Service modules."""

# Export core services
from app.services.store_service import store_service
from app.services.shopify_service import ShopifyService, FetchResult
