from functools import lru_cache

from storefront.config import settings
from storefront.schemas.pricing_schemas import FeeConfig
from storefront.services.catalog_client import CatalogClient
from storefront.services.order_client import OrderServiceClient
from storefront.utils.cache_helpers import TTLCache


@lru_cache(maxsize=1)
def get_catalog_client() -> CatalogClient:
    return CatalogClient(
        settings.catalog_service_url,
        cache=TTLCache(
            ttl=settings.catalog_cache_ttl_seconds,
            max_entries=settings.catalog_cache_max_entries,
        ),
        timeout=settings.read_timeout_seconds,
        max_retries=settings.read_max_retries,
        base_delay=settings.read_backoff_base_seconds,
        max_delay=settings.read_backoff_max_seconds,
    )


@lru_cache(maxsize=1)
def get_order_client() -> OrderServiceClient:
    return OrderServiceClient(
        settings.order_service_url,
        write_timeout=settings.checkout_timeout_seconds,
        read_timeout=settings.read_timeout_seconds,
        max_retries=settings.read_max_retries,
    )


def get_fee_config() -> FeeConfig:
    return settings.fee_config
