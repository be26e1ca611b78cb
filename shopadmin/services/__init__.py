"""ShopAdmin Services Package."""

from shopadmin.services.woocommerce import WooCommerceClient, WooCommerceError, WooResponse

__all__ = ["WooCommerceClient", "WooCommerceError", "WooResponse"]
