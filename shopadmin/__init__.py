"""ShopAdmin - WooCommerce catalog administration."""
