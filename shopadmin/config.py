"""
ShopAdmin Configuration Loader

Loads configuration from:
1. config/shopadmin.yaml - Store and web settings
   (or $SHOPADMIN_CONFIG_DIR/shopadmin.yaml)
2. .env file - Secrets (WooCommerce consumer key and secret)
"""

import os
from pathlib import Path
from dataclasses import dataclass, field

import yaml
from dotenv import load_dotenv


@dataclass
class WooCommerceConfig:
    url: str = ""
    consumer_key: str = ""
    consumer_secret: str = ""
    version: str = "wc/v3"
    query_string_auth: bool = True
    timeout: float = 30.0


@dataclass
class WebConfig:
    host: str = "0.0.0.0"
    port: int = 49990
    per_page: int = 10
    site_name: str = "Catalogue"


@dataclass
class Config:
    """Main configuration container."""
    woocommerce: WooCommerceConfig = field(default_factory=WooCommerceConfig)
    web: WebConfig = field(default_factory=WebConfig)

    @classmethod
    def load(cls, config_dir: Path | None = None) -> "Config":
        """Load configuration from yaml file and environment variables.

        Resolution order:
        1. SHOPADMIN_CONFIG_DIR env var → config_dir/shopadmin.yaml
        2. Explicit config_dir argument
        3. Default: ../config/shopadmin.yaml
        """
        env_dir = os.environ.get("SHOPADMIN_CONFIG_DIR")
        if env_dir:
            config_dir = Path(env_dir)
        elif config_dir is None:
            config_dir = Path(__file__).parent.parent / "config"

        yaml_path = config_dir / "shopadmin.yaml"
        load_dotenv(config_dir.parent / ".env", override=False)

        yaml_config = {}
        if yaml_path.exists():
            with open(yaml_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        woo_cfg = yaml_config.get("woocommerce", {})
        web_cfg = yaml_config.get("web", {})

        # Env vars override yaml for deployment-specific values and secrets
        site_url = (
            os.getenv("WORDPRESS_SITE_URL")
            or os.getenv("NEXT_PUBLIC_WORDPRESS_SITE_URL")
            or woo_cfg.get("url", "")
        )
        woocommerce = WooCommerceConfig(
            url=site_url.rstrip("/"),
            consumer_key=os.getenv("WOOCOMMERCE_CONSUMER_KEY", woo_cfg.get("consumer_key", "")),
            consumer_secret=os.getenv("WOOCOMMERCE_CONSUMER_SECRET", woo_cfg.get("consumer_secret", "")),
            version=woo_cfg.get("version", "wc/v3"),
            query_string_auth=bool(woo_cfg.get("query_string_auth", True)),
            timeout=float(woo_cfg.get("timeout", 30.0)),
        )

        port = os.getenv("SHOPADMIN_PORT")
        web = WebConfig(
            host=os.getenv("SHOPADMIN_HOST", web_cfg.get("host", "0.0.0.0")),
            port=int(port) if port else int(web_cfg.get("port", 49990)),
            per_page=int(web_cfg.get("per_page", 10)),
            site_name=web_cfg.get("site_name", "Catalogue"),
        )

        return cls(woocommerce=woocommerce, web=web)


def mask_secret(value: str, visible: int = 5) -> str:
    """Show only the first few characters of a credential."""
    if not value:
        return "(empty)"
    return value[:visible] + "…"
