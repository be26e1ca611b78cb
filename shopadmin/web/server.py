"""
ShopAdmin Web Server

aiohttp-based catalog admin with Jinja2 pages (HTMX for the live pricing
section) and a JSON /api proxy in front of the WooCommerce REST API.
"""

import logging
from pathlib import Path

import aiohttp_jinja2
import jinja2
from aiohttp import web

from shopadmin.acf import format_number
from shopadmin.config import Config
from shopadmin.services.woocommerce import WooCommerceClient

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
STATIC_DIR = Path(__file__).parent / "static"


def create_app(config: Config, woo: WooCommerceClient) -> web.Application:
    """Build the application; the client session follows the app lifecycle."""
    app = web.Application()
    app["config"] = config
    app["woo"] = woo

    async def _start_client(app: web.Application) -> None:
        await woo.start()

    async def _stop_client(app: web.Application) -> None:
        await woo.stop()

    app.on_startup.append(_start_client)
    app.on_cleanup.append(_stop_client)

    env = aiohttp_jinja2.setup(
        app,
        loader=jinja2.FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=jinja2.select_autoescape(["html"]),
    )
    env.globals["site_name"] = config.web.site_name
    env.filters["num"] = format_number

    _setup_routes(app)
    return app


def _setup_routes(app: web.Application) -> None:
    """Register all route handlers."""
    from shopadmin.web.routes.api_products import routes as api_product_routes
    from shopadmin.web.routes.api_attributes import routes as api_attribute_routes
    from shopadmin.web.routes.api_categories import routes as api_category_routes
    from shopadmin.web.routes.api_variations import routes as api_variation_routes
    from shopadmin.web.routes.products import routes as product_page_routes

    app.router.add_routes(api_product_routes)
    app.router.add_routes(api_attribute_routes)
    app.router.add_routes(api_category_routes)
    app.router.add_routes(api_variation_routes)
    app.router.add_routes(product_page_routes)

    # Static files
    app.router.add_static("/static", STATIC_DIR, name="static")


class WebServer:
    """Runs the admin application on a TCP site."""

    def __init__(
        self,
        config: Config,
        woo: WooCommerceClient,
        host: str = "0.0.0.0",
        port: int = 49990,
    ):
        self.host = host
        self.port = port
        self.app = create_app(config, woo)
        self._runner: web.AppRunner | None = None

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Admin started at http://{self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Admin stopped")
