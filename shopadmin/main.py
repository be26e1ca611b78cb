#!/usr/bin/env python3
"""
ShopAdmin Service

Main entry point: loads the store configuration, opens the WooCommerce
client and serves the catalog admin until SIGINT/SIGTERM.
"""

import asyncio
import logging
import signal
import sys
from pathlib import Path

from shopadmin.activity import activity
from shopadmin.config import Config, mask_secret
from shopadmin.services.woocommerce import WooCommerceClient
from shopadmin.web.server import WebServer

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("shopadmin")


async def main() -> None:
    """Main application entry point."""
    logger.info("=" * 50)
    logger.info("ShopAdmin starting...")
    logger.info("=" * 50)

    activity_log_file = Path(__file__).parent.parent / "logs" / "activity.log"
    activity.configure(log_file=activity_log_file, console=True)

    config = Config.load()
    woo_cfg = config.woocommerce

    if not woo_cfg.url:
        logger.error("WORDPRESS_SITE_URL not set in .env file!")
        logger.error("Please copy .env.example to .env and configure your store.")
        sys.exit(1)

    logger.info(f"Store URL: {woo_cfg.url}")
    logger.info(f"Consumer key: {mask_secret(woo_cfg.consumer_key)}")
    logger.info(f"Consumer secret: {mask_secret(woo_cfg.consumer_secret)}")
    if not woo_cfg.consumer_key or not woo_cfg.consumer_secret:
        logger.warning("WooCommerce credentials missing - every API call will be rejected!")

    woo = WooCommerceClient(
        url=woo_cfg.url,
        consumer_key=woo_cfg.consumer_key,
        consumer_secret=woo_cfg.consumer_secret,
        version=woo_cfg.version,
        query_string_auth=woo_cfg.query_string_auth,
        timeout=woo_cfg.timeout,
    )
    web_server = WebServer(config, woo, host=config.web.host, port=config.web.port)

    shutdown_event = asyncio.Event()

    def handle_shutdown(sig: signal.Signals) -> None:
        logger.info(f"Received {sig.name}, initiating shutdown...")
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, handle_shutdown, sig)

    try:
        await web_server.start()
        activity.start(config.web.site_name)

        logger.info("")
        logger.info(f"🛍️  {config.web.site_name} admin is running!")
        logger.info(f"   Web GUI: http://{config.web.host}:{config.web.port}/products")
        logger.info("")
        logger.info("Press Ctrl+C to stop")

        await shutdown_event.wait()

    except Exception as e:
        logger.exception(f"Error running admin: {e}")
    finally:
        try:
            # Cleanup also closes the WooCommerce session (app on_cleanup)
            await asyncio.wait_for(web_server.stop(), timeout=8.0)
        except asyncio.TimeoutError:
            logger.warning("Cleanup timed out after 8s, exiting anyway")
        except Exception:
            logger.exception("Error during cleanup")

        activity.stop(config.web.site_name)
        logger.info("ShopAdmin stopped.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
