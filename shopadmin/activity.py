"""
ShopAdmin Activity Log

One line per catalog action flowing through the admin, so an operator can
follow what was sent to the store without reading debug output.

Events:
- 📦 PRODUCT: Product reads and writes
- 🏷️ ATTR: Global attributes and terms
- 🗂️ CAT: Categories
- 🧬 VARIATION: Product variations
- ❌ WOO.ERR: Upstream failures
"""

import logging
import sys
from datetime import datetime
from enum import Enum
from pathlib import Path


class Event(Enum):
    """Event types for the activity log."""
    # Product events
    PRODUCT_LIST = "📦 LIST"
    PRODUCT_READ = "📦 READ"
    PRODUCT_CREATE = "📦 CREATE"
    PRODUCT_UPDATE = "📦 UPDATE"
    PRODUCT_DELETE = "📦 DELETE"

    # Catalog structure
    ATTRIBUTE = "🏷️ ATTR"
    CATEGORY = "🗂️ CAT"
    VARIATION = "🧬 VARIATION"

    # Upstream errors
    WOO_ERROR = "❌ WOO.ERR"

    # System events
    SYSTEM_START = "⚡ START"
    SYSTEM_STOP = "⚡ STOP"


class ActivityFormatter(logging.Formatter):
    """Compact formatter: time, event prefix, message."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        event = getattr(record, 'event', None)
        if event:
            prefix = event.value
        else:
            prefix = f"[{record.levelname}]"

        return f"{timestamp} {prefix} │ {record.getMessage()}"


class ActivityLog:
    """
    Central activity logger for ShopAdmin.

    Usage:
        from shopadmin.activity import activity

        activity.product_create("Sac Lou")
        activity.woo_error("PUT products/12", 400, "Invalid parameter(s): sku")
    """

    def __init__(self, name: str = "shopadmin.activity"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)
        self._configured = False

    def configure(self, log_file: Path | None = None, console: bool = True) -> None:
        """Configure activity log outputs."""
        if self._configured:
            return

        formatter = ActivityFormatter()

        if console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        # Don't propagate to root logger (avoid duplicate output)
        self.logger.propagate = False
        self._configured = True

    def _log(self, event: Event, message: str) -> None:
        if not self._configured:
            self.configure()
        self.logger.info(message, extra={'event': event})

    # === Product events ===

    def product_list(self, page: int | str, search: str = "", count: int | None = None) -> None:
        msg = f"page {page}"
        if search:
            msg += f' search="{search}"'
        if count is not None:
            msg += f" → {count} product(s)"
        self._log(Event.PRODUCT_LIST, msg)

    def product_read(self, product_id: int | str) -> None:
        self._log(Event.PRODUCT_READ, f"#{product_id}")

    def product_create(self, name: str, product_id: int | str | None = None) -> None:
        if product_id is not None:
            self._log(Event.PRODUCT_CREATE, f"#{product_id} {name}")
        else:
            self._log(Event.PRODUCT_CREATE, name)

    def product_update(self, product_id: int | str, name: str = "") -> None:
        self._log(Event.PRODUCT_UPDATE, f"#{product_id} {name}".rstrip())

    def product_delete(self, product_id: int | str) -> None:
        self._log(Event.PRODUCT_DELETE, f"#{product_id}")

    # === Catalog structure ===

    def attribute(self, action: str, target: str = "") -> None:
        self._log(Event.ATTRIBUTE, f"{action} {target}".rstrip())

    def category(self, action: str, target: str = "") -> None:
        self._log(Event.CATEGORY, f"{action} {target}".rstrip())

    def variation(self, action: str, product_id: int | str, variation_id: int | str | None = None) -> None:
        target = f"product #{product_id}"
        if variation_id is not None:
            target += f" variation #{variation_id}"
        self._log(Event.VARIATION, f"{action} {target}")

    # === Errors ===

    def woo_error(self, call: str, status: int | None, message: str) -> None:
        """Log an upstream failure."""
        code = status if status is not None else "---"
        preview = message[:120] + "..." if len(message) > 120 else message
        self._log(Event.WOO_ERROR, f"{call} [{code}] {preview}")

    # === System events ===

    def start(self, component: str) -> None:
        self._log(Event.SYSTEM_START, component)

    def stop(self, component: str) -> None:
        self._log(Event.SYSTEM_STOP, component)


# Global activity log instance
activity = ActivityLog()
