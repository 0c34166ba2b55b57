"""Ordering bounded context: bag drafts, wishlist, guest migration and checkout.

Drafts live in device storage while the shopper is anonymous and in the
per-user document store once they sign in. Pricing is recomputed from the
catalog on every read.
"""

import os

from protean.domain import Domain

from ordering.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging(log_dir=os.getenv("LOG_DIR"))

logger = get_logger(__name__)

# Domain Composition Root
ordering = Domain(name="ordering")
