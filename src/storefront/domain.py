"""Domain initialization and configuration.

A single ``storefront`` domain hosts every aggregate so that order placement
can create the order and decrement product stock inside one Unit of Work.
Configuration lives in ``domain.toml`` beside this module; ``PROTEAN_ENV``
selects the overlay (``test``, ``production``).
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
