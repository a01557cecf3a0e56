"""Logistics bounded context — Delivery Lifecycle and Authorization.

Business users submit delivery requests, administrators assign drivers, and
drivers execute and report on deliveries. Users (the identity directory) and
deliveries live in the same context because every lifecycle decision reads
the caller's role synchronously.
"""

from protean.domain import Domain

from logistics.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

logistics = Domain(name="logistics")
