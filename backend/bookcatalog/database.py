"""
Book Catalog — Document Store Connection
==========================================

What:  Creation, health probing and disposal of the MongoDB client.
Why:   A single pooled client per process; the driver multiplexes
       concurrent requests over it.
How:   The application lifespan creates one AsyncMongoClient from Settings,
       hands the books collection to the repository, and closes the client
       on shutdown. Nothing here is module-level state.
Who:   bookcatalog.main (lifespan) and routes/health.py.

Connection settings:
    connectTimeoutMS / serverSelectionTimeoutMS: settings.mongodb_timeout_ms
    (default 2000 ms). There are no retries beyond what the driver does
    within that window.
"""

import logging

from pymongo import AsyncMongoClient
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from bookcatalog.config import Settings

logger = logging.getLogger(__name__)


def create_client(settings: Settings) -> AsyncMongoClient:
    """
    Build the MongoDB client.

    The driver connects lazily; the first operation (or `ping`) opens the
    connection pool.
    """
    client = AsyncMongoClient(
        settings.mongodb_url,
        connectTimeoutMS=settings.mongodb_timeout_ms,
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
    )
    logger.info(
        "MongoDB client created (database=%s, collection=%s, timeout=%dms)",
        settings.database_name,
        settings.collection_name,
        settings.mongodb_timeout_ms,
    )
    return client


def get_collection(client: AsyncMongoClient, settings: Settings) -> AsyncCollection:
    """Return the collection holding book documents."""
    return client[settings.database_name][settings.collection_name]


async def ping(client: AsyncMongoClient) -> bool:
    """
    Check that the server answers a `ping` command.

    Returns False instead of raising; used at startup and by /health.
    """
    try:
        await client.admin.command("ping")
    except PyMongoError as e:
        logger.warning("MongoDB ping failed: %s", str(e))
        return False
    return True


async def dispose_client(client: AsyncMongoClient) -> None:
    """Close all pooled connections. Called during application shutdown."""
    await client.close()
    logger.info("MongoDB client closed")
