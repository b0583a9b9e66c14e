# tests/integration/conftest.py — v8
"""Shared fixtures for integration tests using testcontainers.

Container lifecycle:
- session scope: containers start once per pytest session
- function scope: fresh database / cache namespace per test for isolation

Custom container wrappers:
- Uses DockerContainer directly with bridge network IP + internal port
- Required for devcontainer with docker-outside-of-docker (socket mount)

Tests using these fixtures are skipped when no Docker daemon is reachable.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest
import pytest_asyncio

logger = logging.getLogger(__name__)


# ── Pytest markers ──────────────────────────────────────────────


def pytest_configure(config):
    config.addinivalue_line("markers", "redis: marks tests requiring Redis container")
    config.addinivalue_line("markers", "mongodb: marks tests requiring MongoDB container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================


def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries.

    In docker-outside-of-docker setups the containers run on the host daemon
    and are reached through their bridge IP, not localhost.
    """
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info(
                        "Container %s IP: %s (network: %s, attempt %d)",
                        wrapped.short_id, ip, net_name, attempt + 1,
                    )
                    return ip
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)
    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  REDIS CONTAINER — session scope (bridge IP)
# =====================================================================

REDIS_IMAGE = "redis:7.4-alpine"
REDIS_INTERNAL_PORT = 6379


@pytest.fixture(scope="session")
def redis_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(REDIS_IMAGE).with_exposed_ports(REDIS_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Ready to accept connections", timeout=60)

    ip = _get_container_bridge_ip(container)
    logger.info("Redis ready at %s:%d", ip, REDIS_INTERNAL_PORT)
    yield {"host": ip, "port": REDIS_INTERNAL_PORT}
    container.stop()


@pytest.fixture(scope="session")
def redis_url(redis_container) -> str:
    c = redis_container
    return f"redis://{c['host']}:{c['port']}/0"


# =====================================================================
#  MONGODB CONTAINER — session scope (bridge IP)
# =====================================================================

MONGO_IMAGE = "mongo:7.0"
MONGO_INTERNAL_PORT = 27017


@pytest.fixture(scope="session")
def mongodb_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(MONGO_IMAGE).with_exposed_ports(MONGO_INTERNAL_PORT)
    container.start()
    wait_for_logs(container, predicate=r"Waiting for connections", timeout=90)

    ip = _get_container_bridge_ip(container)
    logger.info("MongoDB ready at %s:%d", ip, MONGO_INTERNAL_PORT)
    yield {"host": ip, "port": MONGO_INTERNAL_PORT}
    container.stop()


@pytest.fixture(scope="session")
def mongodb_uri(mongodb_container) -> str:
    c = mongodb_container
    return f"mongodb://{c['host']}:{c['port']}"


# =====================================================================
#  LIVE BACKENDS — function scope
# =====================================================================


@pytest.fixture
def unique_name() -> str:
    return f"test_{uuid.uuid4().hex[:8]}"


@pytest_asyncio.fixture
async def redis_cache(redis_url):
    from books_datastore.cache.redis_store import RedisCacheStore

    store = RedisCacheStore(redis_url=redis_url)
    yield store
    await store.flush_all()
    await store.close()


@pytest_asyncio.fixture
async def mongo_documents(mongodb_uri, unique_name):
    from books_datastore.documents.mongo_store import MongoDocumentStore

    store = MongoDocumentStore(uri=mongodb_uri, database=unique_name, timeout_ms=5000)
    yield store
    await store._client.drop_database(unique_name)
    await store.close()


@pytest_asyncio.fixture
async def live_datastore(mongo_documents, redis_cache, unique_name):
    from books_datastore.datastore.datastore import Datastore

    return Datastore(documents=mongo_documents, cache=redis_cache, cache_namespace=unique_name)
