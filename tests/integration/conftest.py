import os
import pytest

from common.providers.locking.redis_lock import RedisLock
from common.providers.messaging.rabbitmq import RabbitMQClient
from packages.generation.progress.redis_channel import RedisProgressChannel

# DB 1 keeps test keys away from a developer's local data
REDIS_TEST_URL = os.environ.get("REDIS_TEST_URL", "redis://localhost:6379/1")


@pytest.fixture
async def redis_lock():
    """
    Provide a Redis lock for integration tests.
    Requires Redis to be running (e.g., via docker-compose).
    """
    lock = RedisLock(url=REDIS_TEST_URL)
    try:
        connected = await lock.connect()
    except Exception as e:
        pytest.skip(f"Redis is not available: {e}")
    if not connected:
        pytest.skip("Redis is not available for integration tests")

    yield lock

    await lock.disconnect()


@pytest.fixture
async def redis_channel(redis_lock):
    """Redis progress channel; piggybacks on the lock fixture's availability check."""
    channel = RedisProgressChannel(url=REDIS_TEST_URL)
    yield channel
    await channel.close()


@pytest.fixture
async def rabbitmq_client():
    """
    Provide a RabbitMQ client for integration tests.
    Requires RabbitMQ to be running (e.g., via docker-compose).
    """
    client = RabbitMQClient()

    try:
        connected = await client.connect()
    except Exception as e:
        pytest.skip(f"RabbitMQ is not available: {e}")
    if not connected:
        pytest.skip("RabbitMQ is not available for integration tests")

    yield client

    await client.disconnect()
