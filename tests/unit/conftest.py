import pytest
from unittest.mock import AsyncMock, MagicMock, patch


@pytest.fixture
def mock_storage():
    """Create a mock storage instance for testing."""
    storage = AsyncMock()
    storage.upload = AsyncMock(return_value=True)
    storage.get_presigned_url = AsyncMock(return_value="https://mock-presigned-url.com")
    storage.get_storage_uri = AsyncMock(return_value="s3://mock-bucket/mock-key")
    return storage


@pytest.fixture(autouse=True)
def mock_get_storage(mock_storage):
    """Automatically mock get_storage for all unit tests."""
    with patch(
        "packages.generation.services.orchestrator.get_storage",
        return_value=mock_storage,
    ):
        yield


@pytest.fixture
def mock_message_queue():
    """Create a mock message queue instance for testing."""
    queue = AsyncMock()
    queue.declare_queue = AsyncMock(return_value=True)
    queue.publish = AsyncMock(return_value=True)
    queue.connect = AsyncMock(return_value=True)
    queue.disconnect = AsyncMock(return_value=None)
    return queue


@pytest.fixture(autouse=True)
def mock_get_message_queue(mock_message_queue):
    """Automatically mock get_message_queue for all unit tests."""
    with patch(
        "packages.assets.services.asset_queue_service.get_message_queue",
        return_value=mock_message_queue,
    ):
        yield


@pytest.fixture
def mock_lock_provider():
    """Create a mock lock provider instance for testing."""
    lock = AsyncMock()
    lock.acquire_lock = AsyncMock(return_value="test-lock-token")
    lock.acquire_lock_with_retry = AsyncMock(return_value="test-lock-token")
    lock.release_lock = AsyncMock(return_value=True)
    lock.extend_lock = AsyncMock(return_value=True)
    lock.is_locked = AsyncMock(return_value=False)
    return lock


@pytest.fixture(autouse=True)
def mock_get_lock_provider(memory_lock):
    """Automatically use an in-process lock wherever the ledger builds its own."""
    with patch(
        "packages.credits.services.ledger_service.get_lock_provider",
        return_value=memory_lock,
    ):
        yield


@pytest.fixture
def mock_span():
    """Create a mock span instance for testing telemetry."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=None)
    return span


@pytest.fixture
def mock_start_span(mock_span):
    """Create a mock start_span function that returns mock_span."""
    with patch(
        "common.core.otel_axiom_exporter.axiom_tracer.start_as_current_span",
        return_value=mock_span,
    ) as mock:
        yield mock
