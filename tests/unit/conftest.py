"""Fixtures for unit tests."""

from datetime import datetime, timedelta, timezone
from typing import Callable, Generator

import pytest
import structlog

from donder_release.configuration.models import ReleaseConfig
from donder_release.git.models import RawCommit

BASE_TIME = datetime(2026, 10, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def configure_structlog_for_caplog() -> Generator[None, None, None]:
    """Configure structlog for use with caplog."""
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_raw_commit() -> Callable[..., RawCommit]:
    """Factory for raw commits with deterministic hashes and dates."""
    counter = {"value": 0}

    def _make(message: str, commit_hash: str | None = None) -> RawCommit:
        counter["value"] += 1
        index = counter["value"]
        return RawCommit(
            hash=commit_hash or f"{index:07x}" + "0" * 33,
            message=message,
            authored_at=BASE_TIME + timedelta(days=index),
        )

    return _make


@pytest.fixture
def release_config() -> ReleaseConfig:
    """A configuration publishing to octo/widgets."""
    return ReleaseConfig(repo="octo/widgets", github_token="token")
