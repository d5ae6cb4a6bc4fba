"""
Pytest configuration and shared fixtures for Aura tests.
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from typing import Generator

import pytest
import yaml

from aura.storage.memory import MemoryStore
from aura.trust.models import TrustLevel, TrustScore
from helpers import FailingStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def memory_store() -> MemoryStore:
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def failing_store() -> FailingStore:
    """Store that always fails."""
    return FailingStore()


@pytest.fixture
def sample_config(temp_dir: Path) -> Path:
    """Create a sample configuration file."""
    config_path = temp_dir / "aura.yaml"
    config_data = {
        "logging": {
            "log_level": "debug",
        },
        "storage": {
            "backend": "file",
            "path": str(temp_dir / "store.json"),
            "mapping_mode": "keyed",
        },
        "device": {
            "app_version": "2.3.0",
            "device_name": "CI Runner",
        },
        "api": {
            "port": 8080,
        },
    }
    with open(config_path, "w") as f:
        yaml.dump(config_data, f)
    return config_path


@pytest.fixture
def new_host_score() -> TrustScore:
    """Unverified host with no history."""
    return TrustScore(
        score=35,
        level=TrustLevel.RESTRICTED,
        verified_id=False,
        verified_business=False,
        completed_bookings=0,
        avg_response_time=0,
        cancellation_rate=0,
        dispute_count=0,
    )


@pytest.fixture
def struggling_host_score() -> TrustScore:
    """Verified host with slow responses, cancellations and disputes."""
    return TrustScore(
        score=45,
        level=TrustLevel.BUILDING,
        verified_id=True,
        verified_business=False,
        completed_bookings=10,
        avg_response_time=45,
        cancellation_rate=0.2,
        dispute_count=2,
    )
