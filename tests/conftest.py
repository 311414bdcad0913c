"""
SEEDi Test Configuration

Shared fixtures and test utilities.
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import pytest


# Set test environment before any imports
os.environ.setdefault("SEEDI_DEBUG", "true")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

# Keep storage and traces out of the user's home directory
_test_temp_dir = Path(tempfile.gettempdir()) / "seedi_test"
_test_temp_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("SEEDI_DB_PATH", str(_test_temp_dir / "seedi_test.db"))
os.environ.setdefault("SEEDI_TRACE_PATH", str(_test_temp_dir / "traces"))


@pytest.fixture(autouse=True)
def reset_settings() -> Generator[None, None, None]:
    """Reset settings and tracers before each test."""
    from seedi.config import reset_settings
    from seedi.observability import reset_tracers

    reset_settings()
    reset_tracers()
    yield
    reset_settings()
    reset_tracers()


@pytest.fixture
def innovation_record() -> dict[str, Any]:
    """One valid catalog record in wire (camelCase) shape."""
    return {
        "id": "inn-test",
        "name": "Hermetic Storage Bags",
        "description": "Airtight bags that stop insect damage in stored grain.",
        "category": "Post-Harvest Management",
        "challenges": ["Post-harvest losses", "Pest damage"],
        "readinessLevel": 9,
        "adoptionLevel": 7,
        "sdgAlignment": [12, 2, 2],
        "region": "East Africa",
        "cropTypes": ["Maize", "Beans"],
        "impactScore": 92,
        "feasibilityScore": 88,
        "sustainabilityScore": 78,
        "source": "ATIO KB v2.1",
        "riskLevel": "low",
        "scalability": "high",
        "provider": "PICS Network",
        "roleRelevance": {"Farmer": "Protects the harvest without chemicals"},
        "yieldImpact": 0,
        "lossReduction": 98,
        "incomePerHa": 650,
        "soilHealthImpact": 0,
    }


@pytest.fixture
def make_innovation(innovation_record: dict[str, Any]) -> Callable[..., Any]:
    """Factory: valid Innovation with snake_case overrides."""
    from seedi.core.schemas import Innovation

    def _make(**overrides: Any) -> Innovation:
        base = Innovation.model_validate(innovation_record)
        return Innovation.model_validate({**base.model_dump(), **overrides})

    return _make


@pytest.fixture
def abc_catalog(make_innovation):
    """A (East Africa, 85), B (All, 60), C (West Africa, 90)."""
    return (
        make_innovation(id="A", name="Alpha", region="East Africa", impact_score=85),
        make_innovation(id="B", name="Bravo", region="All", impact_score=60),
        make_innovation(id="C", name="Charlie", region="West Africa", impact_score=90),
    )


@pytest.fixture
def catalog():
    """Store backed by the bundled twelve-innovation catalog."""
    from seedi.catalog.store import CatalogStore

    return CatalogStore.bundled()


@pytest.fixture
def baseline():
    """Default farm baseline."""
    from seedi.core.schemas import Baseline

    return Baseline(soil_health=55, water_efficiency=60, biodiversity_index=45, post_harvest_loss=18)


@pytest.fixture
def complete_context() -> dict[str, str]:
    return {
        "role": "Farmer",
        "primaryObjective": "Reduce Losses",
        "region": "East Africa",
        "primaryCrop": "Maize",
    }


@pytest.fixture
def temp_db() -> Generator[Path, None, None]:
    """Temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test_seedi.db"
