"""Tests for the StorageManager."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from homeassistant.core import HomeAssistant

from custom_components.grow_targets.models import Plant
from custom_components.grow_targets.storage_manager import StorageManager

PLANT_ID = "test_plant"
PROFILE = {
    "name": "Northern Lights",
    "stages": [{"name": "Veg", "duration_days": 21}],
    "environment_targets": {"Veg": {"temp": 24}},
}


@pytest.fixture
def mock_coordinator() -> MagicMock:
    """Mock the GrowTargetsCoordinator."""
    coordinator = MagicMock()
    coordinator.plants = {}
    coordinator.profiles = {}
    return coordinator


@pytest.fixture
def mock_hass() -> MagicMock:
    """Mock Home Assistant instance."""
    return MagicMock(spec=HomeAssistant)


@pytest.fixture
def mock_store():
    """Mock the Store class."""
    with patch(
        "custom_components.grow_targets.storage_manager.Store"
    ) as mock_store_cls:
        mock_store_instance = mock_store_cls.return_value
        mock_store_instance.async_load = AsyncMock()
        mock_store_instance.async_save = AsyncMock()
        yield mock_store_instance


@pytest.fixture
def storage_manager(mock_coordinator, mock_hass, mock_store) -> StorageManager:
    """Fixture for StorageManager."""
    return StorageManager(mock_coordinator, mock_hass)


async def test_initialization(
    storage_manager: StorageManager, mock_coordinator, mock_hass
):
    """Test initialization."""
    assert storage_manager.coordinator == mock_coordinator
    assert storage_manager.hass == mock_hass
    assert storage_manager.store is not None


async def test_async_save(
    storage_manager: StorageManager, mock_coordinator, mock_store
):
    """Test saving data."""
    plant = Plant(plant_id=PLANT_ID, start_date="2024-05-01", strain="Northern Lights")
    mock_coordinator.plants = {PLANT_ID: plant}
    mock_coordinator.profiles = {"Northern Lights": PROFILE}

    await storage_manager.async_save()

    mock_store.async_save.assert_awaited_once()
    saved_data = mock_store.async_save.call_args[0][0]

    assert saved_data["plants"][PLANT_ID]["start_date"] == "2024-05-01"
    assert saved_data["plants"][PLANT_ID]["strain"] == "Northern Lights"
    assert saved_data["profiles"] == {"Northern Lights": PROFILE}


async def test_async_load_no_data(
    storage_manager: StorageManager, mock_store, mock_coordinator
):
    """Test loading when no data exists."""
    mock_store.async_load.return_value = None

    await storage_manager.async_load()

    assert mock_coordinator.plants == {}
    assert mock_coordinator.profiles == {}


async def test_async_load_with_data(
    storage_manager: StorageManager, mock_store, mock_coordinator
):
    """Test loading plants and profiles."""
    mock_store.async_load.return_value = {
        "plants": {
            PLANT_ID: {
                "plant_id": PLANT_ID,
                "start_date": "2024-05-01",
                "strain": "Northern Lights",
            }
        },
        "profiles": {"Northern Lights": PROFILE},
    }

    await storage_manager.async_load()

    plant = mock_coordinator.plants[PLANT_ID]
    assert isinstance(plant, Plant)
    assert plant.strain == "Northern Lights"
    assert mock_coordinator.profiles == {"Northern Lights": PROFILE}


async def test_async_load_migrates_legacy_fields(
    storage_manager: StorageManager, mock_store, mock_coordinator
):
    """Legacy plant fields are migrated and unknown fields dropped."""
    mock_store.async_load.return_value = {
        "plants": {
            PLANT_ID: {
                "strain_name": "Northern Lights",
                "current_stage": "veg",
                "row": 3,
            }
        }
    }

    await storage_manager.async_load()

    plant = mock_coordinator.plants[PLANT_ID]
    assert plant.plant_id == PLANT_ID
    assert plant.strain == "Northern Lights"
    assert plant.last_displayed_stage == "veg"


async def test_async_load_skips_bad_entries(
    storage_manager: StorageManager, mock_store, mock_coordinator
):
    """Entries that are not mappings are skipped."""
    mock_store.async_load.return_value = {
        "plants": {"bad": "not a dict", PLANT_ID: {"plant_id": PLANT_ID}},
        "profiles": {"bad": ["list"], "Northern Lights": PROFILE},
    }

    await storage_manager.async_load()

    assert list(mock_coordinator.plants) == [PLANT_ID]
    assert list(mock_coordinator.profiles) == ["Northern Lights"]
