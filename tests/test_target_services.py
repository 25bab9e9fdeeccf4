"""Test the services that report environment targets."""

from unittest.mock import AsyncMock, Mock

import pytest
from homeassistant.core import ServiceCall
from homeassistant.exceptions import ServiceValidationError

from custom_components.grow_targets.services.targets import (
    handle_get_timeline,
    handle_optimize_settings,
)

OPTIMIZATION = {
    "plant_id": "p1",
    "state": "needs_optimization",
    "matched": False,
    "target": {"stage": "Veg", "temperature": 24},
    "delta": {"target_temp": 24},
    "current": {"target_temp": 20},
    "settings": {"target_temp": 24},
}


@pytest.fixture
def mock_coordinator():
    """Create a mock coordinator."""
    coordinator = Mock()
    coordinator.get_plant = Mock(return_value=Mock(plant_id="p1"))
    coordinator.async_optimize_settings = AsyncMock(return_value=OPTIMIZATION)
    coordinator.get_timeline = Mock(return_value={"plant_id": "p1", "stages": []})
    return coordinator


async def test_handle_optimize_settings(mock_coordinator):
    """The optimization result is returned as the service response."""
    call = Mock(spec=ServiceCall)
    call.data = {"plant_id": "p1"}

    response = await handle_optimize_settings(Mock(), mock_coordinator, call)

    assert response == OPTIMIZATION
    mock_coordinator.async_optimize_settings.assert_awaited_once_with("p1")


async def test_handle_get_timeline(mock_coordinator):
    """The timeline is returned as the service response."""
    call = Mock(spec=ServiceCall)
    call.data = {"plant_id": "p1"}

    response = await handle_get_timeline(Mock(), mock_coordinator, call)

    assert response == {"plant_id": "p1", "stages": []}


@pytest.mark.parametrize("handler", [handle_optimize_settings, handle_get_timeline])
async def test_unknown_plant(mock_coordinator, handler):
    """Both services reject an unknown plant."""
    mock_coordinator.get_plant.return_value = None
    call = Mock(spec=ServiceCall)
    call.data = {"plant_id": "missing"}

    with pytest.raises(ServiceValidationError, match="Plant 'missing' not found"):
        await handler(Mock(), mock_coordinator, call)

    mock_coordinator.async_optimize_settings.assert_not_awaited()
    mock_coordinator.get_timeline.assert_not_called()
