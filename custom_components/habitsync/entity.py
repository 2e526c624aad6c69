"""Base entity classes for HabitSync integration."""

from __future__ import annotations

from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .coordinator import HabitSyncDataCoordinator


class HabitSyncCoordinatorEntity(CoordinatorEntity[HabitSyncDataCoordinator]):
    """Base entity class for HabitSync sensors with typed coordinator access."""

    @property
    def coordinator(self) -> HabitSyncDataCoordinator:
        """Return typed coordinator."""
        return object.__getattribute__(self, "_coordinator")

    @coordinator.setter
    def coordinator(self, value: HabitSyncDataCoordinator) -> None:
        object.__setattr__(self, "_coordinator", value)
