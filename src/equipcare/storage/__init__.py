"""Persistence contract and in-memory store."""

from equipcare.storage.contracts import EquipmentRepository
from equipcare.storage.memory import InMemoryEquipmentStore

__all__ = ["EquipmentRepository", "InMemoryEquipmentStore"]
