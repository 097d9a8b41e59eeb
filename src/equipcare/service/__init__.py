"""Serialized mutation facade over the equipment lifecycle core."""

from equipcare.service.aggregate import EquipmentAggregate

__all__ = ["EquipmentAggregate"]
