"""Two-tier equipment catalog: built-in defaults plus per-store overrides."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from equipcare.domain.errors import NotFoundError, ValidationError


@dataclass(frozen=True, slots=True)
class EquipmentDefinition:
    """Catalog entry describing one kind of equipment."""

    equipment_id: str
    name: str
    category: str
    maintenance_interval_days: int

    def __post_init__(self) -> None:
        if not self.equipment_id.strip():
            raise ValidationError("equipment_id must not be empty")
        if not self.name.strip():
            raise ValidationError("name must not be empty")
        if not self.category.strip():
            raise ValidationError("category must not be empty")
        if self.maintenance_interval_days <= 0:
            raise ValidationError("maintenance_interval_days must be > 0")


DEFAULT_EQUIPMENT: tuple[EquipmentDefinition, ...] = (
    EquipmentDefinition("primary_fryers", "Primary Fryers", "cooking", 30),
    EquipmentDefinition("secondary_fryers", "Secondary Fryers", "cooking", 30),
    EquipmentDefinition("grills", "Grills", "cooking", 90),
    EquipmentDefinition("pressure_fryers", "Pressure Fryers", "cooking", 30),
    EquipmentDefinition("walk_in_cooler", "Walk-in Cooler", "refrigeration", 90),
    EquipmentDefinition("walk_in_freezer", "Walk-in Freezer", "refrigeration", 90),
    EquipmentDefinition("prep_coolers", "Prep Area Coolers", "refrigeration", 60),
    EquipmentDefinition("line_coolers", "Line Coolers", "refrigeration", 60),
    EquipmentDefinition("prep_tables", "Prep Tables", "preparation", 30),
    EquipmentDefinition("slicers", "Slicers", "preparation", 7),
    EquipmentDefinition("mixers", "Mixers", "preparation", 30),
    EquipmentDefinition("scales", "Scales", "preparation", 90),
    EquipmentDefinition("dish_machine", "Dish Machine", "cleaning", 30),
    EquipmentDefinition("sanitizer_dispensers", "Sanitizer Dispensers", "cleaning", 30),
    EquipmentDefinition("soap_dispensers", "Soap Dispensers", "cleaning", 30),
)


@dataclass(frozen=True, slots=True)
class EquipmentCatalog:
    """Read-only lookup where a store override replaces a whole default category."""

    defaults: tuple[EquipmentDefinition, ...] = DEFAULT_EQUIPMENT
    overrides: Mapping[str, tuple[EquipmentDefinition, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        for category, items in self.overrides.items():
            mismatched = [item.equipment_id for item in items if item.category != category]
            if mismatched:
                raise ValidationError(
                    f"override items must belong to category {category!r}: {', '.join(mismatched)}"
                )
        ids = [item.equipment_id for category in self.categories() for item in self.items_for(category)]
        duplicates = sorted({equipment_id for equipment_id in ids if ids.count(equipment_id) > 1})
        if duplicates:
            raise ValidationError(f"duplicate equipment ids in catalog: {', '.join(duplicates)}")

    def categories(self) -> tuple[str, ...]:
        """Categories in default order, followed by override-only categories."""
        ordered: list[str] = []
        for item in self.defaults:
            if item.category not in ordered:
                ordered.append(item.category)
        for category in self.overrides:
            if category not in ordered:
                ordered.append(category)
        return tuple(ordered)

    def items_for(self, category: str) -> tuple[EquipmentDefinition, ...]:
        """Effective definitions for a category."""
        override = self.overrides.get(category)
        if override is not None:
            return tuple(override)
        return tuple(item for item in self.defaults if item.category == category)

    def find(self, equipment_id: str) -> EquipmentDefinition:
        """Resolve one definition by id across effective categories."""
        for category in self.categories():
            for item in self.items_for(category):
                if item.equipment_id == equipment_id:
                    return item
        raise NotFoundError(f"equipment not in catalog: {equipment_id}")

    def with_category_override(
        self,
        category: str,
        items: Iterable[EquipmentDefinition],
    ) -> EquipmentCatalog:
        """Return a new catalog whose ``category`` resolves to ``items``."""
        if not category.strip():
            raise ValidationError("category must not be empty")
        merged = dict(self.overrides)
        merged[category] = tuple(items)
        return EquipmentCatalog(defaults=self.defaults, overrides=MappingProxyType(merged))
