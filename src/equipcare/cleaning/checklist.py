"""Required-item gating for cleaning checklist completion."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from equipcare.domain.errors import ValidationError
from equipcare.domain.models import ChecklistItem, CompletedItem


@dataclass(frozen=True, slots=True)
class ChecklistEvaluation:
    """Result of checking submitted items against a checklist."""

    passed: bool
    unmet_items: tuple[str, ...]


def evaluate_checklist(
    checklist: Sequence[ChecklistItem] | None,
    completed_items: Sequence[CompletedItem],
) -> ChecklistEvaluation:
    """Match each required item to the submitted entry at the same position."""
    if not checklist:
        return ChecklistEvaluation(passed=True, unmet_items=())

    unmet: list[str] = []
    for index, item in enumerate(checklist):
        if not item.is_required:
            continue
        entry = completed_items[index] if index < len(completed_items) else None
        if entry is None or entry.name != item.name or not entry.is_completed:
            unmet.append(item.name)

    return ChecklistEvaluation(passed=(len(unmet) == 0), unmet_items=tuple(unmet))


def can_complete(
    checklist: Sequence[ChecklistItem] | None,
    completed_items: Sequence[CompletedItem],
) -> bool:
    return evaluate_checklist(checklist, completed_items).passed


def require_checklist_complete(
    checklist: Sequence[ChecklistItem] | None,
    completed_items: Sequence[CompletedItem],
) -> None:
    """Raise ``ValidationError`` naming every unmet required item."""
    evaluation = evaluate_checklist(checklist, completed_items)
    if not evaluation.passed:
        raise ValidationError(f"required checklist items not completed: {', '.join(evaluation.unmet_items)}")


def coerce_completed_items(items: Iterable[CompletedItem | dict[str, object]]) -> tuple[CompletedItem, ...]:
    """Accept submitted items as models or ``{name, isCompleted}`` mappings."""
    coerced: list[CompletedItem] = []
    for raw in items:
        if isinstance(raw, CompletedItem):
            coerced.append(raw)
            continue
        coerced.append(
            CompletedItem(
                name=str(raw.get("name") or "").strip(),
                is_completed=bool(raw.get("isCompleted", raw.get("is_completed", False))),
            )
        )
    return tuple(coerced)


def validate_checklist_items(items: Iterable[ChecklistItem | dict[str, object]]) -> tuple[ChecklistItem, ...]:
    """Normalize checklist definitions, trimming names and rejecting empty ones."""
    normalized: list[ChecklistItem] = []
    for raw in items:
        if isinstance(raw, ChecklistItem):
            name, is_required = raw.name, raw.is_required
        else:
            name = str(raw.get("name") or "")
            is_required = bool(raw.get("isRequired", raw.get("is_required", False)))
        normalized.append(ChecklistItem(name=name.strip(), is_required=is_required))
    return tuple(normalized)
