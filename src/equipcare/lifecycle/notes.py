"""Text conventions embedded in issue strings and maintenance notes.

Severity, progress tags and repair details are carried inside free text
rather than separate fields, so formatting and parsing live side by side here.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from math import isfinite

from equipcare.domain.errors import ValidationError
from equipcare.domain.models import Severity, UpdateTag

_SEVERITY_PATTERN = re.compile(r"^\[(LOW|MEDIUM|HIGH)\]\s*")
_TAG_PATTERN = re.compile(r"^\[([A-Z ]+)\]\s*")
_COST_PATTERN = re.compile(r"Cost:\s*\$(\d+(?:\.\d+)?)", re.IGNORECASE)
_REPAIRED_BY_PATTERN = re.compile(r"Repaired by:\s*(.+)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class RepairDetails:
    """Structured view of a resolution note."""

    notes: str
    cost: float | None = None
    repaired_by: str | None = None


def coerce_severity(raw: Severity | str | None) -> Severity:
    """Normalize caller severity input; ``None`` means medium."""
    if raw is None:
        return Severity.MEDIUM
    if isinstance(raw, Severity):
        return raw
    token = raw.strip().lower()
    try:
        return Severity(token)
    except ValueError as exc:
        raise ValidationError(f"severity must be one of low, medium, high: {raw!r}") from exc


def format_issue(severity: Severity | str | None, description: str) -> str:
    """Render ``[SEVERITY] description``."""
    text = description.strip()
    if not text:
        raise ValidationError("issue description must not be empty")
    return f"[{coerce_severity(severity).value.upper()}] {text}"


def parse_severity(issue: str) -> Severity:
    """Severity tag of an issue string, defaulting to medium when untagged."""
    match = _SEVERITY_PATTERN.match(issue)
    if match is None:
        return Severity.MEDIUM
    return Severity(match.group(1).lower())


def strip_severity(issue: str) -> str:
    """Issue text with any leading severity tag removed."""
    return _SEVERITY_PATTERN.sub("", issue, count=1).strip()


def parse_update_tag(notes: str) -> UpdateTag | None:
    """Leading progress tag of a note, if it is a known one."""
    match = _TAG_PATTERN.match(notes)
    if match is None:
        return None
    try:
        return UpdateTag(match.group(1))
    except ValueError:
        return None


def format_update_note(notes: str, tag: UpdateTag | str | None = None) -> str:
    """Prefix a progress note with its tag unless it already carries one."""
    text = notes.strip()
    if not text:
        raise ValidationError("update notes must not be empty")
    if parse_update_tag(text) is not None:
        return text
    if tag is None:
        resolved = UpdateTag.UPDATE
    elif isinstance(tag, UpdateTag):
        resolved = tag
    else:
        try:
            resolved = UpdateTag(tag.strip().upper().replace("_", " "))
        except ValueError as exc:
            raise ValidationError(f"unknown update tag: {tag!r}") from exc
    return f"[{resolved.value}] {text}"


def format_repair_notes(
    notes: str,
    *,
    cost: float | None = None,
    repaired_by: str | None = None,
) -> str:
    """Append ``Cost: $X`` and ``Repaired by: Y`` lines to resolution notes."""
    text = notes.strip()
    if not text:
        raise ValidationError("repair notes must not be empty")

    lines = [text]
    if cost is not None:
        if isinstance(cost, bool) or not isfinite(cost):
            raise ValidationError("cost must be a finite number")
        if cost < 0:
            raise ValidationError("cost must be >= 0")
        lines.append(f"Cost: ${_format_amount(cost)}")
    if repaired_by is not None and repaired_by.strip():
        lines.append(f"Repaired by: {repaired_by.strip()}")
    return "\n".join(lines)


def parse_repair_notes(notes: str) -> RepairDetails:
    """Split a resolution note into body, cost and repairer."""
    cost: float | None = None
    repaired_by: str | None = None
    body: list[str] = []

    for line in notes.splitlines():
        remaining = line
        stripped_field = False
        cost_match = _COST_PATTERN.search(remaining)
        if cost_match is not None:
            if cost is None:
                cost = float(cost_match.group(1))
            remaining = _COST_PATTERN.sub("", remaining)
            stripped_field = True
        repaired_match = _REPAIRED_BY_PATTERN.search(remaining)
        if repaired_match is not None:
            if repaired_by is None:
                repaired_by = repaired_match.group(1).strip()
            remaining = _REPAIRED_BY_PATTERN.sub("", remaining)
            stripped_field = True
        if stripped_field:
            remaining = remaining.strip().rstrip(",;").rstrip()
            if not remaining:
                continue
        body.append(remaining)

    return RepairDetails(notes="\n".join(body).strip(), cost=cost, repaired_by=repaired_by)


def _format_amount(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.2f}"
