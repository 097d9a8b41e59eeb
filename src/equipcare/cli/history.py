"""CLI for offline inspection of exported maintenance history."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Sequence

from equipcare.cleaning.recurrence import DEFAULT_INTERVAL_DAYS, RecurrencePolicy, compute_next_due, parse_frequency
from equipcare.domain.errors import EquipCareError, ValidationError
from equipcare.domain.models import CleaningSchedule
from equipcare.history.incidents import reconstruct_incidents
from equipcare.integration.payloads import incident_to_jsonable, normalize_record_batch, parse_timestamp

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create CLI parser for history inspection commands."""
    parser = argparse.ArgumentParser(
        prog="equipcare-history",
        description="Reconstruct repair incidents and preview cleaning due dates from exported data.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Logging verbosity written to stderr.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    incidents = subparsers.add_parser(
        "incidents",
        help="Group a maintenance-history export into incidents.",
    )
    incidents.add_argument(
        "--records",
        type=Path,
        required=True,
        help="JSON list of records, or an equipment document with maintenanceHistory.",
    )
    incidents.add_argument(
        "--equipment-id",
        default=None,
        help="Equipment id applied to records that do not carry one.",
    )
    incidents.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write incidents JSON here instead of stdout.",
    )

    next_due = subparsers.add_parser(
        "next-due",
        help="Preview the next due date produced by a cleaning completion.",
    )
    next_due.add_argument("--frequency", required=True, help="Cleaning frequency token.")
    next_due.add_argument("--due", required=True, help="Current next-due timestamp (ISO-8601).")
    next_due.add_argument("--completed", required=True, help="Completion timestamp (ISO-8601).")
    next_due.add_argument(
        "--early",
        action="store_true",
        help="Treat the completion as early, re-anchoring the cadence at completion.",
    )
    next_due.add_argument(
        "--interval",
        action="append",
        default=[],
        metavar="FREQUENCY=DAYS",
        help="Override one frequency interval; may be repeated.",
    )
    return parser


def run_incidents(args: argparse.Namespace) -> dict[str, Any]:
    payload = json.loads(Path(args.records).read_text(encoding="utf-8"))
    equipment_id = args.equipment_id
    if isinstance(payload, dict):
        document_id = payload.get("equipmentId")
        if equipment_id is None and isinstance(document_id, str):
            equipment_id = document_id
        payload = payload.get("maintenanceHistory", [])
    if not isinstance(payload, list):
        raise ValidationError("records file must hold a list or a maintenanceHistory document")

    records = normalize_record_batch(payload, equipment_id=equipment_id)
    incidents = reconstruct_incidents(records)
    logger.info("reconstructed %d incidents from %d records", len(incidents), len(records))
    return {
        "equipmentId": equipment_id,
        "recordCount": len(records),
        "incidents": [incident_to_jsonable(incident) for incident in incidents],
    }


def run_next_due(args: argparse.Namespace) -> dict[str, Any]:
    policy = _policy_from_overrides(args.interval)
    frequency = parse_frequency(args.frequency)
    due = parse_timestamp(args.due, field_name="due")
    completed = parse_timestamp(args.completed, field_name="completed")
    schedule = CleaningSchedule(name="preview", frequency=frequency, next_due=due)
    next_due = compute_next_due(schedule, completed, bool(args.early), policy=policy)
    return {
        "frequency": frequency.value,
        "intervalDays": policy.interval_days[frequency],
        "isEarly": bool(args.early),
        "nextDue": next_due.isoformat(),
    }


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "incidents":
            report = run_incidents(args)
        else:
            report = run_next_due(args)
    except (EquipCareError, OSError, json.JSONDecodeError) as exc:
        print(f"[ERROR] {args.command} failed: {exc}", file=sys.stderr)
        return 2

    output = getattr(args, "output", None)
    if output is not None:
        _write_json(Path(output), report)
        print(f"incidents: {output}")
    else:
        print(json.dumps(report, indent=2, sort_keys=True))
    return 0


def _policy_from_overrides(overrides: Sequence[str]) -> RecurrencePolicy:
    if not overrides:
        return RecurrencePolicy()
    intervals = dict(DEFAULT_INTERVAL_DAYS)
    for raw in overrides:
        token, sep, days = raw.partition("=")
        if not sep:
            raise ValidationError(f"interval override must look like FREQUENCY=DAYS: {raw!r}")
        frequency = parse_frequency(token)
        try:
            intervals[frequency] = int(days)
        except ValueError as exc:
            raise ValidationError(f"interval days must be an integer: {raw!r}") from exc
    return RecurrencePolicy(interval_days=intervals)


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")


if __name__ == "__main__":
    raise SystemExit(main())
