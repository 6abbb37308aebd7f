"""Export plan timelines as ICS events, ICS to-dos, or a Google Tasks CSV."""
from __future__ import annotations

import csv
import io
import re
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from trip_prep.schemas import TripPlan

PRODID = "-//Trip Prep Planner//EN"
UID_DOMAIN = "tripprep"


def day_offset(label: str) -> int:
    """``T-7`` -> -7; ``Day of`` and unknown labels -> 0."""
    m = re.fullmatch(r"T-(\d+)", (label or "").strip())
    return -int(m.group(1)) if m else 0


def ics_escape(value: str) -> str:
    return (
        str(value or "")
        .replace("\\", "\\\\")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace(",", "\\,")
        .replace(";", "\\;")
    )


def export_filename(plan: TripPlan, prefix: str, ext: str) -> str:
    slug = re.sub(r"\s+", "-", (plan.basics.destination or "trip").strip()).lower() or "trip"
    return f"{prefix}-{slug}.{ext}"


def _start_date(plan: TripPlan) -> Optional[date]:
    try:
        return date.fromisoformat(plan.basics.dates.start)
    except ValueError:
        return None


def _stamp(now: Optional[datetime]) -> str:
    return (now or datetime.now(timezone.utc)).strftime("%Y%m%d") + "T000000Z"


def timeline_to_ics(plan: TripPlan, now: Optional[datetime] = None) -> Optional[str]:
    """One all-day event per timeline day; ``None`` without a start date."""
    start = _start_date(plan)
    if start is None:
        return None
    lines = ["BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{PRODID}"]
    for idx, entry in enumerate(plan.timeline):
        dt = (start + timedelta(days=day_offset(entry.day))).strftime("%Y%m%d")
        lines += [
            "BEGIN:VEVENT",
            f"UID:prep-{dt}-{idx}@{UID_DOMAIN}",
            f"DTSTAMP:{_stamp(now)}",
            f"DTSTART;VALUE=DATE:{dt}",
            f"DTEND;VALUE=DATE:{dt}",
            f"SUMMARY:{ics_escape(f'{entry.day} - Trip prep')}",
            f"DESCRIPTION:{ics_escape(chr(10).join(entry.tasks))}",
            "END:VEVENT",
        ]
    lines.append("END:VCALENDAR")
    return "\r\n".join(lines)


def reminders_to_ics(plan: TripPlan, now: Optional[datetime] = None) -> Optional[str]:
    """One to-do per timeline task plus one per smart must-have; ``None`` when there is nothing to export."""
    start = _start_date(plan)
    if start is None:
        return None
    stamp = _stamp(now)
    todos: List[str] = []
    uid = 0
    for entry in plan.timeline:
        due = (start + timedelta(days=day_offset(entry.day))).strftime("%Y%m%d")
        for task in entry.tasks:
            todos += [
                "BEGIN:VTODO",
                f"UID:prep-todo-{uid}@{UID_DOMAIN}",
                f"DTSTAMP:{stamp}",
                f"DUE;VALUE=DATE:{due}",
                f"SUMMARY:{ics_escape(task)}",
                f"DESCRIPTION:{ics_escape(entry.day)}",
                "END:VTODO",
            ]
            uid += 1
    for item in plan.smart_must_haves:
        todos += [
            "BEGIN:VTODO",
            f"UID:prep-todo-{uid}@{UID_DOMAIN}",
            f"DTSTAMP:{stamp}",
            f"SUMMARY:{ics_escape(item)}",
            "DESCRIPTION:Smart must-have",
            "END:VTODO",
        ]
        uid += 1
    if uid == 0:
        return None
    return "\r\n".join(["BEGIN:VCALENDAR", "VERSION:2.0", f"PRODID:{PRODID}", *todos, "END:VCALENDAR"])


def tasks_to_csv(plan: TripPlan) -> Optional[str]:
    """Google Tasks import format: Task, Notes, Due Date (blank without a start date)."""
    start = _start_date(plan)
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerow(["Task", "Notes", "Due Date"])
    rows = 0
    for entry in plan.timeline:
        due = (start + timedelta(days=day_offset(entry.day))).isoformat() if start else ""
        for task in entry.tasks:
            writer.writerow([task, entry.day, due])
            rows += 1
    for item in plan.smart_must_haves:
        writer.writerow([item, "Smart must-have", ""])
        rows += 1
    return buffer.getvalue() if rows else None
