"""
Cook log export.

Serializes the history buffer to CSV:

    Timestamp,Pit Temp,Meat 1 Temp,Fan Speed
    2024-05-04T14:00:00.000Z,225.3,150.1,42

Timestamps are ISO-8601 UTC with milliseconds; temperatures have one decimal.
"""

import csv
import io
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from .models import Sample

CSV_HEADER = ["Timestamp", "Pit Temp", "Meat 1 Temp", "Fan Speed"]


def _format_timestamp(ts: datetime) -> str:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_csv(history: Sequence[Sample], current_fan_duty: Optional[int]) -> str:
    """Render the buffered samples as a cook log.

    Args:
        history: Samples, oldest first
        current_fan_duty: Fan duty written on every row. Pass None to write
            each sample's own fan duty instead.

    Returns:
        CSV text (header plus one row per sample)
    """
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    writer.writerow(CSV_HEADER)

    for sample in history:
        probe = sample.primary_probe
        fan = current_fan_duty if current_fan_duty is not None else sample.fan_duty
        writer.writerow([
            _format_timestamp(sample.timestamp),
            f"{sample.pit:.1f}",
            f"{probe.temperature:.1f}" if probe is not None else "",
            fan,
        ])

    return out.getvalue()


def export_filename(day: Optional[date] = None) -> str:
    """Download name for a cook log, e.g. cook_log_2024-05-04.csv."""
    day = day or datetime.now(timezone.utc).date()
    return f"cook_log_{day.isoformat()}.csv"


def read_cook_log(text: str) -> list[dict]:
    """Parse a cook log produced by export_csv.

    Returns:
        List of dicts with timestamp (datetime), pit, meat (float or None)
        and fan (int)
    """
    rows = []
    for row in csv.DictReader(io.StringIO(text)):
        meat = row["Meat 1 Temp"]
        rows.append({
            "timestamp": datetime.fromisoformat(row["Timestamp"]),
            "pit": float(row["Pit Temp"]),
            "meat": float(meat) if meat else None,
            "fan": int(row["Fan Speed"]),
        })
    return rows
