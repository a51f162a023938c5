"""
LeadSync exporter - CSV/Excel/JSON lead exports and a markdown report.
"""

import csv
import json
from pathlib import Path
from typing import TextIO

from .models import LEAD_STATUSES, Lead, Profile
from .platforms import ALL_PLATFORMS

# CSV column order (stable schema)
CSV_COLUMNS = [
    "Author",
    "Platform",
    "Title",
    "URL",
    "Relevance",
    "Date Found",
    "Snippet",
]

STATUS_LABELS = {
    "to_be_outreached": "Outreach Todo",
    "outreached": "Outreached",
    "followed_up": "Followed-up",
    "replied": "Replied",
}


def lead_to_row(lead: Lead) -> list[str]:
    """Convert a Lead to CSV cells in CSV_COLUMNS order."""
    return [
        lead.author or "Anonymous",
        lead.platform,
        lead.title,
        lead.url,
        str(lead.relevance_score),
        lead.detected_at.date().isoformat(),
        lead.snippet,
    ]


def export_csv(leads: list[Lead], output: Path | TextIO) -> int:
    """Export leads to CSV with every cell quoted. Returns number of rows written."""
    rows = [lead_to_row(lead) for lead in leads]

    if isinstance(output, Path):
        output.parent.mkdir(parents=True, exist_ok=True)
        with open(output, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f, quoting=csv.QUOTE_ALL)
            writer.writerow(CSV_COLUMNS)
            writer.writerows(rows)
    else:
        writer = csv.writer(output, quoting=csv.QUOTE_ALL)
        writer.writerow(CSV_COLUMNS)
        writer.writerows(rows)

    return len(rows)


def export_excel(leads: list[Lead], output: Path) -> int:
    """Export leads to Excel file with auto-fitted column widths."""
    from openpyxl import Workbook
    from openpyxl.styles import Font
    from openpyxl.utils import get_column_letter

    rows = [lead_to_row(lead) for lead in leads]
    output.parent.mkdir(parents=True, exist_ok=True)

    wb = Workbook()
    ws = wb.active
    ws.title = "Leads"

    ws.append(CSV_COLUMNS)
    for row in rows:
        ws.append(row)

    for col_idx, col_name in enumerate(CSV_COLUMNS, 1):
        # Cap at 50 so snippets don't produce huge columns
        width = max([len(col_name)] + [min(len(row[col_idx - 1]), 50) for row in rows])
        ws.column_dimensions[get_column_letter(col_idx)].width = width + 2
        ws.cell(row=1, column=col_idx).font = Font(bold=True)

    ws.freeze_panes = "A2"
    wb.save(output)
    return len(rows)


def export_json(leads: list[Lead], output: Path) -> int:
    """Export leads to JSON file (canonical format)."""
    output.parent.mkdir(parents=True, exist_ok=True)
    data = [lead.model_dump(mode="json") for lead in leads]
    with open(output, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return len(data)


def count_by_status(leads: list[Lead]) -> dict[str, int]:
    counts = dict.fromkeys(LEAD_STATUSES, 0)
    for lead in leads:
        counts[lead.status] += 1
    return counts


def count_by_platform(leads: list[Lead]) -> dict[str, int]:
    counts: dict[str, int] = {}
    for lead in leads:
        counts[lead.platform] = counts.get(lead.platform, 0) + 1
    # Platform order, not insertion order
    return {p: counts[p] for p in ALL_PLATFORMS if p in counts}


def generate_report(leads: list[Lead], profiles: list[Profile], output: Path) -> None:
    """Generate a markdown lead report."""
    output.parent.mkdir(parents=True, exist_ok=True)

    names = {p.id: p.name for p in profiles}
    by_profile: dict[str, int] = {}
    for lead in leads:
        name = names.get(lead.file_id or "", "Unassigned")
        by_profile[name] = by_profile.get(name, 0) + 1

    report = f"""# LeadSync Lead Report

## Summary
| Field | Value |
|---|---|
| Profiles | {len(profiles)} |
| Total Leads | {len(leads)} |

## Outreach Status
| Status | Count |
|---|---|
"""
    for status, count in count_by_status(leads).items():
        report += f"| {STATUS_LABELS[status]} | {count} |\n"

    report += """
## Leads by Platform
| Platform | Count |
|---|---|
"""
    for platform, count in count_by_platform(leads).items():
        report += f"| {platform} | {count} |\n"

    if by_profile:
        report += """
## Leads by Profile
| Profile | Count |
|---|---|
"""
        for name, count in sorted(by_profile.items(), key=lambda x: -x[1]):
            report += f"| {name} | {count} |\n"

    with open(output, "w", encoding="utf-8") as f:
        f.write(report)
