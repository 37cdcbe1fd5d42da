"""
WBS Export Module
Export a WorkBreakdownStructure to JSON, CSV and Excel.

Output structure (WBSExporter.export_all):
<output_dir>/
  wbs.json   - Full structure, camelCase field names
  wbs.csv    - One row per deliverable
  wbs.xlsx   - Summary and WBS sheets
"""

import csv
import io
import json
import logging
import re
from io import BytesIO
from pathlib import Path
from typing import Dict, List, Optional

import pandas as pd

from vsa.models import WorkBreakdownStructure, enum_value, hourly_rate

from .generator import generate_wbs_summary

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Phase",
    "Service",
    "Subservice",
    "Deliverable",
    "Hours",
    "Cost",
    "Risk Level",
    "Resource Type",
]

EXPORT_FORMATS = ("json", "csv")


def wbs_to_json(wbs: WorkBreakdownStructure, indent: int = 2) -> str:
    """Pretty-printed JSON with camelCase names and ISO timestamps."""
    return json.dumps(wbs.model_dump(mode="json", by_alias=True), indent=indent, ensure_ascii=False)


def deliverable_rows(wbs: WorkBreakdownStructure) -> List[list]:
    """Flattened rows, cost = deliverable hours x subservice rate."""
    rows = []
    for phase, service, subservice, deliverable in wbs.iter_deliverables():
        resource_type = enum_value(subservice.resource_type)
        rows.append([
            phase.name,
            service.name,
            subservice.name,
            deliverable.name,
            deliverable.estimated_hours,
            deliverable.estimated_hours * hourly_rate(resource_type),
            enum_value(deliverable.risk_level),
            resource_type,
        ])
    return rows


_LINE_BREAKS = re.compile(r"[\r\n]+")


def _single_line(value):
    if isinstance(value, str):
        return _LINE_BREAKS.sub(" ", value)
    return value


def wbs_to_csv(wbs: WorkBreakdownStructure) -> str:
    """Header line plus one quoted row per deliverable, joined with newlines."""
    lines = [",".join(CSV_HEADERS)]
    for row in deliverable_rows(wbs):
        # one record per line
        row = [_single_line(value) for value in row]
        buffer = io.StringIO()
        csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="").writerow(row)
        lines.append(buffer.getvalue())
    return "\n".join(lines)


def export_wbs(wbs: WorkBreakdownStructure, format: str = "json") -> str:
    """
    Serialize a WBS.

    Args:
        wbs: Structure to export
        format: "json" or "csv"

    Returns:
        Serialized text

    Raises:
        ValueError: for any other format
    """
    if format == "json":
        return wbs_to_json(wbs)
    if format == "csv":
        return wbs_to_csv(wbs)
    raise ValueError(f"Unsupported export format '{format}'. Expected one of: {', '.join(EXPORT_FORMATS)}")


def wbs_to_dataframe(wbs: WorkBreakdownStructure) -> pd.DataFrame:
    """Deliverable-level DataFrame with the CSV columns."""
    return pd.DataFrame(deliverable_rows(wbs), columns=CSV_HEADERS)


def build_summary_df(wbs: WorkBreakdownStructure) -> pd.DataFrame:
    summary = generate_wbs_summary(wbs)
    data = [
        {"Item": "Project", "Value": wbs.project_name},
        {"Item": "Total Investment", "Value": f"${summary.total_investment:,.0f}"},
        {"Item": "Total Hours", "Value": wbs.total_hours},
        {"Item": "Timeline", "Value": summary.timeline},
        {"Item": "Phases", "Value": summary.phases},
        {"Item": "Team Size", "Value": summary.team_size},
        {"Item": "Risk Level", "Value": enum_value(summary.risk_level)},
        {"Item": "Risk Factors", "Value": "; ".join(wbs.risk_assessment.factors) or "-"},
        {"Item": "Generated", "Value": wbs.created_at.isoformat()},
    ]
    return pd.DataFrame(data)


def build_phases_df(wbs: WorkBreakdownStructure) -> pd.DataFrame:
    data = [
        {
            "Phase": phase.name,
            "Start Week": phase.start_week,
            "Duration (weeks)": phase.duration,
            "Hours": phase.total_hours,
            "Cost": phase.total_cost,
            "Risk Level": enum_value(phase.risk_level),
            "Milestones": ", ".join(phase.milestones),
        }
        for phase in wbs.phases
    ]
    return pd.DataFrame(data, columns=[
        "Phase", "Start Week", "Duration (weeks)", "Hours", "Cost", "Risk Level", "Milestones",
    ])


def export_wbs_to_excel(wbs: WorkBreakdownStructure, filepath: Optional[Path] = None) -> BytesIO:
    """
    Export a WBS to an Excel workbook.

    Args:
        wbs: Structure to export
        filepath: Optional file path to save (if None, only returns BytesIO)

    Returns:
        BytesIO buffer with the workbook
    """
    buffer = BytesIO()

    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        build_summary_df(wbs).to_excel(writer, sheet_name="Summary", index=False)
        build_phases_df(wbs).to_excel(writer, sheet_name="Phases", index=False)
        wbs_to_dataframe(wbs).to_excel(writer, sheet_name="WBS", index=False)

        # Column widths
        for worksheet in writer.sheets.values():
            for column in worksheet.columns:
                max_length = max(len(str(cell.value or "")) for cell in column)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 60)

    buffer.seek(0)

    if filepath:
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(filepath, "wb") as f:
            f.write(buffer.getvalue())
        buffer.seek(0)
        logger.info(f"Excel exported to: {filepath}")

    return buffer


class WBSExporter:
    """
    Write a WBS to disk in every supported format.

    Usage:
        outputs = WBSExporter("out/acme").export_all(wbs)
    """

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def export_all(self, wbs: WorkBreakdownStructure) -> Dict[str, Path]:
        """
        Export JSON, CSV and Excel files.

        Returns:
            Dict mapping format to file path
        """
        outputs = {}

        json_path = self.output_dir / "wbs.json"
        json_path.write_text(export_wbs(wbs, "json"), encoding="utf-8")
        outputs["json"] = json_path

        csv_path = self.output_dir / "wbs.csv"
        csv_path.write_text(export_wbs(wbs, "csv"), encoding="utf-8")
        outputs["csv"] = csv_path

        xlsx_path = self.output_dir / "wbs.xlsx"
        export_wbs_to_excel(wbs, xlsx_path)
        outputs["xlsx"] = xlsx_path

        logger.info(f"Exported {len(outputs)} files to {self.output_dir}")
        return outputs
