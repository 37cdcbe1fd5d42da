"""
Work Breakdown Structure generation and export.
"""

from .breakdowns import BreakdownLibrary, BreakdownTemplate, default_library
from .export import (
    CSV_HEADERS,
    WBSExporter,
    export_wbs,
    export_wbs_to_excel,
    wbs_to_dataframe,
)
from .generator import (
    ASSUMPTIONS,
    PM_PHASE_NAME,
    WBSGenerator,
    generate_wbs,
    generate_wbs_summary,
)

__all__ = [
    "BreakdownLibrary",
    "BreakdownTemplate",
    "default_library",
    "CSV_HEADERS",
    "WBSExporter",
    "export_wbs",
    "export_wbs_to_excel",
    "wbs_to_dataframe",
    "ASSUMPTIONS",
    "PM_PHASE_NAME",
    "WBSGenerator",
    "generate_wbs",
    "generate_wbs_summary",
]
