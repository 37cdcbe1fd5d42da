import json

import pandas as pd
import pytest

from vsa.models import Service, WorkBreakdownStructure
from vsa.wbs import CSV_HEADERS, WBSExporter, export_wbs, export_wbs_to_excel, generate_wbs, wbs_to_dataframe


@pytest.fixture
def wbs(high_complexity_service, match_for, empty_library):
    return generate_wbs([match_for(high_complexity_service)], "Consolidation", empty_library)


class TestCsvExport:
    def test_one_line_per_deliverable(self, wbs):
        lines = export_wbs(wbs, "csv").split("\n")
        # header + 3 PM deliverables + 3 service deliverables
        assert len(lines) == 7
        assert lines[0] == ",".join(CSV_HEADERS)

    def test_rows_are_quoted_and_costed(self, wbs):
        lines = export_wbs(wbs, "csv").split("\n")
        assert lines[1] == (
            '"Project Management & Coordination","Project Coordination",'
            '"Weekly Status Reports","Weekly Status Reports",5,875,"Low","Project Management"'
        )
        assert lines[5] == (
            '"Phase 1: Datacenter Consolidation","Datacenter Consolidation",'
            '"Datacenter Consolidation Implementation","Datacenter Consolidation Implementation",'
            '10,2000,"High","Specialist"'
        )

    def test_line_breaks_in_names_are_flattened(self, match_for, empty_library):
        service = Service(id="svc-dc", name="Data\nCenter\r\nMove", complexity="High", estimated_hours=100)
        wbs = generate_wbs([match_for(service)], "Multiline", empty_library)

        lines = export_wbs(wbs, "csv").split("\n")

        assert len(lines) == 1 + sum(1 for _ in wbs.iter_deliverables())
        assert lines[5].startswith('"Phase 1: Data Center Move","Data Center Move",')
        assert all("\r" not in line for line in lines)

    def test_no_trailing_newline(self, wbs):
        assert not export_wbs(wbs, "csv").endswith("\n")

    def test_empty_wbs_has_header_only(self):
        assert export_wbs(generate_wbs([], "Empty"), "csv") == ",".join(CSV_HEADERS)


class TestJsonExport:
    def test_round_trip(self, wbs):
        data = json.loads(export_wbs(wbs, "json"))
        assert data == wbs.model_dump(mode="json", by_alias=True)

        restored = WorkBreakdownStructure.model_validate(data)
        assert restored.model_dump() == wbs.model_dump()

    def test_camel_case_keys(self, wbs):
        data = json.loads(export_wbs(wbs))
        assert data["projectName"] == "Consolidation"
        assert data["totalHours"] == 115
        assert data["riskAssessment"]["overall"] == "High"
        assert "startWeek" in data["phases"][0]


def test_unsupported_format(wbs):
    with pytest.raises(ValueError, match="xml"):
        export_wbs(wbs, "xml")


class TestExcelExport:
    def test_workbook_sheets(self, wbs):
        buffer = export_wbs_to_excel(wbs)
        assert buffer.getvalue()[:2] == b"PK"

        sheets = pd.read_excel(buffer, sheet_name=None)
        assert set(sheets) == {"Summary", "Phases", "WBS"}
        assert list(sheets["WBS"].columns) == CSV_HEADERS
        assert len(sheets["WBS"]) == 6
        assert list(sheets["Phases"]["Phase"]) == [p.name for p in wbs.phases]

    def test_writes_file(self, wbs, tmp_path):
        target = tmp_path / "nested" / "plan.xlsx"
        export_wbs_to_excel(wbs, target)
        assert target.exists()
        assert target.read_bytes()[:2] == b"PK"

    def test_dataframe_hours_match_deliverables(self, wbs):
        df = wbs_to_dataframe(wbs)
        expected = sum(d.estimated_hours for *_, d in wbs.iter_deliverables())
        assert df["Hours"].sum() == expected


def test_exporter_writes_all_formats(wbs, tmp_path):
    outputs = WBSExporter(tmp_path / "out").export_all(wbs)
    assert set(outputs) == {"json", "csv", "xlsx"}
    for path in outputs.values():
        assert path.exists()
    assert json.loads(outputs["json"].read_text(encoding="utf-8"))["projectName"] == "Consolidation"
