"""Tests for applying layout commands to an openpyxl workbook."""

import openpyxl
import pytest
from openpyxl import Workbook

import render_calendar_xlsx
from calendar_layout import CreateSheet, LayoutSettings, LocaleNames, SetCell, User, plan_year
from render_calendar_xlsx import (
    PersistenceFailure,
    RendererUnavailable,
    XlsxRenderer,
    open_renderer,
    output_path,
)

NAMES = LocaleNames(
    ("January", "February", "March", "April", "May", "June",
     "July", "August", "September", "October", "November", "December"),
    ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
    ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
)
USERS = [User("Carol", "7-3"), User("Dan", "8:30-4:30")]


def render_year(path, year=2024, settings=LayoutSettings()):
    with open_renderer() as r:
        for _, cmds in plan_year(year, USERS, NAMES, settings):
            r.apply(cmds)
        return r.finalize(path)


def test_saved_workbook_layout(tmp_path):
    out = render_year(tmp_path / "cal.xlsx")
    wb = openpyxl.load_workbook(out)

    assert wb.sheetnames == list(NAMES.month_abbreviations)
    assert wb.active.title == "Jan"

    ws = wb["Jan"]
    assert ws["B2"].value == "Staff Calendar - January"
    assert ws["B2"].font.bold
    assert "B2:F2" in {str(r) for r in ws.merged_cells.ranges}
    assert ws.column_dimensions["A"].width == 13
    assert ws.sheet_view.zoomScale == 100

    assert ws["B4"].value == "Monday"
    assert ws["B5"].value == "2024-01-01"
    assert ws["A6"].value == "Carol"
    assert ws["A6"].font.bold
    assert ws["A7"].value == "Dan"
    assert ws["B7"].value == "8:30-4:30"
    assert ws["B7"].number_format == "@"
    assert ws["B6"].font.name == "Calibri"
    assert ws["B4"].fill.fgColor.rgb.endswith("DDEBF7")
    assert ws["A6"].border.left.style == "thin"


def test_partial_first_week_leaves_leading_slots_empty(tmp_path):
    wb = openpyxl.load_workbook(render_year(tmp_path / "cal.xlsx"))
    ws = wb["May"]
    assert ws["B5"].value is None
    assert ws["C5"].value is None
    assert ws["D4"].value == "Wednesday"
    assert ws["D5"].value == "2024-05-01"
    assert ws["D6"].value == "7-3"


def test_existing_file_is_replaced(tmp_path):
    out = tmp_path / "cal.xlsx"
    out.write_bytes(b"not a workbook")
    render_year(out)
    assert openpyxl.load_workbook(out).sheetnames[0] == "Jan"


def test_missing_save_location(tmp_path):
    with pytest.raises(PersistenceFailure):
        render_year(tmp_path / "missing" / "cal.xlsx")


def test_save_error_is_persistence_failure(tmp_path, monkeypatch):
    def boom(self, filename):
        raise PermissionError("locked")

    monkeypatch.setattr(Workbook, "save", boom)
    with pytest.raises(PersistenceFailure, match="locked"):
        render_year(tmp_path / "cal.xlsx")
    assert not (tmp_path / "cal.xlsx").exists()


def test_backend_failure_is_renderer_unavailable(monkeypatch):
    def broken():
        raise MemoryError("no workbook")

    monkeypatch.setattr(render_calendar_xlsx, "Workbook", broken)
    with pytest.raises(RendererUnavailable):
        with open_renderer():
            pass


def test_workbook_released_on_error(monkeypatch):
    created = []

    class TrackingWorkbook(Workbook):
        closed = False

        def close(self):
            self.closed = True

    def factory():
        wb = TrackingWorkbook()
        created.append(wb)
        return wb

    monkeypatch.setattr(render_calendar_xlsx, "Workbook", factory)
    with pytest.raises(KeyError):
        with open_renderer() as r:
            r.apply([SetCell("Nope", 1, 1, "x")])
    assert created and created[0].closed


def test_unknown_command_type():
    r = XlsxRenderer(Workbook())
    r.apply([CreateSheet("Jan")])
    with pytest.raises(TypeError):
        r.apply_one(object())


def test_custom_zoom_and_width(tmp_path):
    settings = LayoutSettings(first_column_width=20, zoom_level=75)
    ws = openpyxl.load_workbook(render_year(tmp_path / "cal.xlsx", settings=settings))["Dec"]
    assert ws.column_dimensions["A"].width == 20
    assert ws.sheet_view.zoomScale == 75


def test_output_path(tmp_path):
    assert output_path(tmp_path, "2024 Staff Schedule") == tmp_path / "2024 Staff Schedule.xlsx"
    assert output_path(tmp_path, "cal.xlsx") == tmp_path / "cal.xlsx"
