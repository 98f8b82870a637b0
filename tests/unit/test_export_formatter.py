from __future__ import annotations

import csv
import io
import zipfile

import pytest
from openpyxl import load_workbook

from trip_expenses.calculator.cost import parse_currency
from trip_expenses.domain.models import ExportProjection, ExportRow, ExportSummary
from trip_expenses.services.export_formatter import (
    SHEET_NAME,
    paginate,
    render,
    render_csv,
    render_pdf,
    render_png_pages,
    render_xlsx,
)


def _projection(count: int = 2) -> ExportProjection:
    rows = [
        ExportRow(
            date=f"2024-03-{i + 1:02d}",
            departure="서울역",
            destination="대전역",
            distance="160km",
            duration="120분",
            toll_fee="₩7,600",
            vehicle="Kia K5",
            fuel_cost="₩24,065",
            meals="₩10,000",
            total="₩41,665",
            memo=f"출장 {i + 1}",
        )
        for i in range(count)
    ]
    return ExportProjection(
        rows=rows,
        summary=ExportSummary(
            author="홍길동",
            created_date="2024-04-01",
            start_date="2024-03-01",
            end_date="2024-03-31",
            total_items=count,
            total_amount=41665 * count,
        ),
    )


def test_paginate_never_drops_or_repeats_rows():
    rows = list(range(27))

    pages = paginate(rows, 13)

    assert [len(p) for p in pages] == [13, 13, 1]
    assert [r for page in pages for r in page] == rows


def test_paginate_empty_gives_one_page():
    assert paginate([]) == [[]]
    assert len(paginate(list(range(13)))) == 1
    assert len(paginate(list(range(14)))) == 2
    with pytest.raises(ValueError):
        paginate([1], 0)


def test_csv_parses_back_to_currency_integers():
    projection = _projection(3)

    content = render_csv(projection)

    assert content.startswith(b"\xef\xbb\xbf")
    lines = list(csv.reader(io.StringIO(content.decode("utf-8-sig"))))
    assert lines[0][0] == "날짜"
    assert lines[0][-1] == "비고"
    data = lines[1:4]
    assert [parse_currency(r[12]) for r in data] == [41665] * 3
    assert [parse_currency(r[7]) for r in data] == [24065] * 3
    assert lines[4] == []
    summary = {row[0]: row[1] for row in lines[5:]}
    assert summary["작성자"] == "홍길동"
    assert summary["기간"] == "2024-03-01 ~ 2024-03-31"
    assert parse_currency(summary["총액"]) == 41665 * 3


def test_csv_quotes_every_field():
    first_line = render_csv(_projection(1)).decode("utf-8-sig").splitlines()[0]

    assert first_line.startswith('"날짜","출발지"')


def test_xlsx_layout():
    projection = _projection(2)

    wb = load_workbook(io.BytesIO(render_xlsx(projection)))
    ws = wb[SHEET_NAME]

    assert ws.cell(row=1, column=1).value == "날짜"
    assert ws.cell(row=1, column=1).font.bold
    assert ws.cell(row=2, column=13).value == "₩41,665"
    assert ws.cell(row=2, column=13).number_format == "@"
    assert ws.cell(row=4, column=1).value is None
    assert ws.cell(row=5, column=1).value == "작성자"
    assert ws.cell(row=9, column=2).value == "₩83,330"


def test_pdf_without_unicode_font_still_renders():
    content = render_pdf(_projection(15))

    assert content.startswith(b"%PDF")


def test_png_pages_follow_pagination():
    pages = render_png_pages(_projection(14))

    assert len(pages) == 2
    assert all(p.startswith(b"\x89PNG") for p in pages)


def test_render_names_files_by_period():
    assert render(_projection(1), "csv").filename == "expenses_2024-03-01_2024-03-31.csv"
    assert render(_projection(1), "xlsx").filename.endswith(".xlsx")
    assert render(_projection(1), "pdf").media_type == "application/pdf"


def test_single_page_png_is_returned_directly():
    rendered = render(_projection(1), "png")

    assert rendered.filename.endswith(".png")
    assert rendered.media_type == "image/png"


def test_multi_page_png_is_zipped():
    rendered = render(_projection(14), "png")

    assert rendered.filename == "expenses_2024-03-01_2024-03-31.zip"
    with zipfile.ZipFile(io.BytesIO(rendered.content)) as zf:
        assert zf.namelist() == [
            "expenses_2024-03-01_2024-03-31_1.png",
            "expenses_2024-03-01_2024-03-31_2.png",
        ]
