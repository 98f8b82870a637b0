"""Export renderers: CSV, XLSX, PDF and PNG bytes from an ``ExportProjection``.

PDF and PNG draw Korean text only when ``PDF_FONT_PATH`` points at a Unicode
TTF. Without one they fall back to built-in Latin fonts, English labels and
text stripped to Latin-1, so an export never fails for lack of a font.
"""

from __future__ import annotations

import csv
import io
import os
import unicodedata
import zipfile
from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from PIL import Image, ImageDraw, ImageFont

from trip_expenses.calculator.cost import format_currency
from trip_expenses.config.settings import pdf_font_path
from trip_expenses.domain.constants import EXPORT_COLUMN_LABELS_EN, EXPORT_COLUMNS
from trip_expenses.domain.enums import ExportFormat
from trip_expenses.domain.models import ExportProjection, ExportRow, ExportSummary

T = TypeVar("T")

SHEET_NAME = "경비 내역"
DOCUMENT_TITLE = "경비 지출내역서"
DOCUMENT_TITLE_EN = "Trip Expense Statement"
COLUMN_WIDTHS = (12, 15, 15, 10, 10, 12, 20, 12, 12, 12, 12, 12, 15, 30)
ROWS_PER_PAGE = 13

# A4 at 96 DPI, drawn at 2x.
PNG_SCALE = 2
PNG_WIDTH = 794 * PNG_SCALE
PNG_HEIGHT = 1123 * PNG_SCALE
PNG_PADDING = 40 * PNG_SCALE

_MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv; charset=utf-8",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.PDF: "application/pdf",
    ExportFormat.PNG: "image/png",
}
_ZIP_MEDIA_TYPE = "application/zip"

_LATIN_REPLACEMENTS = {"₩": "KRW ", "분": "min"}


@dataclass(frozen=True)
class RenderedExport:
    filename: str
    media_type: str
    content: bytes


def paginate(rows: Sequence[T], rows_per_page: int = ROWS_PER_PAGE) -> list[list[T]]:
    """Split ``rows`` into consecutive pages. Always at least one (possibly empty) page."""
    if rows_per_page < 1:
        raise ValueError("rows_per_page must be >= 1")
    if not rows:
        return [[]]
    return [list(rows[i : i + rows_per_page]) for i in range(0, len(rows), rows_per_page)]


def _row_values(row: ExportRow) -> list[str]:
    return [getattr(row, field) for field, _ in EXPORT_COLUMNS]


def _summary_rows(summary: ExportSummary) -> list[list[str]]:
    return [
        ["작성자", summary.author],
        ["작성일자", summary.created_date],
        ["기간", f"{summary.start_date} ~ {summary.end_date}"],
        ["총 항목 수", str(summary.total_items)],
        ["총액", format_currency(summary.total_amount)],
    ]


def _sanitize_latin1(text: str) -> str:
    for src, dst in _LATIN_REPLACEMENTS.items():
        text = text.replace(src, dst)
    out: list[str] = []
    for ch in unicodedata.normalize("NFKC", str(text)):
        if ord(ch) > 0xFF or unicodedata.category(ch).startswith("C"):
            continue
        out.append(ch)
    return "".join(out).strip()


def _unicode_font() -> Optional[str]:
    path = pdf_font_path()
    if path and os.path.isfile(path):
        return path
    return None


# ── CSV / XLSX ──────────────────────────────────────


def render_csv(projection: ExportProjection) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([label for _, label in EXPORT_COLUMNS])
    for row in projection.rows:
        writer.writerow(_row_values(row))
    buf.write("\n")
    for summary_row in _summary_rows(projection.summary):
        writer.writerow(summary_row)
    return ("\ufeff" + buf.getvalue()).encode("utf-8")


def render_xlsx(projection: ExportProjection) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_NAME

    def put(row_idx: int, col_idx: int, value: str, *, bold: bool = False) -> None:
        cell = ws.cell(row=row_idx, column=col_idx, value=str(value))
        cell.number_format = "@"
        if bold:
            cell.font = Font(bold=True)

    for col_idx, (_, label) in enumerate(EXPORT_COLUMNS, 1):
        put(1, col_idx, label, bold=True)
    for row_idx, row in enumerate(projection.rows, 2):
        for col_idx, value in enumerate(_row_values(row), 1):
            put(row_idx, col_idx, value)

    # One blank row between the table and the summary block.
    start = len(projection.rows) + 3
    for offset, (label, value) in enumerate(_summary_rows(projection.summary)):
        put(start + offset, 1, label, bold=True)
        put(start + offset, 2, value)

    for col_idx, width in enumerate(COLUMN_WIDTHS, 1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


# ── page layout shared by PDF / PNG ─────────────────


@dataclass(frozen=True)
class _PageText:
    title: str
    period: str
    author: str
    created: str
    headers: list[str]
    total: str


def _page_text(summary: ExportSummary, unicode_ok: bool) -> _PageText:
    period = f"{summary.start_date} ~ {summary.end_date}"
    total = format_currency(summary.total_amount)
    if unicode_ok:
        return _PageText(
            title=DOCUMENT_TITLE,
            period=f"기간: {period}",
            author=f"작성자: {summary.author}",
            created=f"작성일자: {summary.created_date}",
            headers=[label for _, label in EXPORT_COLUMNS],
            total=f"합계: {total}",
        )
    return _PageText(
        title=DOCUMENT_TITLE_EN,
        period=f"Period: {period}",
        author=_sanitize_latin1(f"Author: {summary.author}"),
        created=f"Created: {summary.created_date}",
        headers=[EXPORT_COLUMN_LABELS_EN[field] for field, _ in EXPORT_COLUMNS],
        total=_sanitize_latin1(f"Total: {total}"),
    )


# ── PDF ─────────────────────────────────────────────


class _ExpensePDF(FPDF):
    FAMILY = "ExportSans"

    def __init__(self, font_path: Optional[str]):
        super().__init__(orientation="P", unit="mm", format="A4")
        self.set_auto_page_break(auto=False)
        self.set_margins(10, 12, 10)
        self.unicode_ok = font_path is not None
        if self.unicode_ok:
            self.add_font(self.FAMILY, "", font_path)
            self.add_font(self.FAMILY, "B", font_path)

    def use_font(self, size: float, *, bold: bool = False) -> None:
        family = self.FAMILY if self.unicode_ok else "Helvetica"
        self.set_font(family, "B" if bold else "", size)

    def text_for(self, value: str) -> str:
        return str(value) if self.unicode_ok else _sanitize_latin1(value)

    def fit(self, value: str, width: float) -> str:
        text = self.text_for(value)
        limit = width - 1.0
        if self.get_string_width(text) <= limit:
            return text
        while text and self.get_string_width(text + "..") > limit:
            text = text[:-1]
        return text + ".."


def render_pdf(projection: ExportProjection, rows_per_page: int = ROWS_PER_PAGE) -> bytes:
    pdf = _ExpensePDF(_unicode_font())
    text = _page_text(projection.summary, pdf.unicode_ok)
    pdf.set_title(text.title)
    pages = paginate(projection.rows, rows_per_page)
    usable = pdf.w - pdf.l_margin - pdf.r_margin
    scale = usable / sum(COLUMN_WIDTHS)
    widths = [w * scale for w in COLUMN_WIDTHS]

    for number, page_rows in enumerate(pages, 1):
        pdf.add_page()
        pdf.use_font(16, bold=True)
        pdf.cell(0, 10, text.title, align="C", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(2)

        pdf.use_font(9)
        pdf.cell(usable / 2, 5, pdf.text_for(text.period), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(usable / 2, 5, pdf.text_for(text.author), align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.cell(0, 5, text.created, align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(3)

        pdf.use_font(6.5, bold=True)
        for width, header in zip(widths, text.headers):
            pdf.cell(width, 7, pdf.fit(header, width), border=1, align="C", new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.ln(7)

        pdf.use_font(6.5)
        for row in page_rows:
            for width, value in zip(widths, _row_values(row)):
                pdf.cell(width, 6, pdf.fit(value, width), border=1, new_x=XPos.RIGHT, new_y=YPos.TOP)
            pdf.ln(6)

        if number == len(pages):
            pdf.ln(4)
            pdf.use_font(10, bold=True)
            pdf.cell(0, 6, pdf.text_for(text.total), align="R", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        if len(pages) > 1:
            pdf.set_y(-15)
            pdf.use_font(8)
            pdf.cell(0, 6, f"{number} / {len(pages)}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    return bytes(pdf.output())


# ── PNG ─────────────────────────────────────────────


def _png_font(font_path: Optional[str], size: int):
    if font_path:
        return ImageFont.truetype(font_path, size)
    return ImageFont.load_default(size=size)


def _fit_png(draw: ImageDraw.ImageDraw, value: str, font, width: int) -> str:
    limit = width - 8 * PNG_SCALE
    if draw.textlength(value, font=font) <= limit:
        return value
    while value and draw.textlength(value + "..", font=font) > limit:
        value = value[:-1]
    return value + ".."


def _render_png_page(
    page_rows: list[ExportRow],
    text: _PageText,
    *,
    font_path: Optional[str],
    number: int,
    total_pages: int,
) -> bytes:
    unicode_ok = font_path is not None
    clean = (lambda v: str(v)) if unicode_ok else _sanitize_latin1

    image = Image.new("RGB", (PNG_WIDTH, PNG_HEIGHT), "white")
    draw = ImageDraw.Draw(image)
    title_font = _png_font(font_path, 24 * PNG_SCALE)
    body_font = _png_font(font_path, 14 * PNG_SCALE)
    cell_font = _png_font(font_path, 9 * PNG_SCALE)

    x0 = PNG_PADDING
    usable = PNG_WIDTH - 2 * PNG_PADDING
    y = PNG_PADDING
    draw.text((PNG_WIDTH // 2, y), text.title, font=title_font, fill="black", anchor="mt")
    y += 50 * PNG_SCALE

    draw.text((x0, y), clean(text.period), font=body_font, fill="black")
    draw.text((PNG_WIDTH - PNG_PADDING, y), clean(text.author), font=body_font, fill="black", anchor="ra")
    y += 22 * PNG_SCALE
    draw.text((PNG_WIDTH - PNG_PADDING, y), text.created, font=body_font, fill="black", anchor="ra")
    y += 36 * PNG_SCALE

    scale = usable / sum(COLUMN_WIDTHS)
    widths = [int(w * scale) for w in COLUMN_WIDTHS]
    header_h = 40 * PNG_SCALE
    row_h = 35 * PNG_SCALE

    def draw_row(values: list[str], top: int, height: int, fill: Optional[str]) -> None:
        left = x0
        for width, value in zip(widths, values):
            draw.rectangle([left, top, left + width, top + height], outline="black", fill=fill)
            shown = _fit_png(draw, clean(value), cell_font, width)
            draw.text((left + 4 * PNG_SCALE, top + height // 2), shown, font=cell_font, fill="black", anchor="lm")
            left += width

    draw_row(text.headers, y, header_h, "#f0f0f0")
    y += header_h
    for row in page_rows:
        draw_row(_row_values(row), y, row_h, None)
        y += row_h

    if number == total_pages:
        y += 20 * PNG_SCALE
        draw.text((PNG_WIDTH - PNG_PADDING, y), clean(text.total), font=body_font, fill="black", anchor="ra")

    if total_pages > 1:
        draw.text((x0, PNG_HEIGHT - PNG_PADDING), f"{number} / {total_pages}", font=body_font, fill="black", anchor="ld")

    buf = io.BytesIO()
    image.save(buf, format="PNG")
    return buf.getvalue()


def render_png_pages(projection: ExportProjection, rows_per_page: int = ROWS_PER_PAGE) -> list[bytes]:
    font_path = _unicode_font()
    text = _page_text(projection.summary, font_path is not None)
    pages = paginate(projection.rows, rows_per_page)
    return [
        _render_png_page(rows, text, font_path=font_path, number=i, total_pages=len(pages))
        for i, rows in enumerate(pages, 1)
    ]


def _zip_pages(pages: list[bytes], basename: str) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for i, content in enumerate(pages, 1):
            zf.writestr(f"{basename}_{i}.png", content)
    return buf.getvalue()


# ── entry point ─────────────────────────────────────


def export_basename(summary: ExportSummary) -> str:
    return f"expenses_{summary.start_date}_{summary.end_date}"


def render(projection: ExportProjection, fmt: ExportFormat | str) -> RenderedExport:
    fmt = ExportFormat(fmt)
    basename = export_basename(projection.summary)

    if fmt is ExportFormat.CSV:
        return RenderedExport(f"{basename}.csv", _MEDIA_TYPES[fmt], render_csv(projection))
    if fmt is ExportFormat.XLSX:
        return RenderedExport(f"{basename}.xlsx", _MEDIA_TYPES[fmt], render_xlsx(projection))
    if fmt is ExportFormat.PDF:
        return RenderedExport(f"{basename}.pdf", _MEDIA_TYPES[fmt], render_pdf(projection))

    pages = render_png_pages(projection)
    if len(pages) == 1:
        return RenderedExport(f"{basename}.png", _MEDIA_TYPES[fmt], pages[0])
    return RenderedExport(f"{basename}.zip", _ZIP_MEDIA_TYPE, _zip_pages(pages, basename))


__all__ = ["RenderedExport", "paginate", "render", "render_csv", "render_xlsx", "render_pdf", "render_png_pages"]
