"""Tabular export of a form's responses.

The table has the columns `No, Timestamp, Responder Name, Responder Email`
followed by one column per question title in question order. Rows are
responses oldest first, numbered from 1. The same table is rendered as CSV
(RFC4180 via the csv module), as an XLSX workbook (openpyxl) and as a
per-response PDF report (reportlab).
"""

from __future__ import annotations

import csv
import io
import re
from typing import Dict, List, Optional, Sequence, Tuple
from xml.sax.saxutils import escape

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from formbuilder.models.records import FormRecord, ResponseRecord

FIXED_COLUMNS = ["No", "Timestamp", "Responder Name", "Responder Email"]
UNANSWERED = "-"
ANONYMOUS = "Anonymous"
NO_ANSWER_TEXT = "(No answer)"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"

_XLSX_SHEET = "Responses"
_XLSX_COLUMN_WIDTH = 20
_XLSX_HEADER_FILL = PatternFill(fill_type="solid", fgColor="FFE0E0E0")
_PDF_MARGIN = 50


def _responder_cells(response: ResponseRecord) -> Tuple[str, str]:
    if response.responder is not None:
        return response.responder.name or ANONYMOUS, response.responder.email or UNANSWERED
    if response.responder_name:
        return response.responder_name, UNANSWERED
    return ANONYMOUS, UNANSWERED


def _answer_cells(form: FormRecord, response: ResponseRecord) -> List[Optional[str]]:
    by_question: Dict[str, str] = {}
    for answer in response.answers:
        # First answer per question wins
        by_question.setdefault(answer.question_id, answer.value.display())
    return [by_question.get(q.id) for q in form.questions]


def build_response_table(form: FormRecord, responses: Sequence[ResponseRecord]) -> Tuple[List[str], List[List[str]]]:
    """Return (header, rows) for `responses`, which must be oldest first."""
    header = FIXED_COLUMNS + [q.title for q in form.questions]
    rows: List[List[str]] = []
    for index, response in enumerate(responses, start=1):
        name, email = _responder_cells(response)
        row = [str(index), response.created_at, name, email]
        row.extend(UNANSWERED if cell is None else cell for cell in _answer_cells(form, response))
        rows.append(row)
    return header, rows


def render_csv(header: Sequence[str], rows: Sequence[Sequence[str]], *, include_header: bool = True) -> bytes:
    buf = io.StringIO(newline="")
    writer = csv.writer(buf)
    if include_header:
        writer.writerow(header)
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")


def render_xlsx(form: FormRecord, header: Sequence[str], rows: Sequence[Sequence[str]]) -> bytes:
    """Render the table as a single-sheet workbook.

    The sheet opens with the form title, its description and a blank row,
    followed by a bold shaded header row and one row per response.
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = _XLSX_SHEET
    sheet.append([form.title])
    sheet.append([form.description or ""])
    sheet.append([])
    sheet.append(list(header))
    header_row = sheet.max_row
    for cell in sheet[header_row]:
        cell.font = Font(bold=True)
        cell.fill = _XLSX_HEADER_FILL
    for row in rows:
        # Row number as a numeric cell
        sheet.append([int(row[0]), *row[1:]])
    for column in sheet.iter_cols(min_row=header_row, max_row=header_row):
        sheet.column_dimensions[column[0].column_letter].width = _XLSX_COLUMN_WIDTH
    buf = io.BytesIO()
    workbook.save(buf)
    return buf.getvalue()


def _pdf_styles() -> Dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ExportTitle", parent=base["Title"], fontName="Helvetica-Bold",
                                fontSize=20, leading=24, alignment=TA_CENTER),
        "subtitle": ParagraphStyle("ExportSubtitle", parent=base["Normal"], fontSize=12,
                                   leading=15, alignment=TA_CENTER),
        "summary": ParagraphStyle("ExportSummary", parent=base["Normal"], fontSize=10,
                                  alignment=TA_CENTER),
        "heading": ParagraphStyle("ExportHeading", parent=base["Normal"], fontName="Helvetica-Bold",
                                  fontSize=14, leading=18),
        "meta": ParagraphStyle("ExportMeta", parent=base["Normal"], fontSize=10),
        "question": ParagraphStyle("ExportQuestion", parent=base["Normal"], fontName="Helvetica-Bold",
                                   fontSize=11, leading=14, spaceBefore=4),
        "answer": ParagraphStyle("ExportAnswer", parent=base["Normal"], fontSize=10, leftIndent=12),
    }


def render_pdf(form: FormRecord, responses: Sequence[ResponseRecord]) -> bytes:
    """Render one block per response, oldest first, listing every question."""
    styles = _pdf_styles()
    story = [Paragraph(escape(form.title), styles["title"])]
    if form.description:
        story.append(Paragraph(escape(form.description), styles["subtitle"]))
    story.append(Paragraph(f"Total Responses: {len(responses)}", styles["summary"]))
    story.append(Spacer(1, 24))

    for index, response in enumerate(responses, start=1):
        name, email = _responder_cells(response)
        story.append(Paragraph(f"Response #{index}", styles["heading"]))
        story.append(Paragraph(f"Responder: {escape(name)}", styles["meta"]))
        story.append(Paragraph(f"Email: {escape(email)}", styles["meta"]))
        story.append(Paragraph(f"Submitted: {escape(response.created_at)}", styles["meta"]))
        story.append(Spacer(1, 8))
        for question, cell in zip(form.questions, _answer_cells(form, response)):
            story.append(Paragraph(escape(question.title), styles["question"]))
            story.append(Paragraph(escape(NO_ANSWER_TEXT if cell is None else cell), styles["answer"]))
        story.append(Spacer(1, 10))
        story.append(HRFlowable(width="100%", thickness=1, color=colors.HexColor("#CCCCCC")))
        story.append(Spacer(1, 16))

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        title=form.title,
        leftMargin=_PDF_MARGIN,
        rightMargin=_PDF_MARGIN,
        topMargin=_PDF_MARGIN,
        bottomMargin=_PDF_MARGIN,
    )
    doc.build(story)
    return buf.getvalue()


def export_filename(form: FormRecord, extension: str = "csv") -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", form.title).strip("_") or "form"
    return f"{slug}_responses.{extension}"


__all__ = [
    "FIXED_COLUMNS",
    "PDF_MEDIA_TYPE",
    "XLSX_MEDIA_TYPE",
    "build_response_table",
    "export_filename",
    "render_csv",
    "render_pdf",
    "render_xlsx",
]
