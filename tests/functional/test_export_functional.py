"""Functional tests for CSV, Excel and PDF export of responses."""

from __future__ import annotations

import csv
import io

import pytest
from openpyxl import load_workbook

from formbuilder.logic.export_table import build_response_table, export_filename, render_csv
from formbuilder.models.answer_value import MultiSelectValue, ScalarValue
from formbuilder.models.records import (
    AnswerRecord,
    FormRecord,
    QuestionRecord,
    ResponderSummary,
    ResponseRecord,
)


def _rows(body: bytes) -> list[list[str]]:
    return list(csv.reader(io.StringIO(body.decode("utf-8"))))


def test_table_layout_and_placeholders():
    q1 = QuestionRecord(id="q1", form_id="f", title="Name", type="SHORT_TEXT", order=0)
    q2 = QuestionRecord(id="q2", form_id="f", title="Hobbies", type="CHECKBOX", order=1)
    form = FormRecord(id="f", title="Club signup!", created_by_id="u", questions=[q1, q2])
    responses = [
        ResponseRecord(
            id="r1",
            form_id="f",
            created_at="2024-01-01T10:00:00.000000Z",
            responder_id="u9",
            responder=ResponderSummary(id="u9", name="Rita", email="rita@example.com"),
            answers=[AnswerRecord(id="a1", response_id="r1", question_id="q2", value=MultiSelectValue(("Chess", "Go")))],
        ),
        ResponseRecord(
            id="r2",
            form_id="f",
            created_at="2024-01-02T10:00:00.000000Z",
            responder_name="Walk-in",
            answers=[AnswerRecord(id="a2", response_id="r2", question_id="q1", value=ScalarValue("Bob"))],
        ),
        ResponseRecord(id="r3", form_id="f", created_at="2024-01-03T10:00:00.000000Z"),
    ]

    header, rows = build_response_table(form, responses)
    assert header == ["No", "Timestamp", "Responder Name", "Responder Email", "Name", "Hobbies"]
    assert rows == [
        ["1", "2024-01-01T10:00:00.000000Z", "Rita", "rita@example.com", "-", "Chess, Go"],
        ["2", "2024-01-02T10:00:00.000000Z", "Walk-in", "-", "Bob", "-"],
        ["3", "2024-01-03T10:00:00.000000Z", "Anonymous", "-", "-", "-"],
    ]
    assert export_filename(form) == "Club_signup_responses.csv"
    assert _rows(render_csv(header, rows, include_header=False)) == rows


def test_export_endpoint_oldest_first(api, admin):
    form = api.create_form(admin["token"], title="Poll")
    name = api.add_question(admin["token"], form["id"], title="Name", order=0)
    picks = api.add_question(admin["token"], form["id"], title="Picks", type="CHECKBOX", order=1)
    api.submit(form["id"], {name["id"]: "First"})
    api.submit(form["id"], {name["id"]: "Second", picks["id"]: ["A", "B"]})

    resp = api.client.get(f"/api/v1/export/csv/{form['id']}", headers=api.auth(admin["token"]))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert resp.headers["content-disposition"] == 'attachment; filename="Poll_responses.csv"'
    rows = _rows(resp.content)
    assert rows[0] == ["No", "Timestamp", "Responder Name", "Responder Email", "Name", "Picks"]
    assert [r[0] for r in rows[1:]] == ["1", "2"]
    assert [r[4] for r in rows[1:]] == ["First", "Second"]
    assert rows[2][5] == "A, B"


def test_excel_export_layout(api, admin):
    form = api.create_form(admin["token"], title="Poll")
    name = api.add_question(admin["token"], form["id"], title="Name", order=0)
    picks = api.add_question(admin["token"], form["id"], title="Picks", type="CHECKBOX", order=1)
    api.submit(form["id"], {name["id"]: "First"})
    api.submit(form["id"], {picks["id"]: ["A", "B"]})

    resp = api.client.get(f"/api/v1/export/excel/{form['id']}", headers=api.auth(admin["token"]))
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert resp.headers["content-disposition"] == 'attachment; filename="Poll_responses.xlsx"'

    sheet = load_workbook(io.BytesIO(resp.content))["Responses"]
    rows = list(sheet.iter_rows(values_only=True))
    assert rows[0][0] == "Poll"
    assert rows[3] == ("No", "Timestamp", "Responder Name", "Responder Email", "Name", "Picks")
    assert sheet.cell(row=4, column=1).font.bold
    assert [r[0] for r in rows[4:]] == [1, 2]
    assert rows[4][2:] == ("Anonymous", "-", "First", "-")
    assert rows[5][4:] == ("-", "A, B")


def test_pdf_export_is_a_pdf_attachment(api, admin):
    form = api.create_form(admin["token"], title="Poll")
    name = api.add_question(admin["token"], form["id"], title="Name", order=0)
    api.submit(form["id"], {name["id"]: "<b>Ann</b> & co"})

    resp = api.client.get(f"/api/v1/export/pdf/{form['id']}", headers=api.auth(admin["token"]))
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.headers["content-disposition"] == 'attachment; filename="Poll_responses.pdf"'
    assert resp.content.startswith(b"%PDF")


@pytest.mark.parametrize("fmt", ["csv", "excel", "pdf"])
def test_every_export_format_requires_owner(api, admin, fmt):
    form = api.create_form(admin["token"])
    stranger = api.register(role="ADMIN")
    url = f"/api/v1/export/{fmt}/{form['id']}"
    assert api.client.get(url, headers=api.auth(stranger["token"])).status_code == 403
    assert api.client.get(url).status_code == 401
    assert api.client.get(f"/api/v1/export/{fmt}/missing", headers=api.auth(admin["token"])).status_code == 403
