"""Functional tests for the response submission and statistics API.

Every test runs against both catalog implementations.
"""

from __future__ import annotations

PROBLEM = "application/problem+json"


def _survey(api, token, *, published=True):
    form = api.create_form(token, published=published)
    name = api.add_question(token, form["id"], title="Name", order=0, required=True)
    agama = api.add_question(
        token, form["id"], title="Agama", type="MULTIPLE_CHOICE", order=1,
        options=["Islam", "Kristen", "Buddha", "Hindu", "Lainnya"],
    )
    hobbies = api.add_question(
        token, form["id"], title="Hobbies", type="CHECKBOX", order=2, options=["A", "B", "C"]
    )
    return form, name, agama, hobbies


def test_submit_returns_created_envelope(api, admin):
    form, name, agama, _ = _survey(api, admin["token"])
    resp = api.submit(form["id"], {name["id"]: "Ann", agama["id"]: "Islam"}, responderName="Ann")
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Response submitted successfully"
    data = body["data"]
    assert data["formId"] == form["id"]
    assert data["responderId"] is None
    assert data["responderName"] == "Ann"
    assert [(a["questionId"], a["value"]) for a in data["answers"]] == [
        (name["id"], "Ann"),
        (agama["id"], "Islam"),
    ]
    assert data["answers"][1]["question"]["title"] == "Agama"


def test_invalid_token_submits_anonymously(api, admin):
    form, name, _, _ = _survey(api, admin["token"])
    resp = api.submit(form["id"], {name["id"]: "Ann"}, token="not-a-real-token")
    assert resp.status_code == 201
    assert resp.json()["data"]["responderId"] is None


def test_valid_token_attaches_responder(api, admin):
    form, name, _, _ = _survey(api, admin["token"])
    responder = api.register(role="USER", name="Rita")
    resp = api.submit(form["id"], {name["id"]: "Rita"}, token=responder["token"])
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["responderId"] == responder["user"]["id"]
    assert data["responder"]["name"] == "Rita"


def test_unpublished_form_is_closed(api, admin):
    form, name, _, _ = _survey(api, admin["token"], published=False)
    resp = api.submit(form["id"], {name["id"]: "Ann"}, token=admin["token"])
    assert resp.status_code == 403
    assert resp.headers["content-type"].startswith(PROBLEM)
    assert resp.json()["code"] == "FORM_CLOSED"


def test_missing_form_is_not_found(api):
    resp = api.submit("00000000-0000-0000-0000-000000000000", {})
    assert resp.status_code == 404
    assert resp.json()["code"] == "NOT_FOUND"


def test_missing_required_answer_is_named(api, admin):
    form, name, agama, _ = _survey(api, admin["token"])
    resp = api.submit(form["id"], {agama["id"]: "Hindu", name["id"]: ""})
    assert resp.status_code == 400
    problem = resp.json()
    assert problem["code"] == "MISSING_REQUIRED_ANSWER"
    assert problem["detail"] == 'Question "Name" is required'
    assert problem["question"] == {"id": name["id"], "title": "Name"}


def test_value_of_wrong_wire_shape_is_rejected(api, admin):
    form, name, _, _ = _survey(api, admin["token"])
    resp = api.client.post(
        "/api/v1/responses",
        json={"formId": form["id"], "answers": [{"questionId": name["id"], "value": 7}]},
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_answer_to_foreign_question_is_rejected(api, admin):
    form, name, _, _ = _survey(api, admin["token"])
    other = api.create_form(admin["token"], title="Other")
    foreign = api.add_question(admin["token"], other["id"], title="Elsewhere")
    resp = api.submit(form["id"], {name["id"]: "Ann", foreign["id"]: "x"})
    assert resp.status_code == 422
    assert resp.json()["code"] == "VALIDATION_ERROR"


def test_duplicate_submissions_create_distinct_responses(api, admin):
    form, name, _, _ = _survey(api, admin["token"])
    first = api.submit(form["id"], {name["id"]: "Same"}).json()["data"]
    second = api.submit(form["id"], {name["id"]: "Same"}).json()["data"]
    assert first["id"] != second["id"]
    listing = api.client.get(f"/api/v1/responses/form/{form['id']}", headers=api.auth(admin["token"]))
    assert listing.status_code == 200
    assert [r["id"] for r in listing.json()["data"]] == [second["id"], first["id"]]


def test_statistics_tally_answers(api, admin):
    form, name, agama, hobbies = _survey(api, admin["token"])
    api.submit(form["id"], {name["id"]: "Ann", hobbies["id"]: ["A", "B"]})
    api.submit(form["id"], {name["id"]: "Bob", agama["id"]: "Islam", hobbies["id"]: ["B"]})

    resp = api.client.get(f"/api/v1/responses/form/{form['id']}/stats", headers=api.auth(admin["token"]))
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["totalResponses"] == 2
    by_id = {s["questionId"]: s for s in data["questionStats"]}
    assert by_id[hobbies["id"]]["totalAnswers"] == 2
    assert by_id[hobbies["id"]]["answers"] == {"A": 1, "B": 2}
    assert by_id[agama["id"]] == {
        "questionId": agama["id"],
        "questionTitle": "Agama",
        "questionType": "MULTIPLE_CHOICE",
        "totalAnswers": 1,
        "answers": {"Islam": 1},
    }
    assert by_id[name["id"]]["answers"] == {"Ann": 1, "Bob": 1}


def test_statistics_omit_unanswered_questions(api, admin):
    form, name, agama, hobbies = _survey(api, admin["token"])
    api.submit(form["id"], {name["id"]: "Ann"})
    resp = api.client.get(f"/api/v1/responses/form/{form['id']}/stats", headers=api.auth(admin["token"]))
    ids = [s["questionId"] for s in resp.json()["data"]["questionStats"]]
    assert ids == [name["id"]]


def test_statistics_access_rules(api, admin):
    form, _, _, _ = _survey(api, admin["token"])
    path = f"/api/v1/responses/form/{form['id']}/stats"

    anonymous = api.client.get(path)
    assert anonymous.status_code == 401
    assert anonymous.json()["code"] == "NOT_AUTHENTICATED"

    stranger = api.register(role="ADMIN")
    denied = api.client.get(path, headers=api.auth(stranger["token"]))
    assert denied.status_code == 403
    assert denied.json()["code"] == "ACCESS_DENIED"

    plain_user = api.register(role="USER")
    assert api.client.get(path, headers=api.auth(plain_user["token"])).status_code == 403

    missing = api.client.get("/api/v1/responses/form/does-not-exist/stats", headers=api.auth(admin["token"]))
    assert missing.status_code == 403


def test_get_and_delete_single_response(api, admin):
    form, name, _, _ = _survey(api, admin["token"])
    created = api.submit(form["id"], {name["id"]: "Ann"}).json()["data"]
    path = f"/api/v1/responses/{created['id']}"

    fetched = api.client.get(path, headers=api.auth(admin["token"]))
    assert fetched.status_code == 200
    assert fetched.json()["data"]["answers"][0]["value"] == "Ann"

    stranger = api.register(role="ADMIN")
    assert api.client.delete(path, headers=api.auth(stranger["token"])).status_code == 403

    deleted = api.client.delete(path, headers=api.auth(admin["token"]))
    assert deleted.status_code == 200
    assert deleted.json() == {"success": True, "message": "Response deleted successfully"}
    assert api.client.get(path, headers=api.auth(admin["token"])).status_code == 404
