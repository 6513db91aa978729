"""
HTTP API tests: upload, filtered records, filter configuration and
escalation mail endpoints, run against an in-memory database.
"""

import smtplib

from conftest import make_csv, sample_row

CSV = "text/csv"


def upload(client, content, filename="tracker.csv", content_type=CSV):
    return client.post("/api/v1/uploads", files={"file": (filename, content, content_type)})


def seed(client):
    rows = [
        sample_row(department="Finance", activity="Invoice 1", pending=40, tat=10),
        sample_row(department="HR", activity="Onboarding", pending=12, tat=10, email="hr.head@example.com"),
        sample_row(department="Finance", activity="Payroll", pending=8, tat=10),
        sample_row(department="Legal", activity="Contract", pending=70, tat=30, sent="Yes"),
    ]
    response = upload(client, make_csv(rows))
    assert response.status_code == 200
    return response.json()


def record_ids(client, **params):
    body = client.get("/api/v1/records", params=params).json()
    return {r["fileActivity"]: r["id"] for r in body["records"]}


# Uploads

def test_root(client):
    assert client.get("/").json() == {"message": "TAT Escalator API"}


def test_upload_stores_only_pending_rows(client):
    body = seed(client)

    assert body["totalRows"] == 4
    assert body["pendingCount"] == 3
    assert body["storedCount"] == 3
    assert body["filename"] == "tracker.csv"


def test_fifty_rows_twelve_visible_under_default(client):
    rows = [sample_row(activity=f"File {i}", pending=25 if i < 12 else 2, tat=10) for i in range(50)]
    assert upload(client, make_csv(rows)).json()["storedCount"] == 12

    body = client.get("/api/v1/records").json()

    assert body["totalCount"] == 12
    assert body["filteredCount"] == 12
    assert body["appliedFilters"][0]["id"] == "default"


def test_new_upload_replaces_previous_records(client):
    seed(client)
    upload(client, make_csv([sample_row(activity="Only one", pending=99, tat=1)]))

    body = client.get("/api/v1/records").json()
    assert [r["fileActivity"] for r in body["records"]] == ["Only one"]


def test_parse_does_not_store(client):
    response = client.post(
        "/api/v1/uploads/parse",
        files={"file": ("tracker.csv", make_csv([sample_row(pending=9, tat=3)]), CSV)},
    )

    assert response.status_code == 200
    assert response.json()["pending"][0]["pendingSince"] == 9
    assert client.get("/api/v1/records").json()["totalCount"] == 0


def test_upload_without_file(client):
    response = client.post("/api/v1/uploads")
    assert response.status_code == 400


def test_upload_wrong_type(client):
    response = upload(client, b"%PDF-1.4", filename="tracker.pdf", content_type="application/pdf")
    assert response.status_code == 400


def test_upload_too_large(client, monkeypatch):
    from escalator.services.upload_service import upload_service

    monkeypatch.setattr(upload_service, "max_upload_size_mb", 0)
    response = upload(client, make_csv([sample_row()]))

    assert response.status_code == 413


def test_upload_missing_columns(client):
    response = upload(client, b"Department,Remarks\nFinance,late\n")

    assert response.status_code == 400
    assert response.json()["reason"] == "missing_columns"
    assert "TAT (Days)" in response.json()["detail"]


def test_failed_upload_keeps_previous_records(client, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from escalator.crud import crud_record

    seed(client)

    def broken_save(*args, **kwargs):
        raise OperationalError("INSERT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud_record, "save_records", broken_save)
    response = upload(client, make_csv([sample_row(activity="Replacement", pending=50, tat=1)]), filename="new.csv")

    assert response.status_code == 503
    stats = client.get("/api/v1/records/stats").json()
    assert stats["totalCount"] == 3
    assert stats["lastUploadFilename"] == "tracker.csv"
    assert set(record_ids(client, refresh=True)) == {"Invoice 1", "Onboarding", "Contract"}


def test_upload_bad_row(client):
    response = upload(client, make_csv([sample_row(tat="ten")]))

    assert response.status_code == 400
    assert response.json()["reason"] == "invalid_row"


# Records

def test_records_search_department_and_status(client):
    seed(client)

    assert set(record_ids(client, search="ONBOARD")) == {"Onboarding"}
    assert set(record_ids(client, search="hr.head")) == {"Onboarding"}
    assert set(record_ids(client, department="Finance")) == {"Invoice 1"}
    assert set(record_ids(client, mail_status="sent")) == {"Contract"}
    assert set(record_ids(client, mail_status="pending")) == {"Invoice 1", "Onboarding"}


def test_records_sorting(client):
    seed(client)

    body = client.get("/api/v1/records", params={"sort_by": "pendingSince", "sort_dir": "asc"}).json()
    assert [r["pendingSince"] for r in body["records"]] == [12, 40, 70]

    body = client.get("/api/v1/records", params={"sort_by": "department", "sort_dir": "desc"}).json()
    assert [r["department"] for r in body["records"]] == ["Legal", "HR", "Finance"]


def test_records_bad_sort_column(client):
    response = client.get("/api/v1/records", params={"sort_by": "remarks"})
    assert response.status_code == 400


def test_departments_and_stats(client):
    seed(client)

    assert client.get("/api/v1/records/departments").json() == ["Finance", "HR", "Legal"]

    stats = client.get("/api/v1/records/stats").json()
    assert stats["totalCount"] == 3
    assert stats["sentCount"] == 1
    assert stats["pendingCount"] == 2
    assert stats["lastUploadFilename"] == "tracker.csv"


def test_email_draft(client):
    seed(client)
    record_id = record_ids(client)["Invoice 1"]

    draft = client.get(f"/api/v1/records/{record_id}/email-draft").json()

    assert draft["to"] == "boss@example.com"
    assert draft["subject"] == "Escalation Required: Invoice 1 - Finance"
    assert "pending for 40 days, which exceeds the TAT of 10 days" in draft["body"]
    assert client.get("/api/v1/records/9999/email-draft").status_code == 404


def test_clear_all_data(client):
    seed(client)
    assert client.get("/api/v1/filters").json() is not None

    assert client.delete("/api/v1/records").status_code == 204

    assert client.get("/api/v1/filters").json() is None
    body = client.get("/api/v1/records").json()
    assert body["records"] == []
    assert body["totalCount"] == 0
    assert client.get("/api/v1/records/stats").json()["lastUploadFilename"] is None


# Filters

FINANCE_ONLY = {"filters": [{
    "id": "finance",
    "conditions": [{"column": "department", "operator": "equals", "value": "finance"}],
    "logic": "AND",
}]}


def test_columns_endpoint(client):
    body = client.get("/api/v1/filters/columns").json()
    by_key = {c["key"]: c for c in body}

    assert len(body) == 9
    assert by_key["mailSent"]["type"] == "boolean"
    assert by_key["mailSent"]["defaultValue"] is False
    assert [o["value"] for o in by_key["department"]["operators"]] == ["equals", "contains"]


def test_filters_lifecycle(client):
    assert client.get("/api/v1/filters").json() is None

    saved = client.put("/api/v1/filters", json=FINANCE_ONLY)
    assert saved.status_code == 200
    [stored] = client.get("/api/v1/filters").json()["filters"]
    assert stored["id"] == "finance"
    assert stored["conditions"][0]["value"] == "finance"

    reset = client.post("/api/v1/filters/reset").json()
    assert reset["filters"][0]["conditions"][0]["compareColumn"] == "tatDays"

    assert client.delete("/api/v1/filters").status_code == 204
    assert client.get("/api/v1/filters").json() is None


def test_saved_filters_change_the_records_view(client):
    seed(client)
    client.put("/api/v1/filters", json=FINANCE_ONLY)

    body = client.get("/api/v1/records").json()

    assert body["totalCount"] == 3
    assert body["filteredCount"] == 1
    assert body["records"][0]["fileActivity"] == "Invoice 1"


def test_invalid_filters_are_rejected(client):
    bad = {"filters": [{"id": "x", "conditions": [{"column": "owner", "operator": "equals", "value": "a"}]}]}

    response = client.put("/api/v1/filters", json=bad)

    assert response.status_code == 400
    assert response.json()["reason"] == "unknown_column"
    assert client.get("/api/v1/filters").json() is None


def test_malformed_filter_body(client):
    response = client.put("/api/v1/filters", json={"filters": [{"conditions": []}]})
    assert response.status_code == 400


def test_preview(client):
    seed(client)

    body = client.post("/api/v1/filters/preview", json=FINANCE_ONLY).json()

    assert body == {"totalCount": 3, "filteredCount": 1}
    assert client.get("/api/v1/filters").json()["filters"][0]["id"] == "default"


def test_generate_requires_prompt(client):
    assert client.post("/api/v1/filters/generate", json={"prompt": "   "}).status_code == 400


def test_generate_without_api_key(client):
    response = client.post("/api/v1/filters/generate", json={"prompt": "finance files"})
    assert response.status_code == 503


# Mail

def mail_body(record_id, to="boss@example.com"):
    return {"recordId": record_id, "to": to, "subject": "Escalation Required", "body": "Please act"}


def test_mail_status(client):
    assert client.get("/api/v1/mail/status").json() == {"configured": True, "reachable": None}
    assert client.get("/api/v1/mail/status", params={"verify": True}).json()["reachable"] is True


def test_send_mail_marks_record_sent(client, fake_smtp):
    seed(client)
    record_id = record_ids(client)["Invoice 1"]

    response = client.post("/api/v1/mail/send", json=mail_body(record_id))

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert len(fake_smtp.sent) == 1

    assert set(record_ids(client, mail_status="sent")) == {"Invoice 1", "Contract"}

    again = client.post("/api/v1/mail/send", json=mail_body(record_id))
    assert again.status_code == 409
    assert len(fake_smtp.sent) == 1


def test_send_mail_validation(client):
    seed(client)
    record_id = record_ids(client)["Invoice 1"]

    missing = client.post("/api/v1/mail/send", json={"recordId": record_id, "to": "boss@example.com"})
    assert missing.status_code == 400

    invalid = client.post("/api/v1/mail/send", json=mail_body(record_id, to="boss-at-example"))
    assert invalid.status_code == 400

    unknown = client.post("/api/v1/mail/send", json=mail_body(9999))
    assert unknown.status_code == 404


def test_send_mail_failure_leaves_record_pending(client, fake_smtp):
    seed(client)
    record_id = record_ids(client)["Invoice 1"]
    fake_smtp.failures = [smtplib.SMTPAuthenticationError(535, b"Authentication failed")]

    response = client.post("/api/v1/mail/send", json=mail_body(record_id))

    assert response.status_code == 500
    assert "Invoice 1" in record_ids(client, mail_status="pending")


def test_send_mail_not_configured(client):
    from escalator.api import deps
    from escalator.services.mailer import Mailer
    from main import app

    app.dependency_overrides[deps.get_mailer] = lambda: Mailer(None, None, None, None, None)

    response = client.post("/api/v1/mail/send", json=mail_body(1))

    assert response.status_code == 503
    assert client.get("/api/v1/mail/status").json()["configured"] is False


def test_send_mail_rate_limited(client):
    from escalator.api import deps
    from main import app

    limiter = deps.RateLimiter(2)
    app.dependency_overrides[deps.get_mail_rate_limiter] = lambda: limiter

    codes = [client.post("/api/v1/mail/send", json=mail_body(9999)).status_code for _ in range(3)]

    assert codes == [404, 404, 429]


def test_rate_limiter_window():
    from escalator.api.deps import RateLimiter

    now = [0.0]
    limiter = RateLimiter(2, clock=lambda: now[0])

    assert limiter.allow("1.2.3.4")
    assert limiter.allow("1.2.3.4")
    assert not limiter.allow("1.2.3.4")
    assert limiter.allow("5.6.7.8")

    now[0] = 61.0
    assert limiter.allow("1.2.3.4")
