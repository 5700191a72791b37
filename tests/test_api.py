"""
Tests for the HTTP API.
"""
import inspect

import pytest
from fastapi.testclient import TestClient

from app import api
from core.exceptions import NotificationError
from services.notification_sender import NotificationSender
from services.reconciliation_service import ReconciliationService

BANK_CSV = b"Date,Description,Amount\n2024-01-05,Shell Gas,42.50\n2024-01-06,Staples,15.00\n"
EXPENSES_CSV = b"Date,Vendor,Total\n2024-01-05,Shell,42.50\n2024-01-06,Staples,16.00\n"


class RecordingSender(NotificationSender):
    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, request):
        if self.fail:
            raise NotificationError("gateway down")
        self.sent.append(request)


@pytest.fixture
def sender():
    return RecordingSender()


@pytest.fixture
def client(monkeypatch, sender, tmp_path):
    monkeypatch.setenv("EXPORT_PATH", str(tmp_path))
    monkeypatch.setattr(api, "reconciliation_service", ReconciliationService(sender=sender))
    return TestClient(api.app)


def upload(client, path, content, filename="ledger.csv"):
    return client.post(path, files={"file": (filename, content, "text/csv")})


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_upload_and_classify(client):
    response = upload(client, "/ledgers/bank", BANK_CSV)
    assert response.status_code == 200
    assert response.json()["loaded"] == 2
    assert response.json()["summary"]["unreported"] == 2

    response = upload(client, "/ledgers/expenses", EXPENSES_CSV)
    assert response.status_code == 200
    body = response.json()
    assert body["loaded"] == 2
    assert body["summary"]["reported"] == 1

    transactions = client.get("/transactions").json()
    assert [t["id"] for t in transactions] == ["bank-0", "bank-1"]
    assert [t["reported"] for t in transactions] == [True, False]

    unreported = client.get("/transactions", params={"unreported_only": True}).json()
    assert [t["id"] for t in unreported] == ["bank-1"]

    assert len(client.get("/expenses").json()) == 2
    assert client.get("/summary").json()["unreported"] == 1


def test_upload_reports_diagnostics(client):
    response = upload(client, "/ledgers/bank", b"description,amount\nShell,oops\n")
    assert response.status_code == 200
    diagnostics = response.json()["diagnostics"]
    assert diagnostics == [
        {"row": 0, "field": "amount", "value": "oops", "message": "Amount is not a number; treated as 0"}
    ]


def test_upload_empty_file(client):
    response = upload(client, "/ledgers/bank", b"")
    assert response.status_code == 400


def test_upload_header_only(client):
    response = upload(client, "/ledgers/bank", b"date,description,amount\n")
    assert response.status_code == 200
    assert response.json()["loaded"] == 0


def test_upload_wrong_extension(client):
    response = upload(client, "/ledgers/bank", BANK_CSV, filename="ledger.xlsx")
    assert response.status_code == 400


def test_upload_not_utf8(client):
    response = upload(client, "/ledgers/bank", b"description,amount\n\xff\xfe,1\n")
    assert response.status_code == 400


def test_upload_with_bom(client):
    upload(client, "/ledgers/bank", "\ufeffDescription,Amount\nShell,1.00\n".encode("utf-8"))
    assert client.get("/transactions").json()[0]["description"] == "Shell"


def test_employee_crud(client):
    response = client.post("/employees", json={"name": "Dana Lee", "phone": "555-010-1234"})
    assert response.status_code == 201
    employee = response.json()
    assert employee["email"] is None

    client.post("/employees", json={"name": "Sam Ortiz", "phone": "555-020-9876", "email": "sam@example.com"})

    assert len(client.get("/employees").json()) == 2
    assert [e["name"] for e in client.get("/employees", params={"search": "sam"}).json()] == ["Sam Ortiz"]

    assert client.delete(f"/employees/{employee['id']}").status_code == 204
    assert client.delete(f"/employees/{employee['id']}").status_code == 404
    assert [e["name"] for e in client.get("/employees").json()] == ["Sam Ortiz"]


def test_employee_requires_phone(client):
    response = client.post("/employees", json={"name": "Dana Lee", "phone": "  "})
    assert response.status_code == 400


def test_send_notification(client, sender):
    upload(client, "/ledgers/bank", BANK_CSV)
    employee = client.post("/employees", json={"name": "Dana Lee", "phone": "555-010-1234"}).json()

    response = client.post("/notifications", json={"transaction_id": "bank-1", "employee_id": employee["id"]})
    assert response.status_code == 200
    body = response.json()
    assert body["recipient_phone"] == "555-010-1234"
    assert body["recipient_name"] == "Dana Lee"
    assert body["message_body"] == "Please submit receipt for: Staples - $15.00"
    assert len(sender.sent) == 1

    transactions = client.get("/transactions").json()
    assert transactions[1]["employee_id"] == employee["id"]


def test_send_notification_not_found(client):
    upload(client, "/ledgers/bank", BANK_CSV)
    response = client.post("/notifications", json={"transaction_id": "bank-0", "employee_id": "emp-missing"})
    assert response.status_code == 404
    assert response.json()["error_details"] == {"employee_id": "emp-missing"}


def test_send_notification_already_reported(client):
    upload(client, "/ledgers/bank", BANK_CSV)
    upload(client, "/ledgers/expenses", EXPENSES_CSV)
    employee = client.post("/employees", json={"name": "Dana Lee", "phone": "555"}).json()
    response = client.post("/notifications", json={"transaction_id": "bank-0", "employee_id": employee["id"]})
    assert response.status_code == 400


def test_send_notification_delivery_failure(client, sender):
    upload(client, "/ledgers/bank", BANK_CSV)
    employee = client.post("/employees", json={"name": "Dana Lee", "phone": "555"}).json()
    sender.fail = True
    response = client.post("/notifications", json={"transaction_id": "bank-0", "employee_id": employee["id"]})
    assert response.status_code == 502


def test_export(client):
    upload(client, "/ledgers/bank", BANK_CSV)
    response = client.get("/export")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith(
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
    assert response.content[:2] == b"PK"


def test_export_runs_outside_event_loop():
    # Sync handlers are dispatched to the threadpool
    assert not inspect.iscoroutinefunction(api.export_results)
