from __future__ import annotations


def test_customer_crud(client, auth_headers):
    created = client.post("/api/customers", headers=auth_headers, json={"name": "Umbrella", "email": "ar@umbrella.test"})
    assert created.status_code == 201
    customer = created.json()
    assert customer["createdAt"]

    duplicate = client.post("/api/customers", headers=auth_headers, json={"name": "Other", "email": "AR@umbrella.test"})
    assert duplicate.status_code == 409

    assert client.get(f"/api/customers/{customer['id']}", headers=auth_headers).json()["name"] == "Umbrella"
    assert [c["id"] for c in client.get("/api/customers", headers=auth_headers).json()] == [customer["id"]]
    assert client.get("/api/customers/999", headers=auth_headers).status_code == 404


def test_customer_email_must_look_like_an_email(client, auth_headers):
    response = client.post("/api/customers", headers=auth_headers, json={"name": "X", "email": "not-an-email"})
    assert response.status_code == 400


def test_report_summary_and_export(client, auth_headers):
    customer = client.post(
        "/api/customers", headers=auth_headers, json={"name": "Umbrella", "email": "ar@umbrella.test"}
    ).json()
    for due_date in ("2026-03-01", "2026-04-01"):
        client.post(
            "/api/invoices",
            headers=auth_headers,
            json={
                "customerId": customer["id"],
                "issueDate": "2026-02-01",
                "dueDate": due_date,
                "items": [{"description": "Service", "quantity": 3, "unitPrice": "33.33"}],
            },
        )

    summary = client.get("/api/reports/summary", headers=auth_headers).json()
    assert summary["totalInvoices"] == 2
    assert summary["totalRevenue"] == "199.98"
    assert summary["overdueInvoices"] == {"count": 1, "totalAmount": "99.99"}
    assert summary["invoicesByStatus"]["draft"] == 2
    assert summary["totalCustomers"] == 1

    exported = client.get("/api/reports/all-invoices", headers=auth_headers).json()
    assert [invoice["invoiceNumber"] for invoice in exported] == ["INV-0001", "INV-0002"]
    assert exported[0]["items"][0]["lineTotal"] == "99.99"
