"""Fast smoke checks for critical workflows."""

from io import BytesIO

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook

from app.core.config import settings
from tests.test_bank_orders import HEADER, XLSX_TYPE, sheet_row

API = settings.API_V1_PREFIX


@pytest.mark.smoke
def test_smoke_health_endpoint(client: TestClient) -> None:
    response = client.get(f"{API}/health")
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "healthy"


@pytest.mark.smoke
def test_smoke_import_to_delivery_challan(client: TestClient, admin_headers: dict) -> None:
    """Import an order, buy the item, dispatch it and issue its challan."""
    bank = client.post(f"{API}/banks", headers=admin_headers, json={"bankName": "UBL"})
    bank_id = bank.json()["data"]["id"]

    workbook = Workbook()
    workbook.active.append(HEADER)
    workbook.active.append(sheet_row("SMOKE-1"))
    buffer = BytesIO()
    workbook.save(buffer)
    result = client.post(
        f"{API}/bank-orders/import",
        headers=admin_headers,
        params={"bankId": bank_id},
        files={"file": ("orders.xlsx", buffer.getvalue(), XLSX_TYPE)},
    ).json()["data"]
    assert result["successCount"] == 1
    order_id = result["successRecords"][0]["id"]
    order = client.get(f"{API}/bank-orders/{order_id}", headers=admin_headers).json()["data"]

    vendor_id = client.post(
        f"{API}/vendors",
        headers=admin_headers,
        json={
            "vendorName": "Smoke Supplies",
            "phone": "1",
            "email": "smoke@supplies.example.com",
            "address": "x",
            "city": "Karachi",
        },
    ).json()["data"]["id"]
    po = client.post(
        f"{API}/purchase-orders",
        headers=admin_headers,
        json={
            "vendorId": vendor_id,
            "bankOrderId": order_id,
            "products": [{"productId": order["productId"], "quantity": 1, "unitPrice": 10}],
        },
    ).json()["data"]
    client.patch(
        f"{API}/purchase-orders/{po['id']}",
        headers=admin_headers,
        json={"products": [{"productId": order["productId"], "serialNumber": "SMOKE-SN"}]},
    )

    client.patch(
        f"{API}/bank-orders/{order_id}/status", headers=admin_headers, json={"status": "dispatched"}
    )
    courier_id = client.post(
        f"{API}/couriers",
        headers=admin_headers,
        json={"courierName": "Leopards", "courierType": "leopards"},
    ).json()["data"]["id"]

    response = client.post(
        f"{API}/delivery-challans/bank-order/{order_id}",
        headers=admin_headers,
        json={"courierId": courier_id, "trackingNumber": "LP-1"},
    )
    assert response.status_code == 201
    assert response.json()["data"]["productSerialNumber"] == "SMOKE-SN"
