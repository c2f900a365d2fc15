"""
Tests for bank orders: manual entry, status tracking, search and Excel import.
"""

from datetime import datetime
from io import BytesIO
from typing import Any, Callable, Optional

from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlmodel import Session, select

from app.models.bank import Bank
from app.models.bank_order import BankOrder
from app.models.product import Product, ProductType
from tests.conftest import API

XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER = [
    "CNIC",
    "CUSTOMER_NAME",
    "MOBILE1",
    "MOBILE2",
    "PHONE1",
    "PHONE2",
    "ADDRESS",
    "CITY",
    "BRAND",
    "PRODUCT",
    "GIFTCODE",
    "Qty",
    "Ref No.",
    "PO #",
    "ORDER DATE",
    "Redeemed Points",
]


def sheet_row(po_number: str, customer: Optional[str] = "Bilal Ahmed", **overrides: Any) -> list:
    values = {
        "CNIC": "35202-7654321-3",
        "CUSTOMER_NAME": customer,
        "MOBILE1": "03211234567",
        "ADDRESS": "Flat 2, Clifton",
        "CITY": "Karachi",
        "BRAND": "Philips",
        "PRODUCT": "Steam Iron",
        "GIFTCODE": "GC-900",
        "Qty": 1,
        "Ref No.": f"REF-{po_number}",
        "PO #": po_number,
        "ORDER DATE": datetime(2024, 6, 3),
        "Redeemed Points": 2500,
    }
    values.update(overrides)
    return [values.get(column) for column in HEADER]


def workbook_bytes(rows: list[list]) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.append(HEADER)
    for row in rows:
        worksheet.append(row)
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def upload(client: TestClient, headers: dict, bank_id: str, content: bytes, name="orders.xlsx"):
    return client.post(
        f"{API}/bank-orders/import",
        headers=headers,
        params={"bankId": bank_id},
        files={"file": (name, content, XLSX_TYPE)},
    )


def _order_body(bank: Bank, **overrides: Any) -> dict:
    body = {
        "bankId": bank.id,
        "cnic": "35202-1234567-1",
        "customerName": "Sara Malik",
        "mobile1": "03001112223",
        "address": "House 1, Gulberg",
        "city": "Lahore",
        "brand": "Dawlance",
        "product": "Microwave",
        "giftCode": "GC-500",
        "qty": 1,
        "refNo": "REF-500",
        "poNumber": "BPO-500",
        "orderDate": "2024-05-20T10:00:00Z",
        "redeemedPoints": -150,
    }
    body.update(overrides)
    return body


# Manual entry and status


def test_create_bank_order(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    response = client.post(f"{API}/bank-orders", headers=staff_headers, json=_order_body(bank))
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["status"] == "pending"
    assert [entry["status"] for entry in data["statusHistory"]] == ["pending"]
    assert data["redeemedPoints"] == -150


def test_create_bank_order_date_without_offset(
    client: TestClient, staff_headers: dict, bank: Bank
) -> None:
    body = _order_body(bank, orderDate="2024-05-20T10:00:00")
    response = client.post(f"{API}/bank-orders", headers=staff_headers, json=body)
    assert response.status_code == 201
    assert response.json()["data"]["orderDate"].startswith("2024-05-20T10:00:00")

    listed = client.get(
        f"{API}/bank-orders", headers=staff_headers, params={"startDate": "2024-05-20"}
    )
    assert listed.status_code == 200
    assert listed.json()["total"] == 1


def test_create_bank_order_validation(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    response = client.post(
        f"{API}/bank-orders", headers=staff_headers, json=_order_body(bank, qty=0)
    )
    assert response.status_code == 400
    assert "qty" in response.json()["errors"]


def test_create_bank_order_unknown_bank(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    body = _order_body(bank, bankId="3fa85f64-5717-4562-b3fc-2c963f66afa6")
    response = client.post(f"{API}/bank-orders", headers=staff_headers, json=body)
    assert response.status_code == 404


def test_duplicate_po_number(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    client.post(f"{API}/bank-orders", headers=staff_headers, json=_order_body(bank))
    response = client.post(f"{API}/bank-orders", headers=staff_headers, json=_order_body(bank))
    assert response.status_code == 409
    assert response.json()["message"] == "Duplicate PO #: BPO-500 already exists in the system"


def test_status_history_and_edit_lock(
    client: TestClient,
    staff_headers: dict,
    dispatch_headers: dict,
    make_bank_order: Callable[..., BankOrder],
) -> None:
    order = make_bank_order()

    response = client.patch(
        f"{API}/bank-orders/{order.id}", headers=staff_headers, json={"city": "Multan"}
    )
    assert response.status_code == 200
    assert response.json()["data"]["city"] == "Multan"

    # Dispatch may move status but not edit details
    response = client.patch(
        f"{API}/bank-orders/{order.id}", headers=dispatch_headers, json={"city": "Quetta"}
    )
    assert response.status_code == 403

    response = client.patch(
        f"{API}/bank-orders/{order.id}/status",
        headers=dispatch_headers,
        json={"status": "dispatched"},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "dispatched"
    assert [entry["status"] for entry in data["statusHistory"]] == ["pending", "dispatched"]

    response = client.patch(
        f"{API}/bank-orders/{order.id}", headers=staff_headers, json={"city": "Multan"}
    )
    assert response.status_code == 400
    assert response.json()["message"] == (
        "Cannot update order details. Order is already dispatched"
    )


def test_invalid_status(
    client: TestClient, staff_headers: dict, make_bank_order: Callable[..., BankOrder]
) -> None:
    order = make_bank_order()
    response = client.patch(
        f"{API}/bank-orders/{order.id}/status", headers=staff_headers, json={"status": "lost"}
    )
    assert response.status_code == 400
    assert "status" in response.json()["errors"]


def test_delete_bank_order_admin_only(
    client: TestClient,
    admin_headers: dict,
    staff_headers: dict,
    make_bank_order: Callable[..., BankOrder],
) -> None:
    order = make_bank_order()
    assert client.delete(f"{API}/bank-orders/{order.id}", headers=staff_headers).status_code == 403
    response = client.delete(f"{API}/bank-orders/{order.id}", headers=admin_headers)
    assert response.json()["message"] == "Bank order deleted successfully"
    assert client.get(f"{API}/bank-orders/{order.id}", headers=admin_headers).status_code == 404


# Search


def test_search_filters(
    client: TestClient,
    staff_headers: dict,
    bank: Bank,
    make_bank_order: Callable[..., BankOrder],
) -> None:
    make_bank_order(customer_name="Hamza Tariq", city="Peshawar")
    make_bank_order(
        customer_name="Zara Ali", city="Lahore", order_date=datetime(2024, 7, 15, 18, 30)
    )

    def names(**params: Any) -> list[str]:
        body = client.get(f"{API}/bank-orders", headers=staff_headers, params=params).json()
        return sorted(item["customerName"] for item in body["data"])

    assert names(search="hamza") == ["Hamza Tariq"]
    assert names(city="lah") == ["Zara Ali"]
    assert names(bankId=bank.id) == ["Hamza Tariq", "Zara Ali"]
    assert names(startDate="2024-07-01") == ["Zara Ali"]
    # The end date covers the whole day
    assert names(endDate="2024-07-15") == ["Hamza Tariq", "Zara Ali"]
    assert names(status="pending") == ["Hamza Tariq", "Zara Ali"]

    response = client.get(f"{API}/bank-orders", headers=staff_headers, params={"bankId": "x"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid bank ID: x"


# Excel import


def test_import_mixed_rows(
    client: TestClient,
    session: Session,
    staff_headers: dict,
    bank: Bank,
    make_bank_order: Callable[..., BankOrder],
) -> None:
    make_bank_order(po_number="EXISTING-PO")
    content = workbook_bytes(
        [
            sheet_row("XL-1"),
            sheet_row("XL-2", customer=None),
            sheet_row("EXISTING-PO"),
            [None] * len(HEADER),
            sheet_row("XL-3", **{"ORDER DATE": 45413, "Qty": 2}),
            sheet_row("XL-1"),
        ]
    )

    response = upload(client, staff_headers, bank.id, content)
    assert response.status_code == 201
    result = response.json()["data"]
    assert result["totalRows"] == 5
    assert result["successCount"] == 2
    assert result["failedCount"] == 3
    assert [record["row"] for record in result["successRecords"]] == [2, 6]
    assert result["successRecords"][0]["refNo"] == "REF-XL-1"

    failed = {record["row"]: record["errors"] for record in result["failedRecords"]}
    assert set(failed) == {3, 4, 7}
    assert "CUSTOMER_NAME is required" in failed[3]
    assert failed[4] == ["Duplicate PO #: EXISTING-PO already exists in the system"]
    assert failed[7] == ["Duplicate PO #: XL-1 already exists in the system"]

    # Both imported rows share one catalogue product for the gift code
    products = session.exec(
        select(Product).where(Product.bank_product_number == "GC-900")
    ).all()
    assert len(products) == 1
    assert products[0].product_type == ProductType.BANK_ORDER

    imported = session.exec(select(BankOrder).where(BankOrder.po_number == "XL-3")).one()
    assert imported.product_id == products[0].id
    assert imported.qty == 2
    assert imported.order_date.date().isoformat() == "2024-05-01"
    assert imported.bank_id == bank.id


def test_import_row_validation_messages(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    content = workbook_bytes(
        [sheet_row("XL-9", **{"Qty": 0, "ORDER DATE": "not a date", "Redeemed Points": "abc"})]
    )
    result = upload(client, staff_headers, bank.id, content).json()["data"]
    errors = result["failedRecords"][0]["errors"]
    assert "Qty is required and must be a positive number" in errors
    assert "ORDER DATE has invalid format" in errors
    assert "Redeemed Points is required and must be a valid number" in errors


def test_import_rejects_wrong_file_type(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    response = upload(client, staff_headers, bank.id, b"a,b\n1,2", name="orders.csv")
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid file type. Please upload an Excel file (.xlsx)"


def test_import_without_file(client: TestClient, staff_headers: dict, bank: Bank) -> None:
    response = client.post(
        f"{API}/bank-orders/import", headers=staff_headers, params={"bankId": bank.id}
    )
    assert response.status_code == 400
    assert response.json()["message"] == "No file uploaded"


def test_import_unknown_bank(client: TestClient, staff_headers: dict) -> None:
    response = upload(
        client,
        staff_headers,
        "3fa85f64-5717-4562-b3fc-2c963f66afa6",
        workbook_bytes([sheet_row("XL-1")]),
    )
    assert response.status_code == 404


def test_import_empty_and_corrupt_workbooks(
    client: TestClient, staff_headers: dict, bank: Bank
) -> None:
    response = upload(client, staff_headers, bank.id, workbook_bytes([]))
    assert response.status_code == 400
    assert response.json()["message"] == "Excel file is empty"

    response = upload(client, staff_headers, bank.id, b"definitely not a zip file")
    assert response.status_code == 400
    assert response.json()["message"].startswith("Failed to process Excel file")


def test_import_requires_staff(client: TestClient, dispatch_headers: dict, bank: Bank) -> None:
    response = upload(client, dispatch_headers, bank.id, workbook_bytes([sheet_row("XL-1")]))
    assert response.status_code == 403
