"""
Tests for purchase orders: numbering, combining, serial numbers and
cancellation.
"""

import re
from typing import Callable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from app.models.bank_order import BankOrder
from app.models.product import Product
from app.models.purchase_order import PurchaseOrder, PurchaseOrderStatus
from app.models.vendor import Vendor
from app.schemas.purchase_order import PurchaseOrderCreate, PurchaseOrderLineCreate
from app.services.purchase_order_service import PurchaseOrderService
from app.services.vendor_service import VendorService
from tests.conftest import API

PO_NUMBER = re.compile(r"^PO-\d{4}-\d{4}$")


@pytest.fixture(name="products")
def products_fixture(make_product: Callable[..., Product]) -> tuple[Product, Product]:
    return make_product("GC-1", "Air Fryer"), make_product("GC-2", "Blender")


@pytest.fixture(name="make_po")
def make_po_fixture(session: Session, vendor: Vendor) -> Callable[..., PurchaseOrder]:
    def _make(
        product: Product,
        quantity: int = 1,
        unit_price: float = 100.0,
        vendor_id: Optional[str] = None,
        bank_order_id: Optional[str] = None,
    ) -> PurchaseOrder:
        return PurchaseOrderService(session).create_order(
            PurchaseOrderCreate(
                vendor_id=vendor_id or vendor.id,
                bank_order_id=bank_order_id,
                products=[
                    PurchaseOrderLineCreate(
                        product_id=product.id, quantity=quantity, unit_price=unit_price
                    )
                ],
            )
        )

    return _make


def test_create_purchase_order(
    client: TestClient, admin_headers: dict, vendor: Vendor, products: tuple[Product, Product]
) -> None:
    air_fryer, blender = products
    response = client.post(
        f"{API}/purchase-orders",
        headers=admin_headers,
        json={
            "vendorId": vendor.id,
            "products": [
                {"productId": air_fryer.id, "quantity": 2, "unitPrice": 150.5},
                {"productId": blender.id, "quantity": 1, "unitPrice": 99},
            ],
        },
    )
    assert response.status_code == 201
    data = response.json()["data"]
    assert PO_NUMBER.match(data["poNumber"])
    assert data["poNumber"].endswith("-0001")
    assert data["status"] == "active"
    assert data["totalAmount"] == pytest.approx(400.0)
    first = data["products"][0]
    assert first["productName"] == "Air Fryer"
    assert first["bankProductNumber"] == "GC-1"
    assert first["totalPrice"] == pytest.approx(301.0)


def test_purchase_order_numbers_increase(
    make_po: Callable[..., PurchaseOrder], products: tuple[Product, Product]
) -> None:
    first = make_po(products[0])
    second = make_po(products[1])
    assert int(second.po_number[-4:]) == int(first.po_number[-4:]) + 1


def test_create_purchase_order_checks_references(
    client: TestClient,
    admin_headers: dict,
    staff_headers: dict,
    vendor: Vendor,
    products: tuple[Product, Product],
) -> None:
    body = {
        "vendorId": vendor.id,
        "products": [{"productId": "3fa85f64-5717-4562-b3fc-2c963f66afa6", "quantity": 1, "unitPrice": 1}],
    }
    assert client.post(f"{API}/purchase-orders", headers=admin_headers, json=body).status_code == 404

    body["products"] = []
    response = client.post(f"{API}/purchase-orders", headers=admin_headers, json=body)
    assert response.status_code == 400

    body["products"] = [{"productId": products[0].id, "quantity": 1, "unitPrice": 1}]
    assert client.post(f"{API}/purchase-orders", headers=staff_headers, json=body).status_code == 403


def test_list_by_vendor(
    client: TestClient,
    staff_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
    vendor: Vendor,
) -> None:
    make_po(products[0])
    make_po(products[1])
    response = client.get(f"{API}/purchase-orders/vendor/{vendor.id}", headers=staff_headers)
    assert response.status_code == 200
    assert len(response.json()["data"]) == 2

    body = client.get(
        f"{API}/purchase-orders", headers=staff_headers, params={"vendorId": vendor.id}
    ).json()
    assert body["total"] == 2


def test_combine_preview_writes_nothing(
    client: TestClient,
    session: Session,
    staff_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    first = make_po(products[0], quantity=2, unit_price=100)
    second = make_po(products[1], quantity=1, unit_price=50)

    response = client.post(
        f"{API}/purchase-orders/combine/preview",
        headers=staff_headers,
        json={"poIds": [first.id, second.id]},
    )
    assert response.status_code == 200
    preview = response.json()["data"]
    assert preview["poNumbers"] == [first.po_number, second.po_number]
    assert preview["originalPosCount"] == 2
    assert preview["totalAmount"] == pytest.approx(250.0)
    assert preview["vendorName"] == "Acme Electronics"
    assert [line["sourcePO"] for line in preview["products"]] == [
        first.po_number,
        second.po_number,
    ]

    session.refresh(first)
    assert first.status == PurchaseOrderStatus.ACTIVE


def test_merge(
    client: TestClient,
    admin_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    first = make_po(products[0], quantity=2, unit_price=100)
    second = make_po(products[1], quantity=1, unit_price=50)

    response = client.post(
        f"{API}/purchase-orders/merge",
        headers=admin_headers,
        json={"poIds": [first.id, second.id]},
    )
    assert response.status_code == 201
    merged = response.json()["data"]
    assert PO_NUMBER.match(merged["poNumber"])
    assert merged["mergedFrom"] == [first.po_number, second.po_number]
    assert merged["totalAmount"] == pytest.approx(250.0)
    assert merged["status"] == "active"
    assert len(merged["products"]) == 2

    for original in (first, second):
        data = client.get(
            f"{API}/purchase-orders/{original.id}", headers=admin_headers
        ).json()["data"]
        assert data["status"] == "merged"
        assert data["mergedInto"] == merged["id"]

    # Merged POs are frozen
    third = make_po(products[0])
    response = client.post(
        f"{API}/purchase-orders/merge",
        headers=admin_headers,
        json={"poIds": [first.id, third.id]},
    )
    assert response.status_code == 400
    assert response.json()["message"] == f"Cannot combine already merged POs: {first.po_number}"

    response = client.patch(
        f"{API}/purchase-orders/{merged['id']}",
        headers=admin_headers,
        json={"products": [{"productId": products[0].id, "serialNumber": "SN-1"}]},
    )
    assert response.status_code == 400
    response = client.post(f"{API}/purchase-orders/{first.id}/cancel", headers=admin_headers)
    assert response.status_code == 400


def test_merge_with_custom_number(
    client: TestClient,
    admin_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    first = make_po(products[0])
    second = make_po(products[1])
    third = make_po(products[1])

    response = client.post(
        f"{API}/purchase-orders/merge",
        headers=admin_headers,
        json={"poIds": [first.id, second.id], "newPoNumber": third.po_number},
    )
    assert response.status_code == 409
    assert response.json()["message"] == f"PO number {third.po_number} already exists"

    response = client.post(
        f"{API}/purchase-orders/merge",
        headers=admin_headers,
        json={"poIds": [first.id, second.id], "newPoNumber": "PO-CUSTOM-1"},
    )
    assert response.status_code == 201
    assert response.json()["data"]["poNumber"] == "PO-CUSTOM-1"


def test_merge_rules(
    client: TestClient,
    session: Session,
    admin_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    first = make_po(products[0])
    second = make_po(products[1])

    def merge(ids: list[str]):
        return client.post(
            f"{API}/purchase-orders/merge", headers=admin_headers, json={"poIds": ids}
        )

    response = merge([first.id, first.id])
    assert response.status_code == 400

    response = merge([first.id, "3fa85f64-5717-4562-b3fc-2c963f66afa6"])
    assert response.status_code == 404
    assert response.json()["message"] == "Some purchase orders were not found or have been deleted"

    other_vendor = VendorService(session).create(
        {
            "vendor_name": "Other Vendor",
            "phone": "1",
            "email": "other@vendor.example.com",
            "address": "x",
            "city": "y",
        }
    )
    foreign = make_po(products[0], vendor_id=other_vendor.id)
    response = merge([first.id, foreign.id])
    assert response.status_code == 400
    assert response.json()["message"] == "Cannot combine purchase orders from different vendors"

    client.post(f"{API}/purchase-orders/{second.id}/cancel", headers=admin_headers)
    response = merge([first.id, second.id])
    assert response.status_code == 400
    assert response.json()["message"] == f"Cannot combine cancelled POs: {second.po_number}"


def test_combinable_list(
    client: TestClient,
    admin_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
    vendor: Vendor,
) -> None:
    first = make_po(products[0])
    second = make_po(products[1])
    third = make_po(products[1])
    client.post(
        f"{API}/purchase-orders/merge",
        headers=admin_headers,
        json={"poIds": [first.id, second.id]},
    )

    response = client.get(
        f"{API}/purchase-orders/combinable/list",
        headers=admin_headers,
        params={"vendorId": vendor.id},
    )
    assert response.status_code == 200
    numbers = {po["poNumber"] for po in response.json()["data"]}
    assert third.po_number in numbers
    assert first.po_number not in numbers and second.po_number not in numbers


def test_cancel(
    client: TestClient,
    staff_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    po = make_po(products[0])
    response = client.post(f"{API}/purchase-orders/{po.id}/cancel", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"

    response = client.post(f"{API}/purchase-orders/{po.id}/cancel", headers=staff_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Purchase order is already cancelled"

    response = client.patch(
        f"{API}/purchase-orders/{po.id}",
        headers=staff_headers,
        json={"products": [{"productId": products[0].id, "serialNumber": "SN-1"}]},
    )
    assert response.status_code == 400


def test_serial_updates(
    client: TestClient,
    staff_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    po = make_po(products[0])
    response = client.patch(
        f"{API}/purchase-orders/{po.id}",
        headers=staff_headers,
        json={"products": [{"productId": products[0].id, "serialNumber": "SN-42"}]},
    )
    assert response.status_code == 200
    assert response.json()["data"]["products"][0]["serialNumber"] == "SN-42"

    response = client.patch(
        f"{API}/purchase-orders/{po.id}",
        headers=staff_headers,
        json={"products": [{"productId": products[1].id, "serialNumber": "SN-43"}]},
    )
    assert response.status_code == 404
    assert response.json()["message"] == f"Product with ID {products[1].id} not found in this PO"


def test_bulk_update_reports_each_po(
    client: TestClient,
    staff_headers: dict,
    make_po: Callable[..., PurchaseOrder],
    products: tuple[Product, Product],
) -> None:
    good = make_po(products[0])
    bad = make_po(products[0])
    client.post(f"{API}/purchase-orders/{bad.id}/cancel", headers=staff_headers)

    response = client.post(
        f"{API}/purchase-orders/bulk-update",
        headers=staff_headers,
        json={
            "updates": [
                {"poId": good.id, "products": [{"productId": products[0].id, "serialNumber": "A"}]},
                {"poId": bad.id, "products": [{"productId": products[0].id, "serialNumber": "B"}]},
                {"poId": "junk", "products": []},
            ]
        },
    )
    assert response.status_code == 200
    result = response.json()["data"]
    assert result["successCount"] == 1
    assert result["failedCount"] == 2
    assert result["successfulUpdates"][0]["poNumber"] == good.po_number
    errors = {item["poId"]: item["error"] for item in result["failedUpdates"]}
    assert errors[bad.id] == "Cannot update cancelled purchase orders."
    assert errors["junk"] == "Invalid purchase order ID: junk"


# Bulk creation from bank orders


def test_bulk_create_one_po_per_bank_order(
    client: TestClient,
    staff_headers: dict,
    vendor: Vendor,
    products: tuple[Product, Product],
    make_bank_order: Callable[..., BankOrder],
) -> None:
    air_fryer = products[0]
    first = make_bank_order(product_id=air_fryer.id, qty=2)
    second = make_bank_order(product_id=air_fryer.id)

    response = client.post(
        f"{API}/purchase-orders/bulk-create",
        headers=staff_headers,
        json={"vendorId": vendor.id, "unitPrice": 250, "bankOrderIds": [first.id, second.id]},
    )
    assert response.status_code == 201
    result = response.json()["data"]
    assert result["successCount"] == 2
    assert result["failedCount"] == 0
    created = {item["orderId"]: item for item in result["successfulCreations"]}
    assert set(created) == {first.id, second.id}
    assert all(item["orderType"] == "bank-order" for item in created.values())
    assert all(PO_NUMBER.match(item["poNumber"]) for item in created.values())

    pos = client.get(
        f"{API}/purchase-orders/vendor/{vendor.id}", headers=staff_headers
    ).json()["data"]
    by_order = {po["bankOrderId"]: po for po in pos}
    assert by_order[first.id]["totalAmount"] == 500
    assert by_order[first.id]["products"][0]["quantity"] == 2
    assert by_order[first.id]["products"][0]["productName"] == "Air Fryer"
    assert by_order[second.id]["totalAmount"] == 250


def test_bulk_create_checks_orders_before_writing(
    client: TestClient,
    session: Session,
    staff_headers: dict,
    dispatch_headers: dict,
    vendor: Vendor,
    products: tuple[Product, Product],
    make_bank_order: Callable[..., BankOrder],
) -> None:
    air_fryer, blender = products
    with_fryer = make_bank_order(product_id=air_fryer.id)
    with_blender = make_bank_order(product_id=blender.id)
    without_product = make_bank_order()

    def bulk_create(
        order_ids: list[str], headers: dict = staff_headers, vendor_id: str = vendor.id
    ):
        return client.post(
            f"{API}/purchase-orders/bulk-create",
            headers=headers,
            json={"vendorId": vendor_id, "unitPrice": 10, "bankOrderIds": order_ids},
        )

    mixed = bulk_create([with_fryer.id, with_blender.id])
    assert mixed.status_code == 400
    assert mixed.json()["message"].startswith("All orders must have the same product")

    missing_product = bulk_create([without_product.id])
    assert missing_product.status_code == 400
    assert "does not have a product assigned" in missing_product.json()["message"]

    unknown = "3fa85f64-5717-4562-b3fc-2c963f66afa6"
    assert bulk_create([unknown]).status_code == 404
    assert bulk_create([with_fryer.id], vendor_id=unknown).status_code == 404
    assert bulk_create([]).status_code == 400
    assert bulk_create([with_fryer.id], headers=dispatch_headers).status_code == 403

    assert PurchaseOrderService(session).list().total == 0


def test_bulk_create_reports_failed_orders(
    session: Session,
    vendor: Vendor,
    products: tuple[Product, Product],
    make_bank_order: Callable[..., BankOrder],
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    first = make_bank_order(product_id=products[0].id)
    second = make_bank_order(product_id=products[0].id)
    # Every PO gets the same number, so the second insert breaks the unique constraint
    monkeypatch.setattr(PurchaseOrderService, "generate_po_number", lambda self: "PO-2024-9999")

    result = PurchaseOrderService(session).bulk_create(vendor.id, 99.0, [first.id, second.id])
    assert result.success_count == 1
    assert result.failed_count == 1
    assert result.successful_creations[0].order_id == first.id
    assert result.failed_creations[0].order_id == second.id
    assert result.failed_creations[0].error == "Database error occurred"
