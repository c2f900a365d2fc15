"""
Bank order service: manual entry, Excel import, status tracking.

Imports read the first sheet of an ``.xlsx`` workbook. The header row names the
columns below; each subsequent non-empty row becomes one order or one entry in
``failedRecords``. A failing row never aborts the rest of the import.
"""

from datetime import date, datetime, time
from io import BytesIO
from pathlib import Path
from typing import Any, Optional

from openpyxl import load_workbook
from openpyxl.utils.datetime import from_excel
from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from app.core.exceptions import AppError, BadRequestError
from app.core.logging import AuditLogger
from app.models.bank_order import LOCKED_ORDER_STATUSES, BankOrder, OrderStatus
from app.models.base import as_utc, utcnow
from app.models.product import ProductType
from app.schemas.bank_order import ImportFailedRecord, ImportResult, ImportSuccessRecord
from app.services.bank_service import BankService
from app.services.base_service import Page, SoftDeleteService, day_end, day_start
from app.services.product_service import ProductService

EXCEL_EXTENSIONS = (".xlsx",)

REQUIRED_TEXT_COLUMNS = (
    "CNIC",
    "CUSTOMER_NAME",
    "MOBILE1",
    "ADDRESS",
    "CITY",
    "BRAND",
    "PRODUCT",
    "GIFTCODE",
    "Ref No.",
    "PO #",
)

# Column header -> BankOrder field
TEXT_COLUMNS = {
    "CNIC": "cnic",
    "CUSTOMER_NAME": "customer_name",
    "MOBILE1": "mobile1",
    "MOBILE2": "mobile2",
    "PHONE1": "phone1",
    "PHONE2": "phone2",
    "ADDRESS": "address",
    "CITY": "city",
    "BRAND": "brand",
    "PRODUCT": "product",
    "GIFTCODE": "gift_code",
    "Ref No.": "ref_no",
    "PO #": "po_number",
}

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%m/%d/%Y", "%d-%m-%Y", "%d-%b-%Y")


def history_entry(status: OrderStatus) -> dict[str, str]:
    return {"status": OrderStatus(status).value, "timestamp": utcnow().isoformat()}


def cell_text(value: Any) -> str:
    """Render a cell as trimmed text; whole floats lose their ``.0``."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_number(value: Any) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _read_date(value: Any) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        try:
            return from_excel(value)
        except (TypeError, ValueError, OverflowError):
            return None
    text = cell_text(value)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def parse_excel_date(value: Any) -> Optional[datetime]:
    """
    Accept native datetimes, Excel serial numbers and common text formats.
    Sheet dates carry no offset and are read as UTC.

    Returns:
        The parsed, timezone-aware datetime, or None if the value is not a date
    """
    return as_utc(_read_date(value))


def json_safe(row: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, (date, datetime)) else value
        for key, value in row.items()
    }


class BankOrderService(SoftDeleteService[BankOrder]):
    model = BankOrder
    resource_name = "Bank order"
    unique_fields = (("po_number",),)

    def __init__(self, session: Session, audit: Optional[AuditLogger] = None):
        super().__init__(session, audit)
        self.banks = BankService(session, audit=self.audit)
        self.products = ProductService(session, audit=self.audit)

    def conflict_message(self, fields: tuple[str, ...], values: dict[str, Any]) -> str:
        return f"Duplicate PO #: {values['po_number']} already exists in the system"

    def _resolve_references(self, data: dict[str, Any]) -> dict[str, Any]:
        if "bank_id" in data:
            data["bank_id"] = self.banks.get(data["bank_id"]).id
        if data.get("product_id") is not None:
            data["product_id"] = self.products.get(data["product_id"]).id
        return data

    def create(self, data: dict[str, Any]) -> BankOrder:
        """
        Create an order in ``pending`` with a one-entry status history.

        Raises:
            NotFoundError: Bank or product missing
            ConflictError: PO number already used by a live order
        """
        data = self._resolve_references(dict(data))
        data["order_date"] = as_utc(data.get("order_date"))
        data["status"] = OrderStatus.PENDING
        data["status_history"] = [history_entry(OrderStatus.PENDING)]
        return super().create(data)

    def search(
        self,
        page: Any = 1,
        limit: Any = 10,
        search: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        city: Optional[str] = None,
        bank_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Page[BankOrder]:
        """
        List orders.

        Args:
            search: Case-insensitive match on customer, CNIC, reference, PO
                number, city, mobile, product, brand or gift code
            status: Exact current status
            city: Case-insensitive partial city match
            bank_id: Sponsoring bank
            start_date: Earliest order date (inclusive)
            end_date: Latest order date (inclusive, whole day)
        """
        clauses = []
        if search and search.strip():
            pattern = f"%{search.strip().lower()}%"
            columns = (
                BankOrder.customer_name,
                BankOrder.cnic,
                BankOrder.ref_no,
                BankOrder.po_number,
                BankOrder.city,
                BankOrder.mobile1,
                BankOrder.product,
                BankOrder.brand,
                BankOrder.gift_code,
            )
            clauses.append(or_(*(func.lower(column).like(pattern) for column in columns)))
        if city and city.strip():
            clauses.append(func.lower(BankOrder.city).like(f"%{city.strip().lower()}%"))
        if bank_id:
            clauses.append(BankOrder.bank_id == self.parse_id(bank_id, "bank"))
        if start_date:
            clauses.append(BankOrder.order_date >= day_start(start_date))
        if end_date:
            clauses.append(BankOrder.order_date <= day_end(end_date))
        return self.list(page, limit, filters={"status": status}, clauses=clauses)

    def update(self, record_id: Any, patch: dict[str, Any]) -> BankOrder:
        """
        Edit customer or product details.

        Raises:
            BadRequestError: Order already dispatched or delivered
        """
        order = self.get(record_id)
        if order.status in LOCKED_ORDER_STATUSES:
            raise BadRequestError(
                f"Cannot update order details. Order is already {OrderStatus(order.status).value}"
            )
        return super().update(order.id, self._resolve_references(dict(patch)))

    def update_status(self, record_id: Any, status: OrderStatus) -> BankOrder:
        """Set the current status and append it to the history."""
        order = self.get(record_id)
        order.status = status
        # Reassign so the JSON column is flagged dirty
        order.status_history = [*(order.status_history or []), history_entry(status)]
        order = self.save(order)
        self.audit.log(f"Bank order {order.id} status changed to {status.value}", self.context)
        return order

    # Excel import

    def import_from_excel(
        self,
        content: Optional[bytes],
        filename: Optional[str],
        bank_id: Any,
    ) -> ImportResult:
        """
        Import orders from an uploaded workbook.

        Raises:
            BadRequestError: No file, wrong file type, unreadable or empty workbook
            NotFoundError: Bank missing
        """
        if not content or not filename:
            raise BadRequestError("No file uploaded")
        bank = self.banks.get(bank_id)
        if Path(filename).suffix.lower() not in EXCEL_EXTENSIONS:
            raise BadRequestError("Invalid file type. Please upload an Excel file (.xlsx)")

        rows = self._read_rows(content)
        if not rows:
            raise BadRequestError("Excel file is empty")

        result = ImportResult(total_rows=len(rows))
        for row_number, row in rows:
            errors = self.validate_row(row)
            if not errors:
                po_number = cell_text(row.get("PO #"))
                if self.session.exec(
                    self.active_query().where(BankOrder.po_number == po_number)
                ).first() is not None:
                    errors = [f"Duplicate PO #: {po_number} already exists in the system"]
            if errors:
                result.failed_records.append(
                    ImportFailedRecord(row=row_number, data=json_safe(row), errors=errors)
                )
                continue

            try:
                order = self._create_from_row(row, bank.id)
            except (AppError, SQLAlchemyError) as e:
                message = e.message if isinstance(e, AppError) else str(getattr(e, "orig", None) or e)
                result.failed_records.append(
                    ImportFailedRecord(
                        row=row_number,
                        data=json_safe(row),
                        errors=[f"Database error: {message}"],
                    )
                )
                continue
            result.success_records.append(
                ImportSuccessRecord(
                    row=row_number,
                    id=order.id,
                    ref_no=order.ref_no,
                    customer_name=order.customer_name,
                )
            )

        result.success_count = len(result.success_records)
        result.failed_count = len(result.failed_records)
        self.audit.log(
            f"Excel import for bank {bank.id}: {result.success_count} imported, "
            f"{result.failed_count} failed",
            self.context,
        )
        return result

    def _read_rows(self, content: bytes) -> list[tuple[int, dict[str, Any]]]:
        """Return ``(spreadsheet row number, {header: value})`` for non-empty rows."""
        try:
            workbook = load_workbook(BytesIO(content), data_only=True, read_only=True)
        except Exception as e:
            self.audit.error(f"Unreadable Excel upload: {e}", self.context)
            raise BadRequestError(f"Failed to process Excel file: {e}")

        try:
            worksheet = workbook.worksheets[0]
            iterator = worksheet.iter_rows(values_only=True)
            header = next(iterator, None)
            if header is None:
                return []
            columns = [cell_text(name) for name in header]
            rows = []
            for row_number, values in enumerate(iterator, start=2):
                if all(cell_text(value) == "" for value in values):
                    continue
                rows.append(
                    (
                        row_number,
                        {
                            column: value
                            for column, value in zip(columns, values)
                            if column
                        },
                    )
                )
            return rows
        finally:
            workbook.close()

    @staticmethod
    def validate_row(row: dict[str, Any]) -> list[str]:
        errors = [
            f"{column} is required"
            for column in REQUIRED_TEXT_COLUMNS
            if not cell_text(row.get(column))
        ]

        qty = parse_number(row.get("Qty"))
        if qty is None or qty < 1:
            errors.append("Qty is required and must be a positive number")

        if not cell_text(row.get("ORDER DATE")):
            errors.append("ORDER DATE is required")
        elif parse_excel_date(row.get("ORDER DATE")) is None:
            errors.append("ORDER DATE has invalid format")

        if parse_number(row.get("Redeemed Points")) is None:
            errors.append("Redeemed Points is required and must be a valid number")
        return errors

    def _create_from_row(self, row: dict[str, Any], bank_id: str) -> BankOrder:
        data: dict[str, Any] = {
            field: cell_text(row.get(column)) or None for column, field in TEXT_COLUMNS.items()
        }
        product = self.products.get_or_create(
            data["gift_code"], data["product"], ProductType.BANK_ORDER
        )
        data.update(
            bank_id=bank_id,
            product_id=product.id,
            qty=int(parse_number(row.get("Qty")) or 1),
            order_date=parse_excel_date(row.get("ORDER DATE")),
            redeemed_points=parse_number(row.get("Redeemed Points")),
        )
        return self.create(data)
