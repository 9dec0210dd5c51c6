import enum
from decimal import Decimal


class Role(str, enum.Enum):
    OWNER = "owner"
    STAFF = "staff"


DEFAULT_ROLE = Role.STAFF
DEFAULT_REORDER_LEVEL = 10

# INTEGER columns are 32-bit on PostgreSQL
MAX_DB_INT = 2**31 - 1
# largest value a NUMERIC(10, 2) column holds
MAX_MONEY = Decimal("99999999.99")

CSV_MIME_TYPES = ("text/csv", "application/csv")
XLSX_MIME_TYPES = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
)
LEGACY_EXCEL_MIME_TYPE = "application/vnd.ms-excel"
