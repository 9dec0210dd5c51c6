import csv
import io
import json
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException
from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_api.config import get_settings
from inventory_api.core.constants import CSV_MIME_TYPES, LEGACY_EXCEL_MIME_TYPE, XLSX_MIME_TYPES
from inventory_api.core.dates import isoformat_cell
from inventory_api.core.errors import ValidationError
from inventory_api.models.upload_history import UploadHistory

logger = logging.getLogger(__name__)

_CSV_DELIMITERS = ",;\t|"
_SNIFF_BYTES = 4096


@dataclass
class ParsedUpload:
    file_type: str
    rows: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)

    @property
    def rows_processed(self) -> int:
        return len(self.rows) + len(self.errors)


def _is_blank(value):
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_cell(value):
    if isinstance(value, str):
        return value.strip()
    return isoformat_cell(value)


def _header_keys(headers):
    keys = []
    for idx, header in enumerate(headers):
        text = "" if header is None else str(header).strip()
        keys.append(text or f"column_{idx + 1}")
    return keys


def detect_file_type(filename: Optional[str], content_type: Optional[str]) -> str:
    suffix = Path(filename or "").suffix.lower()
    mime = (content_type or "").split(";")[0].strip().lower()
    if suffix == ".csv":
        return "csv"
    if suffix in (".xlsx", ".xlsm"):
        return "xlsx"
    if suffix == ".xls":
        raise ValidationError("Unsupported file type: legacy .xls workbooks are not supported")
    if mime in CSV_MIME_TYPES or mime == LEGACY_EXCEL_MIME_TYPE:
        # browsers on Windows report .csv uploads as application/vnd.ms-excel
        return "csv"
    if mime in XLSX_MIME_TYPES:
        return "xlsx"
    raise ValidationError("Unsupported file type")


def parse_csv(content: bytes) -> ParsedUpload:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ValidationError("CSV files must be UTF-8 encoded") from exc

    try:
        dialect = csv.Sniffer().sniff(text[:_SNIFF_BYTES], delimiters=_CSV_DELIMITERS)
    except csv.Error:
        dialect = csv.excel

    parsed = ParsedUpload("csv")
    reader = csv.reader(io.StringIO(text, newline=""), dialect)
    headers = next(reader, None)
    if not headers:
        return parsed
    keys = _header_keys(headers)

    for line_number, values in enumerate(reader, start=2):
        if all(_is_blank(value) for value in values):
            continue
        if len(values) > len(keys):
            parsed.errors.append(
                {
                    "row": line_number,
                    "error": f"expected {len(keys)} columns, found {len(values)}",
                }
            )
            continue
        row = {}
        for key, value in zip(keys, values):
            row[key] = _clean_cell(value)
        for key in keys[len(values):]:
            row[key] = ""
        parsed.rows.append(row)
    return parsed


def parse_xlsx(content: bytes) -> ParsedUpload:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as exc:
        raise ValidationError("Error parsing file: not a valid .xlsx workbook") from exc

    parsed = ParsedUpload("xlsx")
    try:
        if not workbook.worksheets:
            return parsed
        worksheet = workbook.worksheets[0]
        rows_iter = worksheet.iter_rows(values_only=True)
        headers = next(rows_iter, None)
        if not headers or all(_is_blank(header) for header in headers):
            return parsed
        keys = _header_keys(headers)

        for row_number, values in enumerate(rows_iter, start=2):
            if all(_is_blank(value) for value in values):
                continue
            extra = [
                value for value in values[len(keys):] if not _is_blank(value)
            ]
            if extra:
                parsed.errors.append(
                    {"row": row_number, "error": "values found outside the header columns"}
                )
                continue
            row = {}
            for key, value in zip(keys, values):
                if _is_blank(value):
                    continue
                row[key] = _clean_cell(value)
            parsed.rows.append(row)
    finally:
        workbook.close()
    return parsed


def parse_upload(
    filename: Optional[str], content_type: Optional[str], content: bytes
) -> ParsedUpload:
    file_type = detect_file_type(filename, content_type)
    if file_type == "csv":
        return parse_csv(content)
    return parse_xlsx(content)


def _record_history(
    db: Session,
    *,
    filename: str,
    file_type: Optional[str],
    rows_processed: int,
    rows_successful: int,
    errors: list[dict],
    uploaded_by: Optional[int],
) -> UploadHistory:
    history = UploadHistory(
        filename=filename[:255],
        file_type=file_type,
        rows_processed=rows_processed,
        rows_successful=rows_successful,
        rows_failed=len(errors),
        error_log=json.dumps(errors, ensure_ascii=True) if errors else None,
        uploaded_by=uploaded_by,
    )
    db.add(history)
    db.commit()
    return history


def process_upload(
    db: Session,
    *,
    filename: Optional[str],
    content_type: Optional[str],
    content: bytes,
    uploaded_by: Optional[int] = None,
) -> dict:
    settings = get_settings()
    if not content:
        raise ValidationError("No file uploaded")
    if len(content) > settings.UPLOAD_MAX_BYTES:
        limit_mb = settings.UPLOAD_MAX_BYTES / (1024 * 1024)
        raise ValidationError(f"File too large. Maximum size is {limit_mb:g}MB.")

    display_name = filename or "upload"
    try:
        parsed = parse_upload(filename, content_type, content)
    except ValidationError as exc:
        _record_history(
            db,
            filename=display_name,
            file_type=Path(display_name).suffix.lstrip(".").lower() or None,
            rows_processed=0,
            rows_successful=0,
            errors=[{"row": None, "error": exc.message}],
            uploaded_by=uploaded_by,
        )
        logger.warning("Upload %s rejected: %s", display_name, exc.message)
        raise

    _record_history(
        db,
        filename=display_name,
        file_type=parsed.file_type,
        rows_processed=parsed.rows_processed,
        rows_successful=len(parsed.rows),
        errors=parsed.errors,
        uploaded_by=uploaded_by,
    )
    logger.info(
        "Processed upload %s (%s): %s rows, %s failed",
        display_name,
        parsed.file_type,
        len(parsed.rows),
        len(parsed.errors),
    )
    return {
        "message": "File processed successfully",
        "rows": len(parsed.rows),
        "data": parsed.rows,
    }


def list_upload_history(db: Session, limit: int = 50) -> list[UploadHistory]:
    history = (
        db.execute(
            select(UploadHistory)
            .order_by(UploadHistory.created_at.desc(), UploadHistory.id.desc())
            .limit(limit)
        )
        .scalars()
        .all()
    )
    return list(history)
