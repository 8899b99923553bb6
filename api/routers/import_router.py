"""
Import router - Validate uploaded workbooks against a header template.

This module provides the endpoint that checks an uploaded Excel file
against an expected header row and returns its rows.
"""

import os
import logging
from typing import Dict, List

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.dependencies import get_current_user, get_import_service, verify_file_size
from api.schemas.import_schema import ImportValidationResponse
from services.excel_import_service import ExcelImportService, SheetRow

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/import', tags=['import'])


def parse_headers(headers: str) -> List[str]:
    """Split a comma-separated header row."""
    return [h.strip() for h in headers.split(',') if h.strip()]


@router.post('/validate', response_model=ImportValidationResponse)
def validate_excel_file(
    file: UploadFile = File(..., description="Excel file to import (.xlsx or .xls)"),
    headers: str = Form(..., min_length=1, description="Comma-separated expected header row"),
    all_sheets: bool = Form(False, description="Import every sheet instead of only the first"),
    service: ExcelImportService = Depends(get_import_service),
    current_user: str = Depends(get_current_user)
):
    """
    Validate an uploaded workbook and return its rows.

    **Checks (stop at the first failure):**
    1. File type (.xlsx/.XLSX/.xls/.XLS)
    2. Sheet has data rows
    3. Header row matches `headers` exactly (trimmed)
    4. No empty cell in any header column

    **Returns:**
    - 200 with `success`, `message` and `data` (rows keyed by header)
    - 413 if the file exceeds the size limit
    """
    logger.info(f"Validation request from {current_user}: {file.filename}")

    # Verify file size
    file.file.seek(0, os.SEEK_END)
    verify_file_size(file.file.tell())
    file.file.seek(0)

    header_list = parse_headers(headers)

    def to_record(row: SheetRow) -> Dict[str, str]:
        return {header: row.text(i) for i, header in enumerate(header_list)}

    result = service.read_excel(header_list, file, to_record, all_sheets=all_sheets)

    if not result.success:
        logger.info(f"Validation failed for {file.filename}: {result.message}")

    return ImportValidationResponse(**result.model_dump())
