"""
Export router - Build workbooks and serve generated files.

This module provides endpoints for exporting rows to a multi-sheet Excel
file and downloading files from the export directory.
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import FileResponse

from api.config import settings
from api.dependencies import get_current_user, get_export_service
from api.schemas.export_schema import ExportRequest, ExportResponse
from services.excel_export_service import ExcelExportService
from services.partition_service import sheet_count
from services.storage_service import content_disposition, resolve_download_path, timestamped_file_name

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/export', tags=['export'])

XLSX_MEDIA_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@router.post('', response_model=ExportResponse, status_code=status.HTTP_201_CREATED)
def create_export(
    payload: ExportRequest,
    service: ExcelExportService = Depends(get_export_service),
    current_user: str = Depends(get_current_user)
):
    """
    Export rows to an Excel file in the download directory.

    Rows are split into sheets of `SHEET_SIZE` records, each with the
    header row on top.

    **Returns:**
    - 201 with the file name and download URL
    - 400 if the file name is not a plain name inside the download directory
    - 500 if the file could not be written
    """
    file_name = payload.file_name or timestamped_file_name(settings.EXPORT_FILE_PREFIX)

    if resolve_download_path(file_name, service.download_dir) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file name '{file_name}'"
        )

    logger.info(f"Export request from {current_user}: {len(payload.rows)} rows to {file_name}")

    path = service.create_excel(
        payload.headers,
        payload.rows,
        lambda row: ['' if value is None else value for value in row],
        file_name
    )

    if path is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Export of '{file_name}' failed"
        )

    return ExportResponse(
        file_name=file_name,
        download_url=f"{settings.API_PREFIX}/export/download/{quote(file_name)}",
        rows=len(payload.rows),
        sheets=sheet_count(len(payload.rows), service.partition)
    )


@router.get('/download/{file_name}')
def download_export(
    file_name: str,
    request: Request,
    service: ExcelExportService = Depends(get_export_service)
):
    """
    Download a generated file.

    The `Content-Disposition` file name is encoded for the requesting
    browser (see `services.storage_service.encode_download_filename`).
    """
    path = resolve_download_path(file_name, service.download_dir)

    if path is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid file name '{file_name}'"
        )

    if not path.is_file():
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"File {file_name} not found"
        )

    disposition = content_disposition(request.headers.get('user-agent'), file_name)

    return FileResponse(
        path,
        media_type=XLSX_MEDIA_TYPE,
        headers={'Content-Disposition': disposition}
    )
