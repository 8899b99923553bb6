"""
Dependency injection utilities for FastAPI.

This module provides reusable dependencies for the export/import services,
authentication, and other cross-cutting concerns.
"""

import logging

from fastapi import Depends, HTTPException, Header, status

from api.config import settings
from services.excel_export_service import ExcelExportService
from services.excel_import_service import ExcelImportService

logger = logging.getLogger(__name__)


def get_export_service() -> ExcelExportService:
    """
    Get export service dependency configured from settings.

    Usage:
        @app.post("/endpoint")
        def endpoint(service: ExcelExportService = Depends(get_export_service)):
            pass
    """
    return ExcelExportService(
        download_dir=settings.DOWNLOAD_DIR,
        partition=settings.partition,
        sheet_name_template=settings.SHEET_NAME_TEMPLATE
    )


def get_import_service() -> ExcelImportService:
    """Get import service dependency."""
    return ExcelImportService()


def get_api_key(
    x_api_key: str = Header(None, alias=settings.API_KEY_HEADER)
) -> str:
    """
    Validate API key from header.

    Args:
        x_api_key: API key from request header

    Returns:
        Validated API key

    Raises:
        HTTPException: If API key is missing while auth is enabled
    """
    if not settings.ENABLE_API_KEY_AUTH:
        # API key auth disabled - allow all requests
        return "public"

    if not x_api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required",
            headers={"WWW-Authenticate": "ApiKey"}
        )

    return x_api_key


def get_current_user(api_key: str = Depends(get_api_key)) -> str:
    """
    Get current user from API key.

    The API key itself is used as the user identifier.
    """
    return api_key


def verify_file_size(file_size: int) -> bool:
    """
    Verify uploaded file size is within limit.

    Args:
        file_size: File size in bytes

    Returns:
        True if size is acceptable

    Raises:
        HTTPException: If file is too large
    """
    max_size_bytes = settings.MAX_FILE_SIZE_MB * 1024 * 1024

    if file_size > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File size ({file_size / 1024 / 1024:.1f} MB) exceeds maximum allowed "
                   f"({settings.MAX_FILE_SIZE_MB} MB)"
        )

    return True
