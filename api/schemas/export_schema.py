"""
Export-related Pydantic schemas.

This module contains schemas for export requests and responses.
"""

from typing import List, Optional
from pydantic import BaseModel, Field


class ExportRequest(BaseModel):
    """Rows to export, already rendered as cell strings."""
    
    headers: List[str] = Field(..., min_length=1, description="Header row")
    rows: List[List[Optional[str]]] = Field(..., min_length=1, description="Data rows, aligned with headers")
    file_name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="Output file name (default: timestamped name)"
    )
    
    class Config:
        json_schema_extra = {
            "example": {
                "headers": ["name", "email"],
                "rows": [["Ada", "ada@example.com"]],
                "file_name": "users.xlsx"
            }
        }


class ExportResponse(BaseModel):
    """Result of a completed export."""
    
    file_name: str = Field(..., description="Name of the generated file")
    download_url: str = Field(..., description="URL for downloading the file")
    rows: int = Field(..., description="Number of exported data rows")
    sheets: int = Field(..., description="Number of sheets in the workbook")
    
    class Config:
        json_schema_extra = {
            "example": {
                "file_name": "users.xlsx",
                "download_url": "/api/export/download/users.xlsx",
                "rows": 1,
                "sheets": 1
            }
        }
