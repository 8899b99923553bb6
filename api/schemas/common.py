"""
Common Pydantic schemas used across the API.

This module contains shared schemas for errors, health checks and other
common response patterns.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, Field
from datetime import datetime


class ErrorResponse(BaseModel):
    """Standard error response format."""
    
    error: str = Field(..., description="Error message")
    detail: Optional[Dict[str, Any]] = Field(None, description="Additional error details")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
    path: Optional[str] = Field(None, description="Request path that caused the error")
    
    class Config:
        json_schema_extra = {
            "example": {
                "error": "File not found",
                "detail": {"file_name": "users.xlsx"},
                "timestamp": "2025-10-15T12:00:00Z",
                "path": "/api/export/download/users.xlsx"
            }
        }


class HealthCheckResponse(BaseModel):
    """Health check response."""
    
    status: str = Field(..., description="Service status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Health check timestamp")
    version: str = Field(..., description="API version")
    download_dir: str = Field(..., description="Download directory status")
    page_size: int = Field(..., description="Records fetched per page")
    sheet_size: int = Field(..., description="Records written per sheet")
    
    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2025-10-15T12:00:00Z",
                "version": "1.0.0",
                "download_dir": "writable",
                "page_size": 5000,
                "sheet_size": 10000
            }
        }
