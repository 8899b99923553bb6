"""
Import-related Pydantic schemas.

This module contains schemas for workbook validation responses.
"""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class ImportValidationResponse(BaseModel):
    """Outcome of validating and importing an uploaded workbook."""
    
    success: bool = Field(..., description="Whether the workbook passed validation")
    message: Optional[str] = Field(None, description="Failure reason")
    data: List[Dict[str, str]] = Field(
        default_factory=list,
        description="Imported rows keyed by header (empty on failure)"
    )
    
    class Config:
        json_schema_extra = {
            "example": {
                "success": False,
                "message": "Column [email] contains empty data!",
                "data": []
            }
        }
