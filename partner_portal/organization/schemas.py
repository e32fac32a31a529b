"""
Organization API schemas.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class OrganizationSettingsUpdateRequest(BaseModel):
    """PATCH /api/v1/organization/settings"""
    enableChildBasedRequests: Optional[bool] = None
    enableIndividualRequests: Optional[bool] = None
    enableQuantityBasedRequests: Optional[bool] = None
    reminderDay: Optional[int] = Field(None, description="Day of month, 1-28")
    deadlineDay: Optional[int] = Field(None, description="Day of month, 1-28")
    partnerFormFields: Optional[List[str]] = Field(
        None,
        description="Optional profile sections shown to partners; empty shows all"
    )
    email: Optional[str] = None
