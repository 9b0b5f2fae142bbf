"""
Admin API Schema Definitions.

Pydantic schemas for admin endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional


class DemoUserResult(BaseModel):
    """Outcome of provisioning one demo account."""
    email: str
    status: Literal["created", "updated", "error"]
    message: Optional[str] = Field(None, description="Error detail when status is error")


class DemoUserSetupResponse(BaseModel):
    success: bool
    results: List[DemoUserResult]
