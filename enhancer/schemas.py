"""
Relay Schemas - Pydantic models

PURE DATA MODELS - NO LOGIC
Defines the contract between the browser extension and the relay.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field

from .modes import Mode


# ============================================================================
# INBOUND (normalized)
# ============================================================================

class EnhancementRequest(BaseModel):
    """
    Validated, normalized enhancement request.

    Legacy aliases and field names are already resolved: mode is always
    canonical by the time one of these exists.
    """

    prompt: str = Field(..., min_length=1, max_length=10000)
    mode: Mode

    class Config:
        """Pydantic config."""
        frozen = True


# ============================================================================
# OUTBOUND
# ============================================================================

class EnhancementResponse(BaseModel):
    """Successful enhancement, serialized with camelCase keys."""

    enhanced_prompt: str = Field(..., alias="enhancedPrompt")
    mode: str
    model_id: str = Field(..., alias="modelId")
    original_length: int = Field(..., alias="originalLength")
    enhanced_length: int = Field(..., alias="enhancedLength")
    usage: Optional[Dict[str, int]] = None
    timestamp: str = Field(..., description="ISO-8601 UTC, captured at response time")

    class Config:
        populate_by_name = True
        frozen = True

    def to_body(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ErrorBody(BaseModel):
    """Flat error body. Never contains a stack trace."""

    error: str
    code: Optional[str] = None
    details: str
