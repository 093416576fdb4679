"""
Common Pydantic models for the CloudStage API
"""
from pydantic import BaseModel, Field
from datetime import datetime


class HealthResponse(BaseModel):
    """
    Health check response model
    """
    status: str
    message: str
    timestamp: datetime
    version: str


class ErrorResponse(BaseModel):
    """
    Error response model; never carries stack traces or SQL
    """
    success: bool = False
    error: str
    message: str
    timestamp: datetime = Field(default_factory=datetime.utcnow)
