"""API schemas shared across routers"""
from pydantic import BaseModel


class HealthResponse(BaseModel):
    """Health check response"""
    status: str = "ok"
    storage: str
