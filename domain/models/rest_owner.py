"""
RestOwner value object: who the rest timer is counting for.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class RestOwner(BaseModel):
    """
    The single exercise or group whose last set is the most recent.

    Elapsed rest is always derived as ``now - started_at``; nothing here
    ticks.
    """

    owner_id: str = Field(..., description="Exercise id or group id")
    kind: Literal["exercise", "group"] = Field(..., description="What owner_id names")
    started_at: datetime = Field(..., description="Timestamp of the owner's last set")

    model_config = {"frozen": True}
