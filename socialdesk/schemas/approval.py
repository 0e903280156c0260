from pydantic import BaseModel
from typing import Optional


class TextDecision(BaseModel):
    post_id: int
    status: str  # approved, rejected, pending
    rejection_reason: Optional[str] = None


class ImageDecision(BaseModel):
    post_id: int
    image_status: str  # approved, rejected
    image_rejection_reason: Optional[str] = None
