from pydantic import BaseModel, Field
from typing import Optional


class PostCreate(BaseModel):
    brand_id: int
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    image_filename: Optional[str] = None
    # Posts written by hand in the dashboard start with the text approved
    approve_text: bool = True


class PostUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=300)
    content: Optional[str] = Field(default=None, min_length=1)
    image_filename: Optional[str] = None
