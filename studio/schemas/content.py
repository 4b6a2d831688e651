from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime


class GenerationRequest(BaseModel):
    """Brief sent to the generate-content function. Field names follow the function's JSON contract."""
    businessName: str
    productService: str
    targetAudience: str
    contentType: str = "post"
    platform: str = "facebook"
    tone: str = "professional"
    brandGender: Literal["male", "female", "neutral"] = "neutral"
    additionalInfo: str = ""


class GeneratedVariant(BaseModel):
    id: str
    content: str
    quality_score: int = Field(ge=0, le=100)
    engagement_prediction: int = Field(ge=0, le=100)
    keywords: List[str] = Field(default_factory=list, max_length=5)


class GenerationFunctionResponse(BaseModel):
    content: List[GeneratedVariant] = Field(min_length=1)


class GenerateResponse(BaseModel):
    content: List[GeneratedVariant]
    tokens: int  # Balance after the debit


class SaveContentRequest(BaseModel):
    content: str = Field(min_length=1)
    content_type: str
    platform: str
    title: Optional[str] = None
    business_name: Optional[str] = None  # Used for the default title


class SavedContentResponse(BaseModel):
    id: str
    user_id: str
    title: str
    content: str
    content_type: str
    platform: str
    created_at: datetime

    class Config:
        from_attributes = True
