from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import List, Literal, Optional

from backoffice.schemas.product import Pagination

TextPosition = Literal["left", "center", "right"]
TextSize = Literal["small", "medium", "large"]


class BannerBase(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: str = Field(min_length=1)
    text_overlay: Optional[str] = None
    text_position: TextPosition = "center"
    text_color: str = "#ffffff"
    text_size: TextSize = "large"
    background_overlay: bool = False
    overlay_opacity: float = Field(default=0.5, ge=0, le=1)
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    is_active: bool = True
    display_order: int = 0
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class BannerCreate(BannerBase):
    @model_validator(mode="after")
    def check_schedule(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class BannerUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, min_length=1)
    text_overlay: Optional[str] = None
    text_position: Optional[TextPosition] = None
    text_color: Optional[str] = None
    text_size: Optional[TextSize] = None
    background_overlay: Optional[bool] = None
    overlay_opacity: Optional[float] = Field(default=None, ge=0, le=1)
    link_url: Optional[str] = None
    link_text: Optional[str] = None
    is_active: Optional[bool] = None
    display_order: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class Banner(BannerBase):
    id: int
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BannerListResponse(BaseModel):
    banners: List[Banner]
    pagination: Pagination


class ActiveBannerListResponse(BaseModel):
    banners: List[Banner]


class BannerDetailResponse(BaseModel):
    banner: Banner


class BannerMutationResponse(BaseModel):
    message: str
    banner: Banner


class BannerOrder(BaseModel):
    id: int
    display_order: int


class BannerReorderRequest(BaseModel):
    banners: List[BannerOrder]
