from sqlalchemy import Column, Integer, String, Text, Numeric, DateTime, Boolean
from datetime import datetime
from backoffice.core.database import Base


class Banner(Base):
    __tablename__ = "banners"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=False)

    # Text overlay rendering
    text_overlay = Column(Text, nullable=True)
    text_position = Column(String, default="center")
    text_color = Column(String, default="#ffffff")
    text_size = Column(String, default="large")
    background_overlay = Column(Boolean, default=False)
    overlay_opacity = Column(Numeric(3, 2), default=0.5)

    link_url = Column(String, nullable=True)
    link_text = Column(String, nullable=True)

    is_active = Column(Boolean, default=True, index=True)
    display_order = Column(Integer, default=0)
    # Optional scheduling window; open-ended when null
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
