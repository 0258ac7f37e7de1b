from sqlalchemy import JSON, Column, DateTime, String
from sqlalchemy.sql import func

from shared.config.database import Base


class CartRecord(Base):
    __tablename__ = "carts"

    user_id = Column(String, primary_key=True, index=True)
    items = Column(JSON, nullable=False, default=list)  # [{"productId": int, "qty": int}, ...]
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
