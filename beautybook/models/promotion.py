# beautybook/models/promotion.py
from sqlalchemy import Column, String, Integer, Boolean, Date, Numeric, ForeignKey, Uuid, Enum as SQLEnum
from beautybook.models.base import Base
import uuid
import enum


class PromotionType(str, enum.Enum):
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class Promotion(Base):
    """Discount rule a customer can apply when booking"""
    __tablename__ = "promotions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(Uuid(as_uuid=True), ForeignKey("businesses.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    code = Column(String(50), nullable=True)
    type = Column(SQLEnum(PromotionType, name="promotion_type"), nullable=False)
    value = Column(Numeric(10, 2), nullable=False)  # percent (0-100) or currency amount
    minimum_amount = Column(Numeric(10, 2), nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, nullable=False, default=0)

    is_active = Column(Boolean, default=True)
