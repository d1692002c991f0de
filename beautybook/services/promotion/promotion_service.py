# beautybook/services/promotion/promotion_service.py
"""Discounts applied to a booking's price snapshot"""
from decimal import Decimal, ROUND_HALF_UP
from datetime import date
from typing import Optional, Tuple
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from beautybook.core.exceptions import InvalidPromotion
from beautybook.models.promotion import Promotion, PromotionType

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


class PromotionService:

    @staticmethod
    def calculate_discount(promotion: Promotion, subtotal: Decimal) -> Decimal:
        """Discount amount for a subtotal, never more than the subtotal itself"""
        value = Decimal(promotion.value)
        if promotion.type == PromotionType.PERCENTAGE:
            discount = (subtotal * value / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
        else:
            discount = value.quantize(CENT, rounding=ROUND_HALF_UP)
        return min(max(discount, Decimal("0")), subtotal)

    @staticmethod
    def validate(promotion: Promotion, subtotal: Decimal, today: date) -> None:
        """Raise InvalidPromotion if the promotion cannot be used right now"""
        if not promotion.is_active:
            raise InvalidPromotion("Promotion is not active")
        if today < promotion.start_date:
            raise InvalidPromotion("Promotion has not started yet")
        if today > promotion.end_date:
            raise InvalidPromotion("Promotion has expired")
        if promotion.usage_limit is not None and promotion.usage_count >= promotion.usage_limit:
            raise InvalidPromotion("Promotion usage limit reached")
        if promotion.minimum_amount is not None and subtotal < Decimal(promotion.minimum_amount):
            raise InvalidPromotion(f"Minimum purchase amount of ${promotion.minimum_amount} required")

    @staticmethod
    def apply(
            db: Session,
            promotion_id: Optional[UUID],
            business_id: UUID,
            subtotal: Decimal,
            today: date
    ) -> Tuple[Optional[Promotion], Decimal]:
        """
        Resolve the promotion for a booking and return it with its discount.

        The caller commits; usage_count is incremented on the returned row.
        """
        if promotion_id is None:
            return None, Decimal("0.00")

        promotion = db.query(Promotion).filter(
            Promotion.id == promotion_id,
            Promotion.business_id == business_id
        ).first()
        if not promotion:
            raise InvalidPromotion("Invalid promo code")

        PromotionService.validate(promotion, subtotal, today)

        discount = PromotionService.calculate_discount(promotion, subtotal)
        promotion.usage_count = (promotion.usage_count or 0) + 1
        logger.info(f"Applied promotion {promotion.id} ({promotion.type.value}): -{discount}")
        return promotion, discount
