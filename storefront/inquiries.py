"""Contact inquiries and quote requests received from the public site."""

import logging
import uuid
from typing import List

from storefront.auth import utcnow
from storefront.schemas import ContactRequest, InquiryRecord, QuoteRecord, QuoteRequest

logger = logging.getLogger(__name__)


class InquiryLog:
    """
    In-process record of submissions, newest last.

    Nothing is sent anywhere; admins read the log through the API.
    """

    def __init__(self):
        self._inquiries: List[InquiryRecord] = []
        self._quotes: List[QuoteRecord] = []

    def record_inquiry(self, request: ContactRequest) -> InquiryRecord:
        inquiry = InquiryRecord(
            id=str(uuid.uuid4()),
            name=request.name,
            email=request.email,
            phone=request.phone or None,
            company=request.company or None,
            inquiry_type=request.inquiry_type or "general",
            message=request.message,
            status="new",
            created_at=utcnow(),
        )
        self._inquiries.append(inquiry)
        logger.info("New contact inquiry %s from %s (%s)", inquiry.id, inquiry.email, inquiry.inquiry_type)
        return inquiry

    def record_quote(self, request: QuoteRequest) -> QuoteRecord:
        quote = QuoteRecord(
            id=str(uuid.uuid4()),
            name=request.name,
            email=request.email,
            phone=request.phone or None,
            company=request.company or None,
            product_category=request.product_category,
            quantity=request.quantity,
            delivery_date=request.delivery_date or None,
            special_requirements=request.special_requirements or None,
            message=request.message or None,
            status="pending",
            created_at=utcnow(),
        )
        self._quotes.append(quote)
        logger.info(
            "New quote request %s from %s: %d x %s", quote.id, quote.email, quote.quantity, quote.product_category
        )
        return quote

    def inquiries(self) -> List[InquiryRecord]:
        return list(self._inquiries)

    def quotes(self) -> List[QuoteRecord]:
        return list(self._quotes)
