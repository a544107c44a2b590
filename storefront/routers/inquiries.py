from fastapi import APIRouter, Depends, status
import asyncio
from typing import List
from storefront.config import Settings
from storefront.dependencies import get_inquiry_log, get_settings_dep, require_admin
from storefront.inquiries import InquiryLog
from storefront.schemas import (
    ContactRequest,
    ContactResponse,
    InquiryRecord,
    QuoteRecord,
    QuoteRequest,
    QuoteResponse,
)

router = APIRouter(prefix="/api", tags=["inquiries"])

CONTACT_THANKS = "Thank you for your inquiry! We will get back to you within 24 hours."
QUOTE_THANKS = "Quote request submitted successfully! We will provide a detailed quote within 2 business days."


@router.post("/contact", response_model=ContactResponse, status_code=status.HTTP_201_CREATED)
async def submit_contact(
    payload: ContactRequest,
    log: InquiryLog = Depends(get_inquiry_log),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Accept a contact form submission.

    name, email and message are required; email must be well formed.
    """
    inquiry = log.record_inquiry(payload)
    await asyncio.sleep(settings.submission_delay_seconds)
    return ContactResponse(message=CONTACT_THANKS, inquiry_id=inquiry.id)


@router.get("/contact/inquiries", response_model=List[InquiryRecord], dependencies=[Depends(require_admin)])
async def list_inquiries(log: InquiryLog = Depends(get_inquiry_log)):
    return log.inquiries()


@router.post("/quote", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
async def submit_quote(
    payload: QuoteRequest,
    log: InquiryLog = Depends(get_inquiry_log),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Accept a bulk quote request.

    name, email, productCategory and a positive quantity are required.
    """
    quote = log.record_quote(payload)
    await asyncio.sleep(settings.submission_delay_seconds)
    return QuoteResponse(message=QUOTE_THANKS, quote_id=quote.id)


@router.get("/quote/requests", response_model=List[QuoteRecord], dependencies=[Depends(require_admin)])
async def list_quotes(log: InquiryLog = Depends(get_inquiry_log)):
    return log.quotes()
