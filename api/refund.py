from fastapi import APIRouter, Body

from models.refund import RefundRequest, RefundResponse, RefundStatusRequest
from services import refund as refund_service

router = APIRouter()


@router.post("/create-razorpay-refund", response_model=RefundResponse, tags=["refunds"])
def create_razorpay_refund(refund: RefundRequest = Body(..., description="Refund to create. amount is in minor currency units")):
    """決済に対する返金を作成する"""
    return refund_service.create_refund(refund)


@router.post("/check-razorpay-refund-status", response_model=RefundResponse, tags=["refunds"])
def check_razorpay_refund_status(status_request: RefundStatusRequest = Body(...)):
    return refund_service.check_refund_status(status_request)
