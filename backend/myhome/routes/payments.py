"""Payment scheduling and listing endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from .. import services
from ..auth import get_current_user_id
from ..database import get_session
from ..errors import EntityNotFoundError
from ..repositories import PageInfo, PageRequest
from ..schemas import (
    ListAdminPaymentsResponse,
    ListMemberPaymentsResponse,
    PageInfoOut,
    PaymentOut,
    SchedulePaymentRequest,
)
from . import get_page_request

router = APIRouter(tags=["payments"], dependencies=[Depends(get_current_user_id)])
logger = logging.getLogger("myhome.api.payments")


def _payment_out(payment) -> PaymentOut:
    return PaymentOut(
        payment_id=payment.payment_id,
        charge=payment.charge,
        type=payment.type,
        description=payment.description,
        recurring=payment.recurring,
        due_date=payment.due_date,
        admin_id=payment.admin_id,
        member_id=payment.member_id,
    )


@router.post('/payments', status_code=201, response_model=PaymentOut)
def schedule_payment(payload: SchedulePaymentRequest, db: Session = Depends(get_session)):
    """Schedule a payment for a member on behalf of one of their community's admins."""
    logger.debug("Received schedule payment request")
    svc = services.PaymentService(db)
    member = svc.get_house_member(payload.member_id)
    if not member:
        raise EntityNotFoundError(f"House member with given id not exists: {payload.member_id}")
    admin = services.CommunityService(db).find_community_admin(payload.admin_id)
    if not admin:
        raise EntityNotFoundError(f"Admin with given id not exists: {payload.admin_id}")
    if not svc.is_user_admin_of_member_house(member, admin):
        raise HTTPException(status_code=404, detail='admin does not manage the member house')
    payment = svc.schedule_payment(
        admin,
        member,
        charge=payload.charge,
        type=payload.type,
        description=payload.description,
        recurring=payload.recurring,
        due_date=payload.due_date,
    )
    return _payment_out(payment)


@router.get('/payments/{payment_id}', response_model=PaymentOut)
def list_payment_details(payment_id: str, db: Session = Depends(get_session)):
    payment = services.PaymentService(db).get_payment_details(payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail='payment not found')
    return _payment_out(payment)


@router.get('/members/{member_id}/payments', response_model=ListMemberPaymentsResponse)
def list_all_member_payments(member_id: str, db: Session = Depends(get_session)):
    svc = services.PaymentService(db)
    if not svc.get_house_member(member_id):
        raise HTTPException(status_code=404, detail='member not found')
    return ListMemberPaymentsResponse(payments=[_payment_out(p) for p in svc.get_payments_by_member(member_id)])


@router.get('/communities/{community_id}/admins/{admin_id}/payments', response_model=ListAdminPaymentsResponse)
def list_all_admin_scheduled_payments(
    community_id: str,
    admin_id: str,
    pageable: PageRequest = Depends(get_page_request),
    db: Session = Depends(get_session),
):
    """Page through the payments an admin scheduled; the admin must belong to the community."""
    community = services.CommunityService(db).get_community_details(community_id)
    if not community:
        raise EntityNotFoundError(f"Community with given id not exists: {community_id}")
    if not any(admin.user_id == admin_id for admin in community.admins):
        raise HTTPException(status_code=404, detail='admin not found in community')
    payments, total = services.PaymentService(db).get_payments_by_admin(admin_id, pageable)
    page_info = PageInfo.of(pageable, total)
    return ListAdminPaymentsResponse(
        payments=[_payment_out(p) for p in payments],
        page_info=PageInfoOut(
            current_page=page_info.current_page,
            page_limit=page_info.page_limit,
            total_pages=page_info.total_pages,
            total_elements=page_info.total_elements,
        ),
    )
