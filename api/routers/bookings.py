"""
Booking endpoints.

POST /bookings/                              → Customer books an interpreter
GET  /bookings/                              → List bookings (admins see all, others their own)
GET  /bookings/potential                     → Bookings the calling translator may accept
GET  /bookings/history                       → Caller's current and past bookings
GET  /bookings/{id}                          → Single booking
GET  /bookings/{id}/assignments              → Translator assignment history
PUT  /bookings/{id}                          → Admin update (status, translator, due, language)
POST /bookings/accept                        → Translator accepts (web)
POST /bookings/{id}/accept                   → Translator accepts (app)
POST /bookings/{id}/cancel                   → Customer withdraws / translator hands back
POST /bookings/{id}/end                      → Session over
POST /bookings/{id}/customer-not-call        → Customer never showed up
POST /bookings/{id}/reopen                   → Admin puts the booking back on the market
POST /bookings/{id}/resend-notifications     → Re-push to eligible translators
POST /bookings/{id}/resend-sms               → Re-send SMS to eligible translators

The API layer is intentionally thin: validate input, pick the caller, call
the booking layer, shape the response. NotFound raised by the booking layer
is turned into a 404 by the handler registered in api/main.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import (
    get_current_user,
    get_db,
    get_gateway,
    require_admin,
    require_customer,
    require_translator,
)
from api.schemas.booking import (
    AcceptRequest,
    AssignmentResponse,
    BookingCreate,
    BookingHistoryResponse,
    BookingListResponse,
    BookingResponse,
    BookingUpdate,
    FlowResponse,
    UpdateResponse,
)
from models.enums import ADMIN_ROLES, JobStatus, JobType, UserRole
from models.user import User
from notifications.gateway import NotificationGateway
from booking.acceptance import AcceptanceHandler
from booking.cancellation import CancellationHandler
from booking.completion import CompletionHandler
from booking.history import booking_history
from booking.matching import potential_jobs
from booking.notifier import BookingNotifier
from booking.stores import AssignmentStore, JobStore
from booking.timing import utcnow
from booking.workflow import BookingWorkflow

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("/", response_model=BookingResponse, status_code=201)
def create_booking(
    booking_in: BookingCreate,
    customer: User = Depends(require_customer),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> BookingResponse:
    """
    Book an interpreter.

    The booking is stored as pending with an expiry time derived from how far
    away it is. Immediate bookings additionally alert the admin by mail.
    """
    job = BookingWorkflow(db, gateway).create_job(customer, **booking_in.to_fields())
    return BookingResponse.model_validate(job)


@router.get("/", response_model=BookingListResponse)
def list_bookings(
    status: Optional[JobStatus] = Query(None, description="Filter by booking status"),
    job_type: Optional[JobType] = Query(None, description="Filter by booking type"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(15, ge=1, le=100, description="Bookings per page"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BookingListResponse:
    """Admins see every booking; customers only their own."""
    owner = None if UserRole(user.role) in ADMIN_ROLES else user.id
    jobs, total = JobStore(db).list(
        status=status.value if status else None,
        job_type=job_type.value if job_type else None,
        user_id=owner,
        offset=(page - 1) * page_size,
        limit=page_size,
    )
    return BookingListResponse(
        bookings=[BookingResponse.model_validate(j) for j in jobs],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/potential", response_model=list[BookingResponse])
def list_potential_bookings(
    translator: User = Depends(require_translator),
    db: Session = Depends(get_db),
) -> list[BookingResponse]:
    """Pending future bookings the calling translator may accept, soonest first."""
    return [BookingResponse.model_validate(j) for j in potential_jobs(db, translator, utcnow())]


@router.get("/history", response_model=BookingHistoryResponse)
def get_booking_history(
    page: int = Query(1, ge=1, description="Page number of past bookings"),
    page_size: int = Query(15, ge=1, le=100, description="Past bookings per page"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BookingHistoryResponse:
    """
    The caller's own bookings.

    Current bookings come back in full, soonest first. Past ones are paged,
    most recent first. Translators see the bookings they were assigned to.
    """
    history = booking_history(db, user, offset=(page - 1) * page_size, limit=page_size)
    return BookingHistoryResponse(
        current=[BookingResponse.model_validate(j) for j in history.current],
        past=[BookingResponse.model_validate(j) for j in history.past],
        total_past=history.total_past,
        page=page,
        page_size=page_size,
    )


@router.get("/{job_id}", response_model=BookingResponse)
def get_booking(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> BookingResponse:
    return BookingResponse.model_validate(JobStore(db).find(job_id))


@router.get("/{job_id}/assignments", response_model=list[AssignmentResponse])
def get_assignment_history(
    job_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> list[AssignmentResponse]:
    JobStore(db).find(job_id)
    return [AssignmentResponse.model_validate(a) for a in AssignmentStore(db).history(job_id)]


@router.put("/{job_id}", response_model=UpdateResponse)
def update_booking(
    job_id: int,
    update_in: BookingUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> UpdateResponse:
    """
    Admin update of a booking.

    Translator, due time, language and status can change in one request.
    The response lists every change that was applied; an illegal or
    incomplete status change is simply absent from that list.
    """
    outcome = BookingWorkflow(db, gateway).update_job(job_id, update_in.to_request(), admin)
    return UpdateResponse(updated=outcome.updated, changes=outcome.changes)


@router.post("/accept", response_model=FlowResponse)
def accept_booking(
    accept_in: AcceptRequest,
    translator: User = Depends(require_translator),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> FlowResponse:
    result = AcceptanceHandler(db, gateway).accept_job(accept_in.job_id, translator)
    return FlowResponse.from_result(result)


@router.post("/{job_id}/accept", response_model=FlowResponse)
def accept_booking_with_id(
    job_id: int,
    translator: User = Depends(require_translator),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> FlowResponse:
    result = AcceptanceHandler(db, gateway).accept_job_with_id(job_id, translator)
    return FlowResponse.from_result(result)


@router.post("/{job_id}/cancel", response_model=FlowResponse)
def cancel_booking(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> FlowResponse:
    result = CancellationHandler(db, gateway).cancel_job(job_id, user)
    return FlowResponse.from_result(result)


@router.post("/{job_id}/end", response_model=FlowResponse)
def end_booking(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> FlowResponse:
    result = CompletionHandler(db, gateway).end_job(job_id, user.id)
    return FlowResponse.from_result(result)


@router.post("/{job_id}/customer-not-call", response_model=FlowResponse)
def customer_not_call(
    job_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> FlowResponse:
    result = CompletionHandler(db, gateway).customer_not_call(job_id)
    return FlowResponse.from_result(result)


@router.post("/{job_id}/reopen", response_model=FlowResponse)
def reopen_booking(
    job_id: int,
    user_id: int = Query(..., ge=1, description="Translator taken off the booking"),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> FlowResponse:
    result = CancellationHandler(db, gateway).reopen(job_id, user_id)
    return FlowResponse.from_result(result)


@router.post("/{job_id}/resend-notifications")
def resend_notifications(
    job_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> dict:
    job = JobStore(db).find(job_id)
    sent = BookingNotifier(gateway, db).broadcast(job)
    return {"success": "Push sent", "recipients": sent}


@router.post("/{job_id}/resend-sms")
def resend_sms(
    job_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    gateway: NotificationGateway = Depends(get_gateway),
) -> dict:
    job = JobStore(db).find(job_id)
    sent = BookingNotifier(gateway, db).sms_to_translators(job)
    return {"success": "SMS sent", "recipients": sent}
