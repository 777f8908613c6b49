"""
Pydantic schemas for the /bookings endpoints.

These are NOT database models; they define the HTTP API contract:
- BookingCreate: what a customer sends to book an interpreter
- BookingUpdate: an admin update (every field optional)
- BookingResponse / BookingListResponse: what we send back
- BookingHistoryResponse: a user's current and past bookings
- AssignmentResponse: one row of a booking's translator history
- AcceptRequest / FlowResponse: accept/cancel/end endpoints

Incoming datetimes may carry a timezone; they are normalized to naive UTC
here so the booking layer only ever sees one kind of datetime.
"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from models.enums import Certification, Gender, JobStatus, JobType
from booking.base import FlowResult, StatusChangeRequest
from booking.timing import as_naive_utc


class BookingCreate(BaseModel):
    """Request body for POST /bookings/."""

    due: datetime
    from_language_id: int = Field(..., ge=1)
    to_language_id: Optional[int] = Field(default=None, ge=1)
    duration: int = Field(default=60, ge=1, le=24 * 60, description="Minutes")
    job_type: JobType = JobType.PAID
    immediate: bool = False
    certified: Optional[Certification] = None
    gender: Optional[Gender] = None
    customer_phone_type: bool = False
    customer_physical_type: bool = False
    town: Optional[str] = Field(default=None, max_length=100)
    user_email: Optional[str] = Field(default=None, max_length=255)
    reference: Optional[str] = Field(default=None, max_length=255)

    @field_validator("due")
    @classmethod
    def _naive_utc(cls, value: datetime) -> datetime:
        return as_naive_utc(value)

    def to_fields(self) -> dict:
        fields = self.model_dump()
        for name in ("job_type", "certified", "gender"):
            if fields[name] is not None:
                fields[name] = fields[name].value
        return fields


class BookingUpdate(BaseModel):
    """Request body for PUT /bookings/{id}. Omitted fields are left alone."""

    status: Optional[JobStatus] = None
    admin_comments: Optional[str] = None
    session_time: Optional[str] = Field(default=None, examples=["1:30"])
    translator: Optional[int] = Field(default=None, ge=0, description="Translator user id, 0 for none")
    translator_email: Optional[str] = None
    due: Optional[datetime] = None
    from_language_id: Optional[int] = Field(default=None, ge=1)
    reference: Optional[str] = None

    @field_validator("due")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_naive_utc(value) if value is not None else None

    def to_request(self) -> StatusChangeRequest:
        return StatusChangeRequest(
            status=self.status,
            admin_comments=self.admin_comments,
            session_time=self.session_time,
            translator_id=self.translator,
            translator_email=self.translator_email,
            due=self.due,
            from_language_id=self.from_language_id,
            reference=self.reference,
        )


class BookingResponse(BaseModel):
    id: int
    user_id: int
    status: str
    job_type: str
    due: Optional[datetime] = None
    from_language_id: int
    to_language_id: Optional[int] = None
    duration: int
    immediate: bool
    certified: Optional[str] = None
    gender: Optional[str] = None
    customer_phone_type: bool
    customer_physical_type: bool
    town: Optional[str] = None
    session_time: Optional[str] = None
    end_at: Optional[datetime] = None
    withdraw_at: Optional[datetime] = None
    admin_comments: Optional[str] = None
    reference: Optional[str] = None
    created_at: Optional[datetime] = None
    will_expire_at: Optional[datetime] = None

    # from_attributes=True tells Pydantic to read from SQLAlchemy model attributes
    model_config = {"from_attributes": True}


class BookingListResponse(BaseModel):
    bookings: list[BookingResponse]
    total: int
    page: int
    page_size: int


class BookingHistoryResponse(BaseModel):
    current: list[BookingResponse]
    past: list[BookingResponse]
    total_past: int
    page: int
    page_size: int


class UpdateResponse(BaseModel):
    updated: bool
    changes: list[dict[str, Any]]


class AssignmentResponse(BaseModel):
    id: int
    user_id: int
    job_id: int
    created_at: Optional[datetime] = None
    cancel_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    completed_by: Optional[int] = None

    model_config = {"from_attributes": True}


class AcceptRequest(BaseModel):
    job_id: int = Field(..., ge=1)


class FlowResponse(BaseModel):
    status: str
    message: Optional[str] = None
    job: Optional[BookingResponse] = None
    jobs: Optional[list[BookingResponse]] = None
    jobstatus: Optional[str] = None
    job_id: Optional[int] = None

    @classmethod
    def from_result(cls, result: FlowResult) -> "FlowResponse":
        data = result.data
        return cls(
            status=result.status,
            message=result.message,
            job=BookingResponse.model_validate(data["job"]) if "job" in data else None,
            jobs=[BookingResponse.model_validate(j) for j in data["jobs"]] if "jobs" in data else None,
            jobstatus=data.get("jobstatus"),
            job_id=data.get("job_id"),
        )
