# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Pydantic request/response schemas — one canonical shape per entity."""
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

LOAN_PENDING = "Pending"
LOAN_TREASURER_APPROVED = "TreasurerApproved"
LOAN_SECRETARY_APPROVED = "SecretaryApproved"
LOAN_CHAIR_APPROVED = "ChairApproved"
LOAN_REJECTED = "Rejected"

LOAN_STATUSES = (
    LOAN_PENDING, LOAN_TREASURER_APPROVED, LOAN_SECRETARY_APPROVED,
    LOAN_CHAIR_APPROVED, LOAN_REJECTED,
)

QUEUE_TYPES = ("Minutes", "Loan", "Report")
QUEUE_PENDING = "Pending"
QUEUE_APPROVED = "Approved"

QueueType = Literal["Minutes", "Loan", "Report"]


class Principal(BaseModel):
    """The authenticated caller, as carried in the session token."""
    name: str
    email: str
    role: str


# ── Auth & members ──────────────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1, max_length=255)
    pin: str = Field(..., min_length=1, max_length=16)

    @field_validator("email")
    @classmethod
    def normalise_email(cls, v: str) -> str:
        return v.strip().lower()


class MemberCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    pin: str = Field(..., min_length=1, max_length=16)


class MemberUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    new_pin: Optional[str] = Field(None, min_length=1, max_length=16)


class PromoteRequest(BaseModel):
    role: str = Field(..., min_length=1, max_length=64)

    @field_validator("role")
    @classmethod
    def normalise_role(cls, v: str) -> str:
        return v.strip().lower()


class MemberOut(BaseModel):
    id: str
    name: str
    email: str
    role: str
    must_change_pin: bool = False
    created_at: Optional[str] = None


class AuthResponse(BaseModel):
    user: Principal
    token: str
    must_change_pin: bool = False


# ── Loans ───────────────────────────────────────────────────────────────────

class LoanCreate(BaseModel):
    amount: float = Field(..., gt=0)
    purpose: str = Field(..., min_length=1, max_length=1000)
    member: str = Field(..., min_length=1, max_length=255)

    @field_validator("member")
    @classmethod
    def normalise_member(cls, v: str) -> str:
        return v.strip().lower()


class LoanUpdate(BaseModel):
    status: str
    notes: Optional[str] = Field(None, max_length=5000)

    @field_validator("status")
    @classmethod
    def check_status(cls, v: str) -> str:
        v = v.strip()
        if v not in LOAN_STATUSES:
            raise ValueError(f"status must be one of {LOAN_STATUSES}")
        return v


class LoanOut(BaseModel):
    id: str
    amount: float
    purpose: str
    member: str
    status: str
    date: str
    notes: Optional[str] = None
    history: List[Dict[str, Any]] = []
    updated_at: Optional[str] = None


# ── Chair queue ─────────────────────────────────────────────────────────────

class QueueSubmit(BaseModel):
    type: QueueType
    data: Dict[str, Any] = Field(default_factory=dict)
    author: Optional[str] = Field(None, max_length=255)


class QueueApprove(BaseModel):
    signature: Optional[str] = None


class QueueItemOut(BaseModel):
    id: str
    type: str
    data: Dict[str, Any] = {}
    author: str
    status: str
    created_at: Optional[str] = None
    approved_by: Optional[str] = None
    approved_at: Optional[str] = None
    signature: Optional[str] = None


# ── Polls ───────────────────────────────────────────────────────────────────

class PollCreate(BaseModel):
    question: str = Field(..., min_length=1, max_length=1000)
    options: List[str] = Field(..., min_length=2)

    @field_validator("options")
    @classmethod
    def strip_options(cls, v: List[str]) -> List[str]:
        options = [o.strip() for o in v]
        if any(not o for o in options):
            raise ValueError("options must not be blank")
        return options


class VoteRequest(BaseModel):
    option_index: int


class PollStatusUpdate(BaseModel):
    active: bool


class PollOut(BaseModel):
    id: str
    question: str
    options: List[str]
    votes: List[int]
    voters: List[str]
    active: bool
    created_by: Optional[str] = None
    created_at: Optional[str] = None


# ── Publications ────────────────────────────────────────────────────────────

class NewsCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=10000)


class NewsOut(BaseModel):
    id: str
    text: str
    signed_by: Optional[str] = None
    approved_at: Optional[str] = None
    created_at: Optional[str] = None


class ReportCreate(BaseModel):
    text: Optional[str] = Field(None, max_length=10000)
    file: Optional[str] = Field(None, max_length=2000)


class ReportOut(BaseModel):
    id: str
    text: Optional[str] = None
    file: Optional[str] = None
    signed_by: Optional[str] = None
    approved_at: Optional[str] = None


class SignatureUpdate(BaseModel):
    signature: str = Field(..., min_length=1)


# ── Ledger ──────────────────────────────────────────────────────────────────

class TransactionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=500)
    amount: float
    type: str = Field(..., min_length=1, max_length=64)
    member: str = Field(..., min_length=1, max_length=255)
    date: Optional[str] = None

    @field_validator("member")
    @classmethod
    def normalise_member(cls, v: str) -> str:
        return v.strip().lower()


class TransactionOut(BaseModel):
    id: str
    title: str
    amount: float
    type: str
    member: str
    date: str
    recorded_by: Optional[str] = None


class WelfareCreate(BaseModel):
    type: str = Field(..., min_length=1, max_length=255)
    amount: float = Field(..., gt=0)
    member: str = Field(..., min_length=1, max_length=255)

    @field_validator("member")
    @classmethod
    def normalise_member(cls, v: str) -> str:
        return v.strip().lower()


class WelfareOut(BaseModel):
    id: str
    type: str
    amount: float
    member: str
    status: str
    date: str


# ── Notifications & logs ────────────────────────────────────────────────────

class NotificationCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=5000)
    member: str = Field(..., min_length=1, max_length=255)

    @field_validator("member")
    @classmethod
    def normalise_member(cls, v: str) -> str:
        return v.strip().lower()


class NotificationOut(BaseModel):
    id: str
    message: str
    member: str
    read: bool = False
    created_at: Optional[str] = None


class LogCreate(BaseModel):
    action: str = Field(..., min_length=1, max_length=255)
    details: Optional[str] = Field(None, max_length=5000)


class LogOut(BaseModel):
    id: str
    action: str
    by: str
    details: Optional[Any] = None
    timestamp: str


class ErrorResponse(BaseModel):
    error: str
