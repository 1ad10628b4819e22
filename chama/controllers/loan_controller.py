# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: loan requests and the approval workflow."""
from typing import List, Optional

from fastapi import APIRouter, Depends

from chama.core.dependencies import current_principal, get_loan_workflow, require
from chama.core.policy import POLICY
from chama.schemas import LoanCreate, LoanOut, LoanUpdate, Principal
from chama.services.loan_service import LoanWorkflow

router = APIRouter(tags=["Loans"])


@router.post("/loans", status_code=201, response_model=LoanOut)
def submit_loan(body: LoanCreate, loans: LoanWorkflow = Depends(get_loan_workflow)):
    return loans.submit(body.amount, body.purpose, body.member)


@router.get("/loans", response_model=List[LoanOut])
def list_loans(member: Optional[str] = None, status: Optional[str] = None,
               principal: Principal = Depends(current_principal),
               loans: LoanWorkflow = Depends(get_loan_workflow)):
    return loans.list(POLICY.scope(principal, "records:read_all", member), status)


@router.get("/loans/{loan_id}", response_model=LoanOut)
def get_loan(loan_id: str,
             principal: Principal = Depends(current_principal),
             loans: LoanWorkflow = Depends(get_loan_workflow)):
    loan = loans.get(loan_id)
    POLICY.check_self(principal, "records:read_all", loan.get("member", ""))
    return loan


@router.patch("/loans/{loan_id}", response_model=LoanOut)
def review_loan(loan_id: str, body: LoanUpdate,
                principal: Principal = Depends(require("loans:review")),
                loans: LoanWorkflow = Depends(get_loan_workflow)):
    """Advance or reject a loan; each stage belongs to one officer."""
    return loans.transition(loan_id, principal, body.status, body.notes)
