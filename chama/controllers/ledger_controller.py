# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: welfare claims and member transactions."""
from typing import List, Optional

from fastapi import APIRouter, Depends

from chama.core.dependencies import current_principal, get_ledger_service, require
from chama.core.policy import POLICY
from chama.schemas import (
    Principal, TransactionCreate, TransactionOut, WelfareCreate, WelfareOut,
)
from chama.services.ledger_service import LedgerService

router = APIRouter(tags=["Ledger"])


@router.get("/welfare", response_model=List[WelfareOut])
def list_welfare(member: Optional[str] = None,
                 principal: Principal = Depends(current_principal),
                 ledger: LedgerService = Depends(get_ledger_service)):
    return ledger.list_welfare(POLICY.scope(principal, "records:read_all", member))


@router.post("/welfare", status_code=201, response_model=WelfareOut)
def submit_welfare(body: WelfareCreate, ledger: LedgerService = Depends(get_ledger_service)):
    return ledger.submit_welfare(body.type, body.amount, body.member)


@router.get("/transactions", response_model=List[TransactionOut])
def list_transactions(member: Optional[str] = None,
                      principal: Principal = Depends(current_principal),
                      ledger: LedgerService = Depends(get_ledger_service)):
    return ledger.list_transactions(POLICY.scope(principal, "records:read_all", member))


@router.post("/transactions", status_code=201, response_model=TransactionOut)
def record_transaction(body: TransactionCreate,
                       principal: Principal = Depends(require("transactions:record")),
                       ledger: LedgerService = Depends(get_ledger_service)):
    return ledger.record_transaction(
        body.title, body.amount, body.type, body.member,
        recorded_by=principal.email, on=body.date,
    )
