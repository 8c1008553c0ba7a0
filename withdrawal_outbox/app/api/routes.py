from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse

from ..core.dependencies import get_ledger, get_withdrawal_coordinator
from ..core.errors import WithdrawalSucceeded
from ..models import (
    AccountCreate,
    AccountModel,
    AccountResponse,
    ErrorResponse,
    WithdrawalRequest,
    WithdrawalResponse,
)
from ..services import AccountLedger, WithdrawalCoordinator
from .exceptions import failure_response


router = APIRouter(prefix="/accounts", tags=["accounts"])

def _account_to_response(account: AccountModel) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        balance=account.balance,
        created_at=account.created_at,
    )

@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
def open_account(
    payload: AccountCreate,
    ledger: AccountLedger = Depends(get_ledger),
) -> AccountResponse:
    account = ledger.open_account(payload.balance)
    ledger.session.commit()
    ledger.session.refresh(account)
    return _account_to_response(account)

@router.get("/{account_id}", response_model=AccountResponse)
def get_account(
    account_id: int,
    ledger: AccountLedger = Depends(get_ledger),
) -> AccountResponse:
    account = ledger.get_account(account_id)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Account {account_id} not found",
        )
    return _account_to_response(account)

bank_router = APIRouter(prefix="/bank", tags=["bank"])

@bank_router.post(
    "/withdraw",
    response_model=WithdrawalResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def withdraw(
    payload: WithdrawalRequest,
    coordinator: WithdrawalCoordinator = Depends(get_withdrawal_coordinator),
) -> WithdrawalResponse | JSONResponse:
    outcome = coordinator.withdraw(payload.account_id, payload.amount)
    if isinstance(outcome, WithdrawalSucceeded):
        return WithdrawalResponse(request_id=outcome.request_id, balance=outcome.balance)
    return failure_response(outcome)

__all__ = ["router", "bank_router"]
