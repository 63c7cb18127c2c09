"""Loan quotes, applications, approval and repayments"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from vema_gateway.api.dependencies import get_request_id, get_store
from vema_gateway.api.v1.schemas import (
    LoanApplicationRequest,
    LoanListResponse,
    LoanPaymentRequest,
    LoanQuoteRequest,
    LoanQuoteResponse,
    LoanRejectionRequest,
    LoanResponse,
)
from vema_gateway.domain import loans
from vema_gateway.domain.exceptions import InvalidApplicationError
from vema_gateway.domain.models import LoanAccount, LoanStatus
from vema_gateway.domain.validation import validate_loan_application
from vema_gateway.infrastructure.database.repositories import LoanRepository
from vema_gateway.infrastructure.database.store import DocumentStore
from vema_gateway.infrastructure.observability.logging import log_operation
from vema_gateway.infrastructure.observability.metrics import (
    loan_application_counter,
    loan_paid_off_counter,
    loan_payment_counter,
)

router = APIRouter()


def to_loan_response(loan: LoanAccount) -> LoanResponse:
    return LoanResponse(
        loan_id=loan.id,
        user_id=loan.user_id,
        status=loan.status.value,
        purpose=loan.purpose,
        principal=loan.principal,
        term_months=loan.term_months,
        interest_rate=loan.interest_rate,
        interest=loan.interest,
        service_fee=loan.service_fee,
        initiation_fee=loan.initiation_fee,
        total_repayment=loan.total_repayment,
        monthly_repayment=loan.monthly_repayment,
        amount_paid=loan.amount_paid,
        remaining_balance=loan.remaining_balance,
        application_date=loan.application_date,
        approval_date=loan.approval_date,
        disbursement_date=loan.disbursement_date,
        rejection_reason=loan.rejection_reason,
    )


def _get_loan_or_404(repo: LoanRepository, loan_id: str) -> LoanAccount:
    loan = repo.get_loan_by_id(loan_id)
    if loan is None:
        raise HTTPException(status_code=404, detail="Loan not found")
    return loan


@router.post("/loans/quote", response_model=LoanQuoteResponse)
def quote_loan(request_body: LoanQuoteRequest):
    """
    Preview fees and repayments for an amount and term.

    The same application policy as POST /loans applies.
    """
    validate_loan_application(request_body.amount, request_body.term)
    loan_quote = loans.quote(request_body.amount, request_body.term)

    return LoanQuoteResponse(
        principal=loan_quote.principal,
        term_months=loan_quote.term_months,
        interest_rate=loan_quote.interest_rate,
        interest=loan_quote.interest,
        service_fee=loan_quote.service_fee,
        initiation_fee=loan_quote.initiation_fee,
        total_repayment=loan_quote.total_repayment,
        monthly_repayment=loan_quote.monthly_repayment,
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def apply_for_loan(
    request_body: LoanApplicationRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """
    Submit a loan application.

    Flow:
    1. Check amount/term against the offered products
    2. Quote fees and repayments
    3. Persist as a pending application
    """
    request_id = get_request_id(request)

    try:
        validate_loan_application(request_body.amount, request_body.term)
    except InvalidApplicationError:
        loan_application_counter.labels(outcome="invalid").inc()
        raise

    loan = loans.open_loan(
        user_id=request_body.user_id,
        principal=request_body.amount,
        term_months=request_body.term,
        purpose=request_body.purpose,
    )
    loan = LoanRepository(store).create_loan(loan)
    store.db.commit()

    loan_application_counter.labels(outcome="submitted").inc()
    log_operation(
        request_id,
        loan.user_id,
        "loan_application",
        loan_id=loan.id,
        principal=loan.principal,
        term_months=loan.term_months,
    )
    return to_loan_response(loan)


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    user_id: str = Query(..., description="Member identifier"),
    store: DocumentStore = Depends(get_store),
):
    """Member's loans, most recent application first"""
    user_loans = LoanRepository(store).get_loans_for_user(user_id)
    return LoanListResponse(user_id=user_id, loans=[to_loan_response(l) for l in user_loans])


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: str, store: DocumentStore = Depends(get_store)):
    return to_loan_response(_get_loan_or_404(LoanRepository(store), loan_id))


@router.post("/loans/{loan_id}/approve", response_model=LoanResponse)
def approve_loan(loan_id: str, request: Request, store: DocumentStore = Depends(get_store)):
    repo = LoanRepository(store)
    loan = loans.approve(_get_loan_or_404(repo, loan_id))
    repo.save(loan)
    store.db.commit()

    log_operation(get_request_id(request), loan.user_id, "loan_approved", loan_id=loan.id)
    return to_loan_response(loan)


@router.post("/loans/{loan_id}/reject", response_model=LoanResponse)
def reject_loan(
    loan_id: str,
    request_body: LoanRejectionRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    repo = LoanRepository(store)
    loan = loans.reject(_get_loan_or_404(repo, loan_id), request_body.reason)
    repo.save(loan)
    store.db.commit()

    log_operation(get_request_id(request), loan.user_id, "loan_rejected", loan_id=loan.id)
    return to_loan_response(loan)


@router.post("/loans/{loan_id}/payments", response_model=LoanResponse)
def make_payment(
    loan_id: str,
    request_body: LoanPaymentRequest,
    request: Request,
    store: DocumentStore = Depends(get_store),
):
    """Record a repayment; the loan is marked paid once the balance reaches zero"""
    repo = LoanRepository(store)
    loan = loans.apply_payment(_get_loan_or_404(repo, loan_id), request_body.amount)
    repo.save(loan)
    store.db.commit()

    loan_payment_counter.inc()
    if loan.status == LoanStatus.PAID:
        loan_paid_off_counter.inc()

    log_operation(
        get_request_id(request),
        loan.user_id,
        "loan_payment",
        loan_id=loan.id,
        amount=request_body.amount,
        remaining_balance=loan.remaining_balance,
    )
    return to_loan_response(loan)
