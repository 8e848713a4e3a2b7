"""
LOAN SERVICE
============

Handles:
- Loan applications (validated against society settings)
- Approval: fixes the monthly installment and disburses the amount
- Rejection

State machine: pending -> approved | pending -> rejected.
Approved and rejected are terminal.
"""

import logging
from datetime import date

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from samity.extensions import db, ledger_lock
from samity.models import Member, Loan, LoanStatus, TransactionType
from samity.services import calculator
from samity.services.errors import (
    SamityError, ValidationError, NotFoundError, InvalidStateError
)
from samity.services.settings_service import get_settings
from samity.services.transaction_service import post_transaction
from samity.services.validation import positive_amount, required_text, to_int, choice

logger = logging.getLogger(__name__)


def _get_loan(loan_id):
    loan = db.session.get(Loan, to_int(loan_id, 'loanId'))
    if not loan:
        raise NotFoundError('Loan', loan_id)
    return loan


def _require_pending(loan):
    if not loan.is_pending:
        raise InvalidStateError(
            f"Loan {loan.id} is already {loan.status}",
            {'loanId': loan.id, 'status': loan.status}
        )


# ============================================================
# APPLY FOR LOAN
# ============================================================

def apply_for_loan(member_id, amount, purpose, duration):
    """
    Create a loan application in 'pending' state.

    Rules:
    - amount > 0 and not above settings.maxLoanAmount
    - duration between MIN_LOAN_DURATION and MAX_LOAN_DURATION months
    """
    member_id = to_int(member_id, 'memberId')
    amount = positive_amount(amount)
    purpose = required_text(purpose, 'purpose')
    duration = to_int(duration, 'duration')

    min_duration = current_app.config['MIN_LOAN_DURATION']
    max_duration = current_app.config['MAX_LOAN_DURATION']
    if duration < min_duration or duration > max_duration:
        raise ValidationError(
            f"Duration must be between {min_duration} and {max_duration} months",
            {'field': 'duration', 'value': duration}
        )

    with ledger_lock:
        try:
            settings = get_settings()
            if amount > settings.max_loan_amount:
                raise ValidationError(
                    f"Maximum loan amount is {settings.max_loan_amount:,.0f}",
                    {'field': 'amount', 'value': amount, 'max': settings.max_loan_amount}
                )

            member = db.session.get(Member, member_id)
            if not member:
                raise NotFoundError('Member', member_id)

            loan = Loan(
                member_id=member.id,
                amount=amount,
                purpose=purpose,
                duration=duration,
                status=LoanStatus.PENDING.value,
                applied_date=date.today()
            )
            db.session.add(loan)
            db.session.commit()

        except SamityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            raise SamityError(f"Failed to create loan: {str(e)}")

    logger.info("Loan %s applied: member=%s amount=%s duration=%s",
                loan.id, member_id, amount, duration)
    return loan


# ============================================================
# APPROVE LOAN (ATOMIC)
# ============================================================

def approve_loan(loan_id):
    """
    Approve a pending loan.

    ATOMIC OPERATION:
    1. status -> approved, approved_date -> today
    2. monthly installment fixed at current loan interest rate
    3. loan_disbursement transaction recorded (raises loan_balance once)

    Returns: Loan
    """
    with ledger_lock:
        try:
            loan = _get_loan(loan_id)
            _require_pending(loan)

            settings = get_settings()

            loan.status = LoanStatus.APPROVED.value
            loan.approved_date = date.today()
            loan.monthly_installment = calculator.monthly_installment(
                loan.amount, loan.duration, settings.loan_interest_rate
            )

            # The disbursement entry is the only place loan_balance grows
            post_transaction(
                loan.member,
                TransactionType.LOAN_DISBURSEMENT.value,
                loan.amount,
                loan.approved_date,
                f"Loan Disbursement - {loan.purpose}"
            )

            db.session.commit()

        except SamityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            raise SamityError(f"Failed to approve loan: {str(e)}")

    logger.info("Loan %s approved: installment=%s", loan.id, loan.monthly_installment)
    return loan


# ============================================================
# REJECT LOAN
# ============================================================

def reject_loan(loan_id):
    """Reject a pending loan. No balance changes."""
    with ledger_lock:
        try:
            loan = _get_loan(loan_id)
            _require_pending(loan)
            loan.status = LoanStatus.REJECTED.value
            db.session.commit()

        except SamityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            raise SamityError(f"Failed to reject loan: {str(e)}")

    logger.info("Loan %s rejected", loan.id)
    return loan


def update_loan(loan_id, data):
    """
    Apply a status change from the HTTP layer.
    Only {'status': 'approved' | 'rejected'} is accepted.
    """
    if not isinstance(data, dict) or 'status' not in data:
        raise ValidationError("status is required", {'field': 'status'})

    extra = sorted(set(data) - {'status'})
    if extra:
        raise ValidationError(f"Loan fields cannot be changed: {', '.join(extra)}",
                              {'fields': extra})

    status = choice(data['status'], 'status',
                    [LoanStatus.APPROVED.value, LoanStatus.REJECTED.value])

    if status == LoanStatus.APPROVED.value:
        return approve_loan(loan_id)
    return reject_loan(loan_id)


# ============================================================
# QUERIES
# ============================================================

def get_loan(loan_id):
    return _get_loan(loan_id)


def list_loans(member_id=None, status=None):
    query = Loan.query
    if member_id is not None:
        query = query.filter_by(member_id=member_id)
    if status is not None:
        query = query.filter_by(status=choice(status, 'status', LoanStatus.values()))
    return query.order_by(Loan.id.asc()).all()


def estimate_installment(amount, duration):
    """Installment a member would pay for a prospective loan."""
    amount = positive_amount(amount)
    duration = to_int(duration, 'duration')
    return calculator.estimated_installment(amount, duration)
