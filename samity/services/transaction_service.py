"""
TRANSACTION SERVICE - MEMBER LEDGER
===================================

CRITICAL BUSINESS RULES:
1. Member balances (savings, shares, loan_balance) ONLY change here
2. A transaction and its balance change are committed together
3. Transactions are append-only: never edited, never deleted
4. loan_balance is clamped at zero on repayment overshoot
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from samity.extensions import db, ledger_lock
from samity.models import Member, Transaction, TransactionType
from samity.services import calculator
from samity.services.errors import SamityError, NotFoundError
from samity.services.settings_service import get_settings
from samity.services.validation import (
    positive_amount, optional_text, to_date, to_int, choice
)

logger = logging.getLogger(__name__)

DEFAULT_DESCRIPTIONS = {
    TransactionType.DEPOSIT.value: 'Savings deposit',
    TransactionType.WITHDRAWAL.value: 'Savings withdrawal',
    TransactionType.SHARE.value: 'Share purchase',
    TransactionType.LOAN_DISBURSEMENT.value: 'Loan disbursement',
    TransactionType.LOAN_REPAYMENT.value: 'Loan repayment',
    TransactionType.DIVIDEND.value: 'Dividend',
}


# ============================================================
# BALANCE RULES
# ============================================================

def apply_to_member(member, txn_type, amount, settings):
    """
    Mutate the member's financial snapshot for one ledger entry.

    Returns: dict of changed fields {field: (old, new)}
    """
    changes = {}

    if txn_type == TransactionType.DEPOSIT.value:
        changes['savings'] = (member.savings, member.savings + amount)
        member.savings += amount

    elif txn_type == TransactionType.WITHDRAWAL.value:
        changes['savings'] = (member.savings, member.savings - amount)
        member.savings -= amount
        if member.savings < 0:
            logger.warning("Member %s savings went negative: %s", member.id, member.savings)

    elif txn_type == TransactionType.SHARE.value:
        bought = calculator.shares_for_amount(amount, settings)
        changes['shares'] = (member.shares, member.shares + bought)
        member.shares += bought

    elif txn_type == TransactionType.LOAN_DISBURSEMENT.value:
        changes['loan_balance'] = (member.loan_balance, member.loan_balance + amount)
        member.loan_balance += amount

    elif txn_type == TransactionType.LOAN_REPAYMENT.value:
        new_balance = max(0.0, member.loan_balance - amount)
        changes['loan_balance'] = (member.loan_balance, new_balance)
        member.loan_balance = new_balance

    elif txn_type == TransactionType.DIVIDEND.value:
        # member.dividend is maintained manually by an admin
        logger.info("Dividend of %s recorded for member %s; balances unchanged",
                       amount, member.id)

    return changes


def post_transaction(member, txn_type, amount, txn_date=None, description=None):
    """
    Add a ledger entry and apply it to the member inside the current
    session. Does NOT commit; callers own the database transaction.
    """
    settings = get_settings()

    transaction = Transaction(
        member_id=member.id,
        type=txn_type,
        amount=amount,
        date=to_date(txn_date),
        description=description or DEFAULT_DESCRIPTIONS[txn_type]
    )
    db.session.add(transaction)

    changes = apply_to_member(member, txn_type, amount, settings)
    db.session.flush()

    logger.info("Transaction %s: %s %s for member %s %s",
                transaction.id, txn_type, amount, member.id, changes)
    return transaction


# ============================================================
# RECORD TRANSACTION (ATOMIC)
# ============================================================

def record_transaction(member_id, txn_type, amount, txn_date=None, description=None):
    """
    Validate, persist and apply one transaction.

    ATOMIC: the ledger entry and the member update are committed together.

    Returns: Transaction
    """
    member_id = to_int(member_id, 'memberId')
    amount = positive_amount(amount)
    txn_type = choice(txn_type, 'type', TransactionType.values())
    txn_date = to_date(txn_date)
    description = optional_text(description, 'description')

    with ledger_lock:
        try:
            member = db.session.get(Member, member_id)
            if not member:
                raise NotFoundError('Member', member_id)

            transaction = post_transaction(member, txn_type, amount, txn_date, description)
            db.session.commit()
            return transaction

        except SamityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.warning("Transaction rolled back for member %s: %s", member_id, e)
            raise SamityError(f"Transaction failed: {str(e)}")


# ============================================================
# QUERIES
# ============================================================

def list_transactions(member_id=None, txn_type=None):
    """Newest first; entries on the same date keep insertion order."""
    query = Transaction.query
    if member_id is not None:
        query = query.filter_by(member_id=member_id)
    if txn_type is not None:
        query = query.filter_by(type=choice(txn_type, 'type', TransactionType.values()))
    return query.order_by(Transaction.date.desc(), Transaction.id.asc()).all()


def get_transaction(transaction_id):
    transaction = db.session.get(Transaction, transaction_id)
    if not transaction:
        raise NotFoundError('Transaction', transaction_id)
    return transaction
