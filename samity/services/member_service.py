"""
MEMBER SERVICE
==============

Handles:
- Registering members (with their login account)
- Profile updates and activation toggling
- Per-member and society-wide financial summaries

Balance fields are read-only here; see transaction_service.
"""

import logging
from dataclasses import dataclass, fields
from typing import Optional

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from samity.extensions import db, ledger_lock
from samity.models import Member, Loan, LoanStatus, MemberRole
from samity.services import calculator
from samity.services.auth_service import create_user, get_user_by_username
from samity.services.errors import (
    SamityError, ValidationError, NotFoundError, DuplicateError
)
from samity.services.settings_service import get_settings
from samity.services.validation import (
    to_int, to_number, to_bool, to_date, required_text, optional_text, choice
)

logger = logging.getLogger(__name__)

BALANCE_FIELDS = ('savings', 'shares', 'loanBalance')


@dataclass
class MemberUpdate:
    """Fields a PATCH may change. None means 'leave as is'."""
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    nid: Optional[str] = None
    photo: Optional[str] = None
    is_active: Optional[bool] = None
    dividend: Optional[float] = None

    # JSON key -> attribute
    KEYS = {
        'name': 'name',
        'phone': 'phone',
        'address': 'address',
        'nid': 'nid',
        'photo': 'photo',
        'isActive': 'is_active',
        'dividend': 'dividend',
    }

    @classmethod
    def from_dict(cls, data):
        if not isinstance(data, dict):
            raise ValidationError("Member payload must be an object")

        locked = sorted(k for k in data if k in BALANCE_FIELDS)
        if locked:
            raise ValidationError(
                f"Balance fields change only through transactions: {', '.join(locked)}",
                {'fields': locked}
            )
        unknown = sorted(k for k in data if k not in cls.KEYS)
        if unknown:
            raise ValidationError(f"Unknown member fields: {', '.join(unknown)}",
                                  {'fields': unknown})

        values = {}
        for key in ('name', 'address'):
            if key in data:
                values[key] = required_text(data[key], key)
        if 'phone' in data:
            values['phone'] = _valid_phone(data['phone'])
        for key in ('nid', 'photo'):
            if key in data:
                values[key] = optional_text(data[key], key)
        if 'isActive' in data:
            values['is_active'] = to_bool(data['isActive'], 'isActive')
        if 'dividend' in data:
            dividend = to_number(data['dividend'], 'dividend')
            if dividend < 0:
                raise ValidationError("dividend cannot be negative", {'field': 'dividend'})
            values['dividend'] = dividend
        return cls(**values)

    def changes(self):
        return {f.name: getattr(self, f.name) for f in fields(self)
                if getattr(self, f.name) is not None}


def _valid_phone(value):
    phone = required_text(value, 'phone')
    min_length = current_app.config['MIN_PHONE_LENGTH']
    if len(phone) < min_length:
        raise ValidationError(f"Phone number must have at least {min_length} digits",
                              {'field': 'phone'})
    return phone


def _value(data, key, default):
    value = data.get(key)
    return default if value is None else value


def _phone_taken(phone, exclude_id=None):
    query = Member.query.filter_by(phone=phone)
    if exclude_id is not None:
        query = query.filter(Member.id != exclude_id)
    return query.first() is not None


# ============================================================
# LOOKUPS
# ============================================================

def get_member(member_id):
    member = db.session.get(Member, to_int(member_id, 'memberId'))
    if not member:
        raise NotFoundError('Member', member_id)
    return member


def get_member_by_phone(phone):
    return Member.query.filter_by(phone=phone).first()


def list_members(active=None):
    query = Member.query
    if active is not None:
        query = query.filter_by(is_active=active)
    return query.order_by(Member.id.asc()).all()


# ============================================================
# CREATE MEMBER
# ============================================================

def create_member(data):
    """
    Register a member together with a login account.

    The login username defaults to the phone number.

    Returns: Member
    """
    if not isinstance(data, dict):
        raise ValidationError("Member payload must be an object")

    name = required_text(data.get('name'), 'name')
    phone = _valid_phone(data.get('phone'))
    address = required_text(data.get('address'), 'address')
    nid = optional_text(data.get('nid'), 'nid')
    photo = optional_text(data.get('photo'), 'photo', default=None)
    join_date = to_date(data.get('joinDate'), 'joinDate')

    shares = to_int(_value(data, 'shares', 1), 'shares')
    savings = to_number(_value(data, 'savings', 0), 'savings')
    loan_balance = to_number(_value(data, 'loanBalance', 0), 'loanBalance')
    dividend = to_number(_value(data, 'dividend', 0), 'dividend')
    if shares < 0 or loan_balance < 0 or dividend < 0:
        raise ValidationError("shares, loanBalance and dividend cannot be negative")

    is_active = to_bool(_value(data, 'isActive', True), 'isActive')
    role = choice(_value(data, 'role', MemberRole.USER.value), 'role',
                  [r.value for r in MemberRole])
    username = optional_text(data.get('username'), 'username') or phone
    password = data.get('password') or current_app.config['DEFAULT_MEMBER_PASSWORD']

    with ledger_lock:
        try:
            if _phone_taken(phone):
                raise DuplicateError(f"Phone {phone} is already registered",
                                     {'field': 'phone'})

            user = create_user(username, password, role)

            member = Member(
                user_id=user.id,
                name=name,
                phone=phone,
                address=address,
                nid=nid,
                photo=photo,
                join_date=join_date,
                shares=shares,
                savings=savings,
                loan_balance=loan_balance,
                dividend=dividend,
                is_active=is_active
            )
            db.session.add(member)
            db.session.commit()

        except SamityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            raise SamityError(f"Failed to create member: {str(e)}")

    logger.info("Member %s registered (%s)", member.id, member.phone)
    return member


# ============================================================
# UPDATE MEMBER
# ============================================================

def update_member(member_id, update):
    """
    Apply a MemberUpdate (or a raw dict) with apply-if-present semantics.

    Returns: Member
    """
    if not isinstance(update, MemberUpdate):
        update = MemberUpdate.from_dict(update)
    changes = update.changes()

    with ledger_lock:
        try:
            member = get_member(member_id)

            if 'phone' in changes and _phone_taken(changes['phone'], exclude_id=member.id):
                raise DuplicateError(f"Phone {changes['phone']} is already registered",
                                     {'field': 'phone'})

            # Members sign in with their phone; keep the login in step
            if 'phone' in changes and member.user and member.user.username == member.phone \
                    and changes['phone'] != member.phone:
                if get_user_by_username(changes['phone']):
                    raise DuplicateError("Username already exists", {'field': 'phone'})
                member.user.username = changes['phone']

            for attr, value in changes.items():
                setattr(member, attr, value)
            db.session.commit()

        except SamityError:
            db.session.rollback()
            raise
        except SQLAlchemyError as e:
            db.session.rollback()
            raise SamityError(f"Failed to update member: {str(e)}")

    logger.info("Member %s updated: %s", member.id, sorted(changes))
    return member


def toggle_member_status(member_id):
    """Activate an inactive member or deactivate an active one."""
    with ledger_lock:
        member = get_member(member_id)
        member.is_active = not member.is_active
        db.session.commit()

    logger.info("Member %s is_active=%s", member.id, member.is_active)
    return member


# ============================================================
# SUMMARIES
# ============================================================

def get_member_summary(member_id):
    member = get_member(member_id)
    settings = get_settings()

    loan_counts = dict(
        db.session.query(Loan.status, func.count(Loan.id))
        .filter(Loan.member_id == member.id)
        .group_by(Loan.status)
        .all()
    )

    summary = member.to_dict()
    summary.update({
        'shareValue': calculator.share_value(member, settings),
        'annualInterest': calculator.annual_interest(member, settings),
        'pendingLoans': loan_counts.get(LoanStatus.PENDING.value, 0),
        'approvedLoans': loan_counts.get(LoanStatus.APPROVED.value, 0),
        'transactionCount': member.transactions.count(),
    })
    return summary


def get_society_summary():
    """Totals across every member, for the admin dashboard."""
    settings = get_settings()

    totals = db.session.query(
        func.count(Member.id),
        func.coalesce(func.sum(Member.savings), 0.0),
        func.coalesce(func.sum(Member.shares), 0),
        func.coalesce(func.sum(Member.loan_balance), 0.0),
        func.coalesce(func.sum(Member.dividend), 0.0),
    ).one()
    member_count, savings, shares, loan_balance, dividend = totals

    return {
        'totalMembers': member_count,
        'activeMembers': Member.query.filter_by(is_active=True).count(),
        'totalSavings': float(savings),
        'totalShares': int(shares),
        'totalShareValue': int(shares) * settings.share_price,
        'totalLoanBalance': float(loan_balance),
        'totalDividend': float(dividend),
        'pendingLoans': Loan.query.filter_by(status=LoanStatus.PENDING.value).count(),
    }
