from datetime import datetime, date
from enum import Enum

from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from samity.extensions import db


# ============================================================
# ENUMS
# ============================================================
class MemberRole(Enum):
    ADMIN = 'admin'
    USER = 'user'


class TransactionType(Enum):
    DEPOSIT = 'deposit'
    WITHDRAWAL = 'withdrawal'
    SHARE = 'share'
    LOAN_DISBURSEMENT = 'loan_disbursement'
    LOAN_REPAYMENT = 'loan_repayment'
    DIVIDEND = 'dividend'

    @classmethod
    def values(cls):
        return [t.value for t in cls]


class LoanStatus(Enum):
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    @classmethod
    def values(cls):
        return [s.value for s in cls]


class EventType(Enum):
    MEETING = 'meeting'
    EVENT = 'event'

    @classmethod
    def values(cls):
        return [t.value for t in cls]


def _iso(value):
    return value.isoformat() if value else None


# ============================================================
# USER MODEL
# ============================================================
class User(UserMixin, db.Model):
    """
    Login account. Members sign in with their phone number as username.
    """
    __tablename__ = 'users'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(50), unique=True, nullable=False)
    password_hash = db.Column(db.String(256), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=MemberRole.USER.value)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    member = db.relationship('Member', backref='user', uselist=False)

    def set_password(self, password):
        """Hash and set the user's password."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Verify password against stored hash."""
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self):
        return self.role == MemberRole.ADMIN.value

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'role': self.role,
        }

    def __repr__(self):
        return f'<User {self.username}>'


# ============================================================
# MEMBER MODEL
# ============================================================
class Member(db.Model):
    """
    A registered participant of the society.

    CRITICAL: savings, shares and loan_balance are a cached financial
    snapshot and must ONLY be changed by recording a Transaction.
    """
    __tablename__ = 'members'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), unique=True, nullable=False)

    name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20), unique=True, nullable=False)
    address = db.Column(db.String(255), nullable=False)
    nid = db.Column(db.String(30), nullable=False, default='')
    photo = db.Column(db.String(255), nullable=True)
    join_date = db.Column(db.Date, nullable=False, default=date.today)

    # Financial snapshot
    shares = db.Column(db.Integer, nullable=False, default=0)
    savings = db.Column(db.Float, nullable=False, default=0.0)
    loan_balance = db.Column(db.Float, nullable=False, default=0.0)  # never negative
    dividend = db.Column(db.Float, nullable=False, default=0.0)  # set manually by admin

    is_active = db.Column(db.Boolean, nullable=False, default=True)

    transactions = db.relationship('Transaction', backref='member', lazy='dynamic')
    loans = db.relationship('Loan', backref='member', lazy='dynamic')

    @property
    def role(self):
        return self.user.role if self.user else MemberRole.USER.value

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'phone': self.phone,
            'address': self.address,
            'nid': self.nid,
            'photo': self.photo,
            'joinDate': _iso(self.join_date),
            'shares': self.shares,
            'savings': self.savings,
            'loanBalance': self.loan_balance,
            'dividend': self.dividend,
            'isActive': self.is_active,
            'role': self.role,
        }

    def __repr__(self):
        return f'<Member {self.name}>'


# ============================================================
# TRANSACTION MODEL (LEDGER)
# ============================================================
class Transaction(db.Model):
    """
    Immutable ledger entry. Created once by the transaction service,
    never updated or deleted.
    """
    __tablename__ = 'transactions'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    type = db.Column(db.String(30), nullable=False)
    amount = db.Column(db.Float, nullable=False)  # always > 0
    date = db.Column(db.Date, nullable=False, default=date.today)
    description = db.Column(db.String(255), nullable=False, default='')
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'memberId': self.member_id,
            'memberName': self.member.name if self.member else None,
            'type': self.type,
            'amount': self.amount,
            'date': _iso(self.date),
            'description': self.description,
        }

    def __repr__(self):
        return f'<Transaction {self.type} amount={self.amount}>'


# ============================================================
# LOAN MODEL
# ============================================================
class Loan(db.Model):
    """
    Loan application.

    Lifecycle:
    1. Created with status='pending'
    2. Admin approves  -> 'approved', installment fixed, amount disbursed
       Admin rejects   -> 'rejected'
    Both approved and rejected are terminal.
    """
    __tablename__ = 'loans'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    member_id = db.Column(db.Integer, db.ForeignKey('members.id'), nullable=False)
    amount = db.Column(db.Float, nullable=False)
    purpose = db.Column(db.String(500), nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # months
    status = db.Column(db.String(20), nullable=False, default=LoanStatus.PENDING.value)
    applied_date = db.Column(db.Date, nullable=False, default=date.today)
    approved_date = db.Column(db.Date, nullable=True)
    monthly_installment = db.Column(db.Float, nullable=True)

    @property
    def is_pending(self):
        return self.status == LoanStatus.PENDING.value

    def to_dict(self):
        return {
            'id': self.id,
            'memberId': self.member_id,
            'memberName': self.member.name if self.member else None,
            'amount': self.amount,
            'purpose': self.purpose,
            'duration': self.duration,
            'status': self.status,
            'appliedDate': _iso(self.applied_date),
            'approvedDate': _iso(self.approved_date),
            'monthlyInstallment': self.monthly_installment,
        }

    def __repr__(self):
        return f'<Loan {self.amount} member={self.member_id} status={self.status}>'


# ============================================================
# NOTICE MODEL
# ============================================================
class Notice(db.Model):
    __tablename__ = 'notices'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)
    date = db.Column(db.Date, nullable=False, default=date.today)
    is_urgent = db.Column(db.Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'content': self.content,
            'date': _iso(self.date),
            'isUrgent': self.is_urgent,
        }


# ============================================================
# EVENT MODEL
# ============================================================
class Event(db.Model):
    __tablename__ = 'events'
    __table_args__ = {'sqlite_autoincrement': True}

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(20), nullable=False)
    venue = db.Column(db.String(200), nullable=False)
    type = db.Column(db.String(20), nullable=False, default=EventType.MEETING.value)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'date': _iso(self.date),
            'time': self.time,
            'venue': self.venue,
            'type': self.type,
        }


# ============================================================
# SETTINGS MODEL
# ============================================================
class Settings(db.Model):
    """
    Global society parameters. Exactly one row exists.
    """
    __tablename__ = 'settings'

    id = db.Column(db.Integer, primary_key=True)
    interest_rate = db.Column(db.Float, nullable=False)
    share_price = db.Column(db.Float, nullable=False)
    max_loan_amount = db.Column(db.Float, nullable=False)
    loan_interest_rate = db.Column(db.Float, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # JSON key -> column
    FIELDS = {
        'interestRate': 'interest_rate',
        'sharePrice': 'share_price',
        'maxLoanAmount': 'max_loan_amount',
        'loanInterestRate': 'loan_interest_rate',
    }

    def to_dict(self):
        return {key: getattr(self, column) for key, column in self.FIELDS.items()}

    def __repr__(self):
        return f'<Settings share_price={self.share_price} loan_rate={self.loan_interest_rate}>'
