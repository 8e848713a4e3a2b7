"""
Services Package
================

Business logic layer for the society ledger.

All balance-changing operations are handled here.
Routes should call these services, not manipulate models directly.
"""

from samity.services.errors import (
    SamityError,
    ValidationError,
    DuplicateError,
    NotFoundError,
    InvalidStateError,
    AuthenticationError,
    AuthorizationError
)

from samity.services.transaction_service import (
    record_transaction,
    list_transactions,
    get_transaction
)

from samity.services.loan_service import (
    apply_for_loan,
    approve_loan,
    reject_loan,
    update_loan,
    get_loan,
    list_loans,
    estimate_installment
)

from samity.services.member_service import (
    MemberUpdate,
    create_member,
    update_member,
    toggle_member_status,
    get_member,
    get_member_by_phone,
    list_members,
    get_member_summary,
    get_society_summary
)

from samity.services.settings_service import (
    get_settings,
    ensure_settings,
    update_settings
)

from samity.services.auth_service import (
    register_user,
    authenticate
)

from samity.services.bulletin_service import (
    create_notice,
    list_notices,
    create_event,
    list_events
)
