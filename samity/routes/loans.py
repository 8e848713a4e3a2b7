"""
LOAN ROUTES
===========

Members apply for their own loans.
PATCH with {"status": "approved"} disburses the loan (admin only).
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from samity.routes import json_body, query_int, admin_required, require_self_or_admin
from samity.services.loan_service import (
    apply_for_loan, update_loan, get_loan, list_loans, estimate_installment
)

loans_bp = Blueprint('loans', __name__, url_prefix='/api/loans')


@loans_bp.route('', methods=['GET'])
@login_required
def index():
    member_id = query_int('memberId')
    if not current_user.is_admin:
        if member_id is None and current_user.member:
            member_id = current_user.member.id
        require_self_or_admin(member_id)

    loans = list_loans(
        member_id=member_id,
        status=request.args.get('status') or None
    )
    return jsonify([loan.to_dict() for loan in loans])


@loans_bp.route('', methods=['POST'])
@login_required
def apply():
    data = json_body()
    require_self_or_admin(data.get('memberId'))
    loan = apply_for_loan(
        member_id=data.get('memberId'),
        amount=data.get('amount'),
        purpose=data.get('purpose'),
        duration=data.get('duration')
    )
    return jsonify(loan.to_dict()), 201


@loans_bp.route('/estimate', methods=['GET'])
@login_required
def estimate():
    amount = request.args.get('amount')
    duration = request.args.get('duration')
    installment = estimate_installment(amount, duration)
    return jsonify({
        'amount': float(amount),
        'duration': int(float(duration)),
        'monthlyInstallment': installment,
    })


@loans_bp.route('/<int:loan_id>', methods=['GET'])
@login_required
def show(loan_id):
    loan = get_loan(loan_id)
    require_self_or_admin(loan.member_id)
    return jsonify(loan.to_dict())


@loans_bp.route('/<int:loan_id>', methods=['PATCH'])
@admin_required
def update(loan_id):
    loan = update_loan(loan_id, json_body())
    return jsonify(loan.to_dict())
