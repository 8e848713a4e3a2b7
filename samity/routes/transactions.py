"""
TRANSACTION ROUTES
==================

Uses transaction_service for every ledger entry.
Only admins post entries; members may read their own.
"""

from flask import Blueprint, jsonify, request
from flask_login import login_required, current_user

from samity.routes import json_body, query_int, admin_required, require_self_or_admin
from samity.services.transaction_service import (
    record_transaction, list_transactions, get_transaction
)

transactions_bp = Blueprint('transactions', __name__, url_prefix='/api/transactions')


@transactions_bp.route('', methods=['GET'])
@login_required
def index():
    member_id = query_int('memberId')
    if not current_user.is_admin:
        # Members only ever see their own ledger
        if member_id is None and current_user.member:
            member_id = current_user.member.id
        require_self_or_admin(member_id)

    transactions = list_transactions(
        member_id=member_id,
        txn_type=request.args.get('type') or None
    )
    return jsonify([t.to_dict() for t in transactions])


@transactions_bp.route('', methods=['POST'])
@admin_required
def create():
    data = json_body()
    transaction = record_transaction(
        member_id=data.get('memberId'),
        txn_type=data.get('type'),
        amount=data.get('amount'),
        txn_date=data.get('date'),
        description=data.get('description')
    )
    return jsonify(transaction.to_dict()), 201


@transactions_bp.route('/<int:transaction_id>', methods=['GET'])
@login_required
def show(transaction_id):
    transaction = get_transaction(transaction_id)
    require_self_or_admin(transaction.member_id)
    return jsonify(transaction.to_dict())
