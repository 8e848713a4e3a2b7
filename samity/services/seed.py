"""Demo accounts created on first start when SEED_DEMO_DATA is on."""

import logging

from samity.models import Member, MemberRole
from samity.services.member_service import create_member

logger = logging.getLogger(__name__)

DEMO_MEMBERS = [
    {
        'name': 'Administrator',
        'phone': '01700000000',
        'password': 'admin123',
        'role': MemberRole.ADMIN.value,
        'address': 'Chittagong',
        'nid': '1234567890',
        'shares': 10,
        'savings': 5000,
    },
    {
        'name': 'General Member',
        'phone': '01711111111',
        'password': '123',
        'role': MemberRole.USER.value,
        'address': 'Dhaka',
        'nid': '0987654321',
        'shares': 5,
        'savings': 2000,
    },
]


def seed_demo_data():
    """Create the demo members if the member table is empty."""
    if Member.query.first() is not None:
        return []

    logger.info("Seeding initial data...")
    return [create_member(dict(data)) for data in DEMO_MEMBERS]
