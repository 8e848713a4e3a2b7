"""
BULLETIN SERVICE
================

Notices (newest first) and meetings/events (soonest first).
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from samity.extensions import db
from samity.models import Notice, Event, EventType
from samity.services.errors import SamityError, ValidationError
from samity.services.validation import required_text, to_bool, to_date, choice

logger = logging.getLogger(__name__)


def _save(record, kind):
    try:
        db.session.add(record)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        raise SamityError(f"Failed to create {kind}: {str(e)}")
    logger.info("%s %s created: %s", kind.capitalize(), record.id, record.title)
    return record


def create_notice(data):
    if not isinstance(data, dict):
        raise ValidationError("Notice payload must be an object")

    notice = Notice(
        title=required_text(data.get('title'), 'title'),
        content=required_text(data.get('content'), 'content'),
        date=to_date(data.get('date')),
        is_urgent=to_bool(data.get('isUrgent', False), 'isUrgent')
    )
    return _save(notice, 'notice')


def list_notices():
    return Notice.query.order_by(Notice.date.desc(), Notice.id.asc()).all()


def create_event(data):
    if not isinstance(data, dict):
        raise ValidationError("Event payload must be an object")

    if not data.get('date'):
        raise ValidationError("date is required", {'field': 'date'})

    event = Event(
        title=required_text(data.get('title'), 'title'),
        description=required_text(data.get('description'), 'description'),
        date=to_date(data.get('date')),
        time=required_text(data.get('time'), 'time'),
        venue=required_text(data.get('venue'), 'venue'),
        type=choice(data.get('type', EventType.MEETING.value), 'type', EventType.values())
    )
    return _save(event, 'event')


def list_events():
    return Event.query.order_by(Event.date.asc(), Event.id.asc()).all()
