"""
SETTINGS SERVICE
================

Society-wide parameters (savings interest, share price, loan ceiling,
loan interest). A single row, created from config defaults on first use.
"""

import logging

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from samity.extensions import db, ledger_lock
from samity.models import Settings
from samity.services.errors import SamityError, ValidationError
from samity.services.validation import to_number

logger = logging.getLogger(__name__)

# Keys whose value must be strictly positive; the rest only non-negative
POSITIVE_KEYS = ('sharePrice', 'maxLoanAmount')


def get_settings():
    """Return the settings row, creating it (flushed, not committed) if absent."""
    settings = Settings.query.order_by(Settings.id).first()
    if settings is None:
        defaults = current_app.config['DEFAULT_SETTINGS']
        settings = Settings(**{
            column: float(defaults[key]) for key, column in Settings.FIELDS.items()
        })
        db.session.add(settings)
        db.session.flush()
        logger.info("Created default settings %s", settings.to_dict())
    return settings


def ensure_settings():
    """Make sure the settings row exists and is persisted."""
    with ledger_lock:
        settings = get_settings()
        db.session.commit()
        return settings


def update_settings(data):
    """
    Apply a partial update. Only keys present in `data` change.

    Returns: Settings
    """
    if not isinstance(data, dict):
        raise ValidationError("Settings payload must be an object")

    unknown = sorted(set(data) - set(Settings.FIELDS))
    if unknown:
        raise ValidationError(f"Unknown settings: {', '.join(unknown)}", {'fields': unknown})

    values = {}
    for key, raw in data.items():
        value = to_number(raw, key)
        if key in POSITIVE_KEYS and value <= 0:
            raise ValidationError(f"{key} must be greater than 0", {'field': key})
        if value < 0:
            raise ValidationError(f"{key} cannot be negative", {'field': key})
        values[key] = value

    with ledger_lock:
        try:
            settings = get_settings()
            for key, value in values.items():
                setattr(settings, Settings.FIELDS[key], value)
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            raise SamityError(f"Failed to update settings: {str(e)}")

    logger.info("Settings updated: %s", values)
    return settings
