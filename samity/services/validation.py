"""
Input coercion helpers shared by the services.

All helpers raise ValidationError with the offending field name so the
HTTP layer can report it back unchanged.
"""

import math
from datetime import date, datetime

from samity.services.errors import ValidationError

DATE_FORMAT = '%Y-%m-%d'


def to_number(value, field):
    """Coerce an int/float/numeric string to float."""
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", {'field': field})
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be a number", {'field': field})
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(f"{field} must be a finite number", {'field': field})
    return number


def to_int(value, field):
    number = to_number(value, field)
    if number != int(number):
        raise ValidationError(f"{field} must be a whole number", {'field': field})
    return int(number)


def positive_amount(value, field='amount'):
    amount = to_number(value, field)
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than 0", {'field': field, 'value': amount})
    return amount


def required_text(value, field):
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", {'field': field})
    return value.strip()


def optional_text(value, field, default=''):
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", {'field': field})
    return value.strip()


def to_bool(value, field):
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be true or false", {'field': field})
    return value


def to_date(value, field='date', default=None):
    """Parse an ISO 'YYYY-MM-DD' string. Missing values fall back to default."""
    if value is None or value == '':
        return default if default is not None else date.today()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a date string", {'field': field})
    try:
        # Accept full ISO timestamps too, keep only the date part
        return datetime.strptime(value[:10], DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"{field} must use format YYYY-MM-DD", {'field': field, 'value': value})


def choice(value, field, allowed):
    if value not in allowed:
        raise ValidationError(
            f"{field} must be one of: {', '.join(allowed)}",
            {'field': field, 'value': value}
        )
    return value
