"""
Figures derived from the society settings.

Pure functions: they read settings and member fields and never write.
Each accepts an explicit `settings` object; when omitted the current
settings row is used.
"""

import math

# Float noise (112.00000000000001) must not push a ceil/floor over the edge
TOLERANCE = 1e-12


def _settings(settings):
    if settings is None:
        from samity.services.settings_service import get_settings
        return get_settings()
    return settings


def _snap(value):
    """Snap to the nearest whole number only when within float noise of it."""
    nearest = round(value)
    if abs(value - nearest) <= TOLERANCE * max(1.0, abs(value)):
        return float(nearest)
    return value


def round_half_up(value):
    return int(math.floor(value + 0.5))


def shares_for_amount(amount, settings=None):
    """Whole shares bought by paying `amount`."""
    price = _settings(settings).share_price
    return int(math.floor(_snap(amount / price)))


def share_value(member, settings=None):
    return member.shares * _settings(settings).share_price


def annual_interest(member, settings=None):
    """Yearly interest earned on savings, rounded to the nearest unit."""
    return round_half_up(member.savings * _settings(settings).interest_rate / 100)


def monthly_installment(amount, duration, loan_interest_rate):
    """
    Flat-rate installment: total with interest spread evenly, rounded up.
    Returns None when duration is not a positive number of months.
    """
    if not duration or duration <= 0:
        return None
    total = amount * (1 + loan_interest_rate / 100)
    return int(math.ceil(_snap(total / duration)))


def estimated_installment(amount, duration, settings=None):
    return monthly_installment(amount, duration, _settings(settings).loan_interest_rate)
