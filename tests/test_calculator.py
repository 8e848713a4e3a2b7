"""Tests for figures derived from society settings."""
import unittest
from types import SimpleNamespace

from samity.services import calculator


def make_settings(**overrides):
    values = dict(interest_rate=6.0, share_price=100.0,
                  max_loan_amount=500000.0, loan_interest_rate=12.0)
    values.update(overrides)
    return SimpleNamespace(**values)


class TestInstallment(unittest.TestCase):

    def test_estimated_installment_rounds_up(self):
        self.assertEqual(calculator.estimated_installment(50000, 12, make_settings()), 4667)

    def test_exact_division_is_not_bumped(self):
        # 100 * 1.12 is 112.00000000000001 in binary floating point
        self.assertEqual(calculator.estimated_installment(100, 1, make_settings()), 112)

    def test_zero_duration_returns_none(self):
        self.assertIsNone(calculator.estimated_installment(50000, 0, make_settings()))

    def test_negative_duration_returns_none(self):
        self.assertIsNone(calculator.monthly_installment(50000, -3, 12))

    def test_zero_interest(self):
        self.assertEqual(calculator.monthly_installment(1200, 12, 0), 100)

    def test_follows_current_loan_rate(self):
        settings = make_settings(loan_interest_rate=20)
        self.assertEqual(calculator.estimated_installment(12000, 12, settings), 1200)


class TestMemberFigures(unittest.TestCase):

    def setUp(self):
        self.member = SimpleNamespace(shares=7, savings=15250.0)

    def test_share_value(self):
        self.assertEqual(calculator.share_value(self.member, make_settings()), 700)

    def test_share_value_tracks_share_price(self):
        self.assertEqual(calculator.share_value(self.member, make_settings(share_price=250)), 1750)

    def test_annual_interest_rounds_half_up(self):
        # 15250 * 6% = 915.0
        self.assertEqual(calculator.annual_interest(self.member, make_settings()), 915)
        member = SimpleNamespace(shares=0, savings=25.0)
        # 25 * 6% = 1.5 -> 2
        self.assertEqual(calculator.annual_interest(member, make_settings()), 2)

    def test_shares_for_amount_floors(self):
        settings = make_settings()
        self.assertEqual(calculator.shares_for_amount(250, settings), 2)
        self.assertEqual(calculator.shares_for_amount(99, settings), 0)
        self.assertEqual(calculator.shares_for_amount(300, settings), 3)

    def test_shares_for_amount_near_boundary(self):
        settings = make_settings()
        # just under three shares still buys two
        self.assertEqual(calculator.shares_for_amount(299.9999999, settings), 2)
        self.assertEqual(calculator.shares_for_amount(299.99, settings), 2)
        # float noise on an exact multiple is not lost
        self.assertEqual(calculator.shares_for_amount(0.3, make_settings(share_price=0.1)), 3)


if __name__ == '__main__':
    unittest.main()
