"""
Unit Tests for Commission Calculator

Tests verify commissionable value, GST handling and earned commission.
"""

import pytest
from decimal import Decimal

from plan_engine.calculators.commission import (
    CommissionCalculator,
    calculate_commissionable_value,
    calculate_earned_commission,
    calculate_expected_commission,
    quantize_money,
    total_paid_across_plan,
)
from plan_engine.models import Installment, InstallmentStatus, PaymentPlan, PlanInputs


class TestCommissionableValue:
    """Fees are subtracted from the course value and clamped at zero."""

    def test_zero_fees(self):
        assert calculate_commissionable_value(Decimal('10000'), 0, 0, 0) == Decimal('10000')

    def test_fees_subtracted(self):
        result = calculate_commissionable_value(
            Decimal('10000'), Decimal('500'), Decimal('200'), Decimal('100')
        )
        assert result == Decimal('9200')

    def test_fees_exceeding_total_clamp_to_zero(self):
        """1100 of fees on a 1000 course is not negative."""
        result = calculate_commissionable_value(
            Decimal('1000'), Decimal('500'), Decimal('300'), Decimal('300')
        )
        assert result == Decimal('0')

    def test_missing_fees_treated_as_zero(self):
        assert calculate_commissionable_value(Decimal('500'), None, None, None) == Decimal('500')


class TestExpectedCommission:
    """Expected commission with GST-inclusive and exclusive values."""

    def test_gst_inclusive_applies_rate_directly(self):
        result = calculate_expected_commission(Decimal('10000'), Decimal('15'), True)
        assert quantize_money(result) == Decimal('1500.00')

    def test_gst_exclusive_backs_out_gst(self):
        """(9200 / 1.10) x 15% = 1254.545... -> 1254.55"""
        result = calculate_expected_commission(Decimal('9200'), Decimal('15'), False)
        assert quantize_money(result) == Decimal('1254.55')

    def test_gst_paths_differ_by_gst_factor(self):
        inclusive = calculate_expected_commission(Decimal('9200'), Decimal('15'), True)
        exclusive = calculate_expected_commission(Decimal('9200'), Decimal('15'), False)

        assert abs(inclusive - exclusive * Decimal('1.10')) < Decimal('1e-20')

    def test_full_precision_until_rounding(self):
        """The unrounded value is returned; rounding is the caller's step."""
        result = calculate_expected_commission(Decimal('9200'), Decimal('15'), False)
        assert result != quantize_money(result)

    def test_deterministic(self):
        first = calculate_expected_commission(Decimal('12345.67'), Decimal('12.5'), False)
        second = calculate_expected_commission(Decimal('12345.67'), Decimal('12.5'), False)
        assert first == second

    def test_zero_rate(self):
        assert calculate_expected_commission(Decimal('10000'), Decimal('0'), True) == Decimal('0')

    def test_full_rate(self):
        result = calculate_expected_commission(Decimal('5000'), Decimal('100'), True)
        assert quantize_money(result) == Decimal('5000.00')

    def test_small_rate_on_large_amount(self):
        result = calculate_expected_commission(Decimal('100000'), Decimal('0.5'), True)
        assert quantize_money(result) == Decimal('500.00')

    def test_negative_inputs_yield_zero(self):
        assert calculate_expected_commission(Decimal('-100'), Decimal('10'), True) == Decimal('0')
        assert calculate_expected_commission(Decimal('100'), Decimal('-10'), True) == Decimal('0')

    def test_rounds_half_up(self):
        # 1050 x 15% = 157.50
        result = calculate_expected_commission(Decimal('1050'), Decimal('15'), True)
        assert quantize_money(result) == Decimal('157.50')
        # 10.05 x 50% = 5.025 -> 5.03
        result = calculate_expected_commission(Decimal('10.05'), Decimal('50'), True)
        assert quantize_money(result) == Decimal('5.03')


class TestEarnedCommission:
    """Earned commission is proportional to total_amount collected."""

    def test_half_collected(self):
        result = calculate_earned_commission(Decimal('5000'), Decimal('10000'), Decimal('1380'))
        assert result == Decimal('690.00')

    def test_fully_collected(self):
        result = calculate_earned_commission(Decimal('10000'), Decimal('10000'), Decimal('1380'))
        assert result == Decimal('1380.00')

    def test_uses_total_amount_not_commissionable_value(self):
        """Collecting the whole commissionable 9200 of a 10000 plan earns 92%."""
        result = calculate_earned_commission(Decimal('9200'), Decimal('10000'), Decimal('1380'))
        assert result == Decimal('1269.60')

    def test_zero_plan_total_guards_division(self):
        assert calculate_earned_commission(Decimal('100'), Decimal('0'), Decimal('50')) == Decimal('0')

    def test_rounded_to_cents(self):
        result = calculate_earned_commission(Decimal('1'), Decimal('3'), Decimal('100'))
        assert result == Decimal('33.33')


class TestTotalPaidAcrossPlan:
    """Only paid and partial installments contribute."""

    def test_ignores_stale_paid_amount_on_unpaid_statuses(self):
        installments = [
            self._installment(InstallmentStatus.PAID, '100'),
            self._installment(InstallmentStatus.PARTIAL, '40'),
            self._installment(InstallmentStatus.PENDING, '999'),
            self._installment(InstallmentStatus.OVERDUE, '999'),
            self._installment(InstallmentStatus.CANCELLED, '999'),
            self._installment(InstallmentStatus.DRAFT, None),
        ]
        assert total_paid_across_plan(installments) == Decimal('140')

    def test_empty_plan(self):
        assert total_paid_across_plan([]) == Decimal('0')

    def _installment(self, status, paid_amount):
        return Installment(
            id=f"i-{status.value}",
            payment_plan_id="plan",
            installment_number=1,
            amount=Decimal('100'),
            student_due_date=None,
            college_due_date=None,
            status=status,
            paid_amount=Decimal(paid_amount) if paid_amount is not None else None,
        )


class TestCommissionCalculator:
    """Plan-level wrappers."""

    @pytest.fixture
    def calculator(self):
        return CommissionCalculator()

    def test_expected_commission_for_inputs_is_rounded(self, calculator):
        inputs = PlanInputs(
            total_course_value=Decimal('10000'),
            commission_rate_percent=Decimal('15'),
            first_college_due_date=None,
            materials_cost=Decimal('500'),
            admin_fees=Decimal('200'),
            other_fees=Decimal('100'),
            gst_inclusive=False,
        )
        assert calculator.commissionable_value(inputs) == Decimal('9200')
        assert calculator.expected_commission(inputs) == Decimal('1254.55')

    def test_earned_commission_for_plan(self, calculator):
        plan = PaymentPlan(
            id="plan",
            total_amount=Decimal('10000'),
            commission_rate_percent=Decimal('15'),
            commissionable_value=Decimal('10000'),
            expected_commission=Decimal('1500.00'),
            installments=[
                Installment(
                    id="a",
                    payment_plan_id="plan",
                    installment_number=1,
                    amount=Decimal('5000'),
                    student_due_date=None,
                    college_due_date=None,
                    status=InstallmentStatus.PAID,
                    paid_amount=Decimal('5000'),
                ),
                Installment(
                    id="b",
                    payment_plan_id="plan",
                    installment_number=2,
                    amount=Decimal('5000'),
                    student_due_date=None,
                    college_due_date=None,
                    status=InstallmentStatus.PARTIAL,
                    paid_amount=Decimal('2500'),
                ),
            ],
        )
        assert calculator.earned_commission(plan) == Decimal('1125.00')
