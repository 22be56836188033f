from datetime import date
from decimal import Decimal

import pytest

from plan_engine.models import PaymentFrequency, PlanInputs


@pytest.fixture
def sample_input():
    """Wizard input: 10000 course, 800 fees, 2000 paid upfront, 4 monthly installments."""
    return {
        "total_course_value": 10000,
        "commission_rate_percent": 15,
        "materials_cost": 500,
        "admin_fees": 200,
        "other_fees": 100,
        "gst_inclusive": True,
        "initial_payment_amount": 2000,
        "initial_payment_due_date": "2025-01-15",
        "initial_payment_paid": True,
        "number_of_installments": 4,
        "payment_frequency": "monthly",
        "first_college_due_date": "2025-02-15",
        "student_lead_time_days": 7,
    }


@pytest.fixture
def sample_inputs():
    return PlanInputs(
        total_course_value=Decimal('10000'),
        commission_rate_percent=Decimal('15'),
        first_college_due_date=date(2025, 2, 15),
        number_of_installments=4,
        payment_frequency=PaymentFrequency.MONTHLY,
        materials_cost=Decimal('500'),
        admin_fees=Decimal('200'),
        other_fees=Decimal('100'),
        gst_inclusive=True,
        initial_payment_amount=Decimal('2000'),
        initial_payment_due_date=date(2025, 1, 15),
        initial_payment_paid=True,
        student_lead_time_days=7,
    )
