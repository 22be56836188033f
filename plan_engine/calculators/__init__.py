"""
Calculators Package

Provides all calculation components for payment plan processing.
"""

from .commission import (
    CommissionCalculator,
    calculate_commissionable_value,
    calculate_earned_commission,
    calculate_expected_commission,
    quantize_money,
)
from .payment import PaymentRecorder
from .schedule import ScheduleGenerator
from .status import StatusClassifier, classify_installment_timing

__all__ = [
    "CommissionCalculator",
    "ScheduleGenerator",
    "PaymentRecorder",
    "StatusClassifier",
    "calculate_commissionable_value",
    "calculate_expected_commission",
    "calculate_earned_commission",
    "classify_installment_timing",
    "quantize_money",
]
