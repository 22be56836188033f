"""
PAYMENT PLAN INSTALLMENT & COMMISSION ENGINE
"""

from .errors import ArithmeticInvariantViolation, ConflictError, NotFoundError, ValidationError
from .models import PaymentRequest, PlanInputs
from .processor import PaymentPlanProcessor

__all__ = [
    'PaymentPlanProcessor',
    'PlanInputs',
    'PaymentRequest',
    'ValidationError',
    'ConflictError',
    'NotFoundError',
    'ArithmeticInvariantViolation',
]
