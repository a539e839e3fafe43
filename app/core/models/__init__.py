from app.core.models.employee import Employee
from app.core.models.bus import Bus
from app.core.models.student import Student
from app.core.models.payment import Payment
from app.core.models.student_fee import PaymentAllocation, StudentFee

__all__ = [
    "Bus",
    "Employee",
    "Payment",
    "PaymentAllocation",
    "Student",
    "StudentFee",
]
