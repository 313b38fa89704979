# Database models

from schoolfees.models.audit import AccessLog, AuditLog
from schoolfees.models.fee import Fee
from schoolfees.models.grade import Grade
from schoolfees.models.parent import Parent
from schoolfees.models.payment import ApprovalStatus, Payment
from schoolfees.models.pupil import Pupil, PupilStatus
from schoolfees.models.term import TermLock
from schoolfees.models.user import User, UserRole

__all__ = [
    "AccessLog",
    "AuditLog",
    "Fee",
    "Grade",
    "Parent",
    "ApprovalStatus",
    "Payment",
    "Pupil",
    "PupilStatus",
    "TermLock",
    "User",
    "UserRole",
]
