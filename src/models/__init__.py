# Import models here so Alembic can discover them via metadata
from .base import Base  # noqa: F401
from .member import Member  # noqa: F401
from .internal_category import InternalCategory  # noqa: F401
from .number_sequence import NumberSequence  # noqa: F401
from .expense_application import ExpenseApplication  # noqa: F401
from .application_comment import ApplicationComment  # noqa: F401
from .receipt import Receipt  # noqa: F401
from .ocr_result import OcrResult  # noqa: F401
from .payment import Payment  # noqa: F401
from .notification_log import NotificationLog  # noqa: F401
from .audit_log import AuditLog  # noqa: F401
