from tillkeeper.models.employee import Employee
from tillkeeper.models.transaction import Transaction, Payment
from tillkeeper.models.cash_drawer import CashDrawer, CashDrop, CashPickup, ShiftNote, CashDrawerTransaction
from tillkeeper.models.audit_log import AuditLog
from tillkeeper.models.display_event import DisplayEvent

__all__ = [
    "Employee",
    "Transaction",
    "Payment",
    "CashDrawer",
    "CashDrop",
    "CashPickup",
    "ShiftNote",
    "CashDrawerTransaction",
    "AuditLog",
    "DisplayEvent",
]
