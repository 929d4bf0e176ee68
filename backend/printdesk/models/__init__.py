from .directory import Customer, Staff, Printer
from .inventory import InventoryItem
from .memberships import Membership
from .transactions import Transaction, TransactionInventoryLine, StaffAssignment, PrinterAssignment
from .sequences import IdentifierSequence

__all__ = [
    'Customer', 'Staff', 'Printer',
    'InventoryItem',
    'Membership',
    'Transaction', 'TransactionInventoryLine', 'StaffAssignment', 'PrinterAssignment',
    'IdentifierSequence',
]
