"""Fixed vocabularies stored as plain strings in the database."""
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    USER = "user"


class SaleStatus(str, Enum):
    COMPLETED = "Completed"
    PARTIAL_PAYMENT = "Partial Payment"
    # Declared for the record but never produced by the sale workflow
    PENDING = "Pending"
    CANCELLED = "Cancelled"


class PaymentMethod(str, Enum):
    CASH = "Cash"
    DEBIT_CARD = "Debit Card"
    HALF_PAYMENT = "Half Payment"
    TRANSFER = "Transfer"


class StockStatus(str, Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"


class ProductCategory(str, Enum):
    CASING = "Casing"
    REMOTE_XHORSE = "Remote_xhorse"
    REMOTE_KEYDIY = "Remote_keyDiy"
    VALET_KEY = "Valet_Key"
    KEYHOLDER = "Keyholder"
    JACKET = "Jacket"
    BATTERY = "Battery"
    PROGRAMMING = "Programming"
    AFTER_MARKET = "After_Market"
    WORK = "Work"  # labour
    BLADE = "Blade"
    EMULATOR = "Emulator"
    PCB = "Pcb"
    CHIP = "Chip"
    ORIGINAL = "Original"
    KEYLESS = "Keyless"
    OEM = "OEM"
    OTHERS = "Others"


class ExpenseCategory(str, Enum):
    RENT_UTILITIES = "Rent & Utilities"
    SALARIES_WAGES = "Salaries & Wages"
    INVENTORY_SUPPLIES = "Inventory & Supplies"
    MARKETING = "Marketing & Advertising"
    EQUIPMENT = "Equipment & Maintenance"
    INSURANCE_LEGAL = "Insurance & Legal"
    TRANSPORTATION = "Transportation"
    MISCELLANEOUS = "Miscellaneous"
