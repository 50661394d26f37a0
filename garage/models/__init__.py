"""
SQLAlchemy database models.
"""
from garage.models.customer import Customer, Vehicle
from garage.models.mechanic import Mechanic
from garage.models.user import User, UserRole
from garage.models.jobcard import JobCard, JobStatus, ServiceType
from garage.models.item import Item
from garage.models.bill import GstBill, GstBillLine, NonGstBill, non_gst_bill_items
from garage.models.expense import Expense, ExpenseCategory, PaymentMode
from garage.models.garage_profile import GarageProfile
from garage.models.permission import Permission, RolePermission

__all__ = [
    "Customer", "Vehicle", "Mechanic", "User", "UserRole",
    "JobCard", "JobStatus", "ServiceType", "Item",
    "GstBill", "GstBillLine", "NonGstBill", "non_gst_bill_items",
    "Expense", "ExpenseCategory", "PaymentMode",
    "GarageProfile", "Permission", "RolePermission",
]
