"""
Pydantic schemas for request/response validation.
"""
from garage.schemas.customer import (
    CustomerBase, CustomerCreate, CustomerUpdate, Customer, CustomerSummary,
    VehicleBase, VehicleCreate, VehicleUpdate, Vehicle,
)
from garage.schemas.mechanic import MechanicCreate, MechanicUpdate, Mechanic
from garage.schemas.user import UserBase, UserCreate, UserUpdate, User, Token, LoginRequest
from garage.schemas.jobcard import JobCardCreate, JobCardUpdate, JobCard
from garage.schemas.item import ItemCreate, ItemUpdate, Item
from garage.schemas.bill import (
    GstBillCreate, GstBillUpdate, GstBill,
    NonGstBillCreate, NonGstBillUpdate, NonGstBill,
)
from garage.schemas.expense import (
    ExpenseCreate, ExpenseUpdate, Expense,
    ExpenseCategoryCreate, ExpenseCategoryUpdate, ExpenseCategory,
)
from garage.schemas.garage_profile import GarageProfileCreate, GarageProfileUpdate, GarageProfile
from garage.schemas.permission import PermissionCreate, PermissionUpdate, Permission, RolePermission

__all__ = [
    "CustomerBase", "CustomerCreate", "CustomerUpdate", "Customer", "CustomerSummary",
    "VehicleBase", "VehicleCreate", "VehicleUpdate", "Vehicle",
    "MechanicCreate", "MechanicUpdate", "Mechanic",
    "UserBase", "UserCreate", "UserUpdate", "User", "Token", "LoginRequest",
    "JobCardCreate", "JobCardUpdate", "JobCard",
    "ItemCreate", "ItemUpdate", "Item",
    "GstBillCreate", "GstBillUpdate", "GstBill",
    "NonGstBillCreate", "NonGstBillUpdate", "NonGstBill",
    "ExpenseCreate", "ExpenseUpdate", "Expense",
    "ExpenseCategoryCreate", "ExpenseCategoryUpdate", "ExpenseCategory",
    "GarageProfileCreate", "GarageProfileUpdate", "GarageProfile",
    "PermissionCreate", "PermissionUpdate", "Permission", "RolePermission",
]
