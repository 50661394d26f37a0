"""
Role to feature access policy.

This table is the single source of truth for who may use what. Routers check
it through ``garage.auth.require_feature`` and the UI reads it from
``GET /auth/access`` to decide which navigation entries to show.
"""
from garage.models.user import UserRole

DASHBOARD = "dashboard"
CUSTOMERS = "customers"
JOBCARDS = "jobcards"
PRODUCTS = "products"
USERS = "users"
BILLING = "billing"
BILLING_HISTORY = "billingHistory"
REPORTS = "reports"
EXPENSES = "expenses"
CUSTOMER_SERVICE = "customer-service"
SETTINGS = "settings"
PROFILE = "profile"

FEATURE_ACCESS: dict[UserRole, frozenset[str]] = {
    UserRole.ADMIN: frozenset({
        DASHBOARD, CUSTOMERS, JOBCARDS, PRODUCTS, USERS, BILLING,
        BILLING_HISTORY, REPORTS, EXPENSES, CUSTOMER_SERVICE, SETTINGS, PROFILE,
    }),
    UserRole.STAFF: frozenset({DASHBOARD, CUSTOMERS, JOBCARDS, BILLING, BILLING_HISTORY, PROFILE}),
    UserRole.MANAGER: frozenset({DASHBOARD, REPORTS, EXPENSES, PROFILE}),
    UserRole.MECHANIC: frozenset({JOBCARDS, PROFILE}),
    # Self-registered accounts get front-desk access
    UserRole.USER: frozenset({DASHBOARD, CUSTOMERS, JOBCARDS, BILLING, BILLING_HISTORY, PROFILE}),
}


def features_for(role: UserRole) -> list[str]:
    """Sorted feature keys available to ``role``."""
    return sorted(FEATURE_ACCESS.get(role, frozenset()))


def can_access(role: UserRole, *features: str) -> bool:
    """True when ``role`` may use at least one of ``features``."""
    allowed = FEATURE_ACCESS.get(role, frozenset())
    return any(feature in allowed for feature in features)
