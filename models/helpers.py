"""Contains all models commonly used across different modules."""
from enum import Enum


class UserRole(str, Enum):
    """Enumeration of user roles."""
    ADMIN = "ADMIN"
    SALES = "SALES"
    PM = "PM"
    CUSTOMER = "CUSTOMER"
