"""
User roles enumeration.

Defines the role types for the FleetFlow dashboard.
"""

import enum


class UserRole(str, enum.Enum):
    """
    User role enumeration.

    Roles:
        FLEET_MANAGER: Oversees vehicles and maintenance (default role)
        DISPATCHER: Creates and moves trips
        SAFETY_OFFICER: Manages driver profiles and compliance
        FINANCIAL_ANALYST: Logs expenses and reads financial analytics
    """
    FLEET_MANAGER = "Fleet Manager"
    DISPATCHER = "Dispatcher"
    SAFETY_OFFICER = "Safety Officer"
    FINANCIAL_ANALYST = "Financial Analyst"
