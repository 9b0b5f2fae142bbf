"""
Driver-related enumerations.
"""

import enum


class DutyStatus(str, enum.Enum):
    """Driver eligibility state for trip assignment."""
    ON_DUTY = "On Duty"
    OFF_DUTY = "Off Duty"
    SUSPENDED = "Suspended"
