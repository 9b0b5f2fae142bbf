"""
Maintenance-related enumerations.
"""

import enum


class MaintenanceStatus(str, enum.Enum):
    """Maintenance log status enumeration."""
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
