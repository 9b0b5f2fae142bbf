"""
Role capabilities for the dashboard.

Each role maps to a fixed menu and a fixed set of sections it may open.
Sidebar rendering and endpoint guards both read from ``ROLE_CAPABILITIES``.
"""

import enum
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Tuple

from fleetflow.app.models.enums import UserRole


class Section(str, enum.Enum):
    """Dashboard sections, one per page of the admin UI."""
    COMMAND_CENTER = "command_center"
    VEHICLES = "vehicles"
    MAINTENANCE = "maintenance"
    TRIPS = "trips"
    DRIVERS = "drivers"
    EXPENSES = "expenses"
    ANALYTICS = "analytics"


@dataclass(frozen=True)
class MenuItem:
    section: Section
    label: str
    path: str


MENU_ITEMS: Dict[Section, MenuItem] = {
    Section.COMMAND_CENTER: MenuItem(Section.COMMAND_CENTER, "Command Center", "/dashboard"),
    Section.VEHICLES: MenuItem(Section.VEHICLES, "Vehicle Registry", "/dashboard/vehicles"),
    Section.MAINTENANCE: MenuItem(Section.MAINTENANCE, "Maintenance & Service Logs", "/dashboard/maintenance"),
    Section.TRIPS: MenuItem(Section.TRIPS, "Trip Dispatcher", "/dashboard/trips"),
    Section.DRIVERS: MenuItem(Section.DRIVERS, "Driver Profiles", "/dashboard/drivers"),
    Section.EXPENSES: MenuItem(Section.EXPENSES, "Expense & Fuel Logging", "/dashboard/expenses"),
    Section.ANALYTICS: MenuItem(Section.ANALYTICS, "Analytics & Reports", "/dashboard/analytics"),
}


@dataclass(frozen=True)
class RoleCapabilities:
    menu: Tuple[Section, ...]
    sections: FrozenSet[Section]

    def can_access(self, section: Section) -> bool:
        return section in self.sections


def _capabilities(*menu: Section, extra: Tuple[Section, ...] = ()) -> RoleCapabilities:
    full_menu = (Section.COMMAND_CENTER,) + menu
    return RoleCapabilities(menu=full_menu, sections=frozenset(full_menu + extra))


ROLE_CAPABILITIES: Dict[UserRole, RoleCapabilities] = {
    UserRole.SAFETY_OFFICER: _capabilities(Section.DRIVERS),
    UserRole.DISPATCHER: _capabilities(Section.TRIPS),
    UserRole.FINANCIAL_ANALYST: _capabilities(Section.EXPENSES, Section.ANALYTICS),
    # Managers see a short menu but may open every section.
    UserRole.FLEET_MANAGER: _capabilities(
        Section.VEHICLES,
        Section.MAINTENANCE,
        extra=(Section.TRIPS, Section.DRIVERS, Section.EXPENSES, Section.ANALYTICS),
    ),
}

DEFAULT_ROLE = UserRole.FLEET_MANAGER


def resolve_role(role: Optional[str]) -> UserRole:
    """Map a stored or token role string to a UserRole, case-insensitively."""
    if not role:
        return DEFAULT_ROLE
    normalized = role.strip().lower()
    for candidate in UserRole:
        if candidate.value.lower() == normalized or candidate.name.lower() == normalized:
            return candidate
    return DEFAULT_ROLE


def capabilities_for(role: Optional[str]) -> RoleCapabilities:
    return ROLE_CAPABILITIES[resolve_role(role)]


def menu_for(role: Optional[str]) -> Tuple[MenuItem, ...]:
    return tuple(MENU_ITEMS[section] for section in capabilities_for(role).menu)
