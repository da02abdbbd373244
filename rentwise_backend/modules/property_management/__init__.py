"""Property management module for RentWise.

Properties, units and the occupancy state machine. Routers live in
``routers`` and are mounted by the application.
"""

from .models import Availability, Property, PropertyType, Unit

__all__ = [
    # Models
    "Property",
    "Unit",
    # Enums
    "Availability",
    "PropertyType",
]
