"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.registration.app.command import (
    add_ticket_type_use_case,
    cancel_registration_use_case,
    create_event_use_case,
    delete_event_use_case,
    manage_venue_use_case,
    promote_waitlist_use_case,
    register_use_case,
    sync_profile_use_case,
    update_event_use_case,
)
from src.service.registration.app.query import (
    get_organizer_stats_use_case,
    list_events_use_case,
    list_registrations_use_case,
    list_venues_use_case,
)
from src.service.registration.driving_adapter.http_controller import user_controller


WIRE_MODULES: list[ModuleType] = [
    register_use_case,
    cancel_registration_use_case,
    promote_waitlist_use_case,
    manage_venue_use_case,
    create_event_use_case,
    update_event_use_case,
    delete_event_use_case,
    add_ticket_type_use_case,
    sync_profile_use_case,
    list_events_use_case,
    list_venues_use_case,
    list_registrations_use_case,
    get_organizer_stats_use_case,
    user_controller,
]
