from enum import StrEnum


class RegistrationStatus(StrEnum):
    CONFIRMED = 'confirmed'
    CANCELLED = 'cancelled'
    WAITLIST = 'waitlist'


# Statuses covered by the one-active-registration-per-ticket-type index
ACTIVE_REGISTRATION_STATUSES: frozenset[RegistrationStatus] = frozenset(
    {RegistrationStatus.CONFIRMED, RegistrationStatus.WAITLIST}
)
