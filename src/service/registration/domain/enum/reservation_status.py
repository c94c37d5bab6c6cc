from enum import StrEnum


class ReservationStatus(StrEnum):
    HELD = 'held'
    RELEASED = 'released'
