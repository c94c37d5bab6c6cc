from enum import StrEnum


class TicketKind(StrEnum):
    FREE = 'free'
    PAID = 'paid'
    DONATION = 'donation'
