from pydantic import BaseModel, ConfigDict


class OrganizerStatsResponse(BaseModel):
    total_events: int
    total_venues: int
    total_registrations: int
    upcoming_events: int

    model_config = ConfigDict(
        json_schema_extra={
            'example': {
                'total_events': 4,
                'total_venues': 2,
                'total_registrations': 57,
                'upcoming_events': 3,
            }
        }
    )
