# API Route Constants

# Base API
API_BASE = '/api'

# User routes
USER_BASE = f'{API_BASE}/user'
USER_ME = f'{USER_BASE}/me'

# Venue routes
VENUE_BASE = f'{API_BASE}/venue'
VENUE_CREATE = VENUE_BASE
VENUE_LIST = VENUE_BASE
VENUE_GET = f'{VENUE_BASE}/{{venue_id}}'
VENUE_UPDATE = f'{VENUE_BASE}/{{venue_id}}'
VENUE_DELETE = f'{VENUE_BASE}/{{venue_id}}'

# Event routes
EVENT_BASE = f'{API_BASE}/event'
EVENT_CREATE = EVENT_BASE
EVENT_LIST = EVENT_BASE
EVENT_MINE = f'{EVENT_BASE}/mine'
EVENT_GET = f'{EVENT_BASE}/{{event_id}}'
EVENT_UPDATE = f'{EVENT_BASE}/{{event_id}}'
EVENT_DELETE = f'{EVENT_BASE}/{{event_id}}'
EVENT_TICKET_TYPE_CREATE = f'{EVENT_BASE}/{{event_id}}/ticket_type'
EVENT_REGISTRATIONS = f'{EVENT_BASE}/{{event_id}}/registrations'

# Registration routes
REGISTRATION_BASE = f'{API_BASE}/registration'
REGISTRATION_CREATE = REGISTRATION_BASE
REGISTRATION_MINE = f'{REGISTRATION_BASE}/mine'
REGISTRATION_ROLL = f'{REGISTRATION_BASE}/roll'
REGISTRATION_CANCEL = f'{REGISTRATION_BASE}/{{registration_id}}/cancel'

# Dashboard routes
DASHBOARD_BASE = f'{API_BASE}/dashboard'
DASHBOARD_STATS = f'{DASHBOARD_BASE}/stats'
