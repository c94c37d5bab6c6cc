"""
HTTP tests for the registration service API

Test Focus:
1. Bearer token identity and role checks (401 / 403)
2. Organizer catalog flow: venue -> event -> ticket types -> rolls -> dashboard
3. Participant flow: browse -> register -> list -> cancel, with error mapping
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import Any

from fastapi.testclient import TestClient
import pytest

from src.platform.config.core_setting import settings
from src.platform.constant.route_constant import (
    DASHBOARD_STATS,
    EVENT_BASE,
    EVENT_DELETE,
    EVENT_GET,
    EVENT_MINE,
    EVENT_REGISTRATIONS,
    EVENT_TICKET_TYPE_CREATE,
    EVENT_UPDATE,
    REGISTRATION_BASE,
    REGISTRATION_CANCEL,
    REGISTRATION_MINE,
    REGISTRATION_ROLL,
    USER_ME,
    VENUE_BASE,
    VENUE_DELETE,
    VENUE_UPDATE,
)
from src.service.registration.domain.entity.user_entity import UserEntity, UserRole


AuthHeaders = Callable[[UserEntity], dict[str, str]]


def _event_payload(start: datetime, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        'title': 'Python Meetup',
        'description': 'Monthly talks and pizza',
        'venue_name': 'Community Hall',
        'start_ts': start.isoformat(),
        'end_ts': (start + timedelta(hours=3)).isoformat(),
        'ticket_types': [{'name': 'General', 'capacity': 2}],
    }
    payload.update(overrides)
    return payload


@pytest.mark.integration
class TestPlatformEndpoints:
    def test_health(self, client: TestClient) -> None:
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_metrics_exposes_registration_counters(self, client: TestClient) -> None:
        response = client.get('/metrics')

        assert response.status_code == 200
        assert 'registration_requests' in response.text
        assert 'capacity_ledger_operations' in response.text

    def test_openapi_carries_request_examples(self, client: TestClient) -> None:
        response = client.get('/openapi.json')

        assert response.status_code == 200
        schemas = response.json()['components']['schemas']
        assert schemas['VenueCreateRequest']['example']['capacity'] == 120
        assert schemas['RegistrationCreateRequest']['example']['ticket_type_id'] == 1


@pytest.mark.integration
class TestIdentity:
    def test_me_requires_token(self, client: TestClient) -> None:
        response = client.get(USER_ME)

        assert response.status_code == 401

    def test_me_rejects_garbage_token(self, client: TestClient) -> None:
        response = client.get(USER_ME, headers={'Authorization': 'Bearer not-a-jwt'})

        assert response.status_code == 401

    def test_me_returns_token_identity(
        self, client: TestClient, participant: UserEntity, auth_headers: AuthHeaders
    ) -> None:
        response = client.get(USER_ME, headers=auth_headers(participant))

        assert response.status_code == 200
        body = response.json()
        assert body['id'] == str(participant.id)
        assert body['email'] == participant.email
        assert body['role'] == 'participant'

    def test_cookie_token_is_accepted(
        self, client: TestClient, organizer: UserEntity, auth_headers: AuthHeaders
    ) -> None:
        token = auth_headers(organizer)['Authorization'].split(' ', 1)[1]
        client.cookies.set(settings.AUTH_COOKIE_NAME, token)

        response = client.get(USER_ME)

        assert response.status_code == 200
        assert response.json()['role'] == 'organizer'


@pytest.mark.integration
class TestOrganizerCatalog:
    def test_participant_cannot_manage_venues(
        self, client: TestClient, participant: UserEntity, auth_headers: AuthHeaders
    ) -> None:
        response = client.post(
            VENUE_BASE, json={'name': 'Hall', 'capacity': 10}, headers=auth_headers(participant)
        )

        assert response.status_code == 403

    def test_venue_lifecycle(
        self, client: TestClient, organizer: UserEntity, auth_headers: AuthHeaders
    ) -> None:
        """
        Given: An organizer
        When: They create, list, update and delete a venue
        Then: Each step succeeds and the venue is gone at the end
        """
        headers = auth_headers(organizer)

        created = client.post(
            VENUE_BASE, json={'name': 'Main Hall', 'capacity': 150}, headers=headers
        )
        assert created.status_code == 201
        venue_id = created.json()['id']

        listed = client.get(VENUE_BASE, headers=headers)
        assert [v['id'] for v in listed.json()] == [venue_id]

        updated = client.put(
            VENUE_UPDATE.format(venue_id=venue_id), json={'capacity': 180}, headers=headers
        )
        assert updated.status_code == 200
        assert updated.json()['capacity'] == 180

        deleted = client.delete(VENUE_DELETE.format(venue_id=venue_id), headers=headers)
        assert deleted.status_code == 204
        assert client.get(VENUE_BASE, headers=headers).json() == []

    def test_other_organizer_cannot_update_venue(
        self,
        client: TestClient,
        organizer: UserEntity,
        make_user: Callable[..., UserEntity],
        auth_headers: AuthHeaders,
    ) -> None:
        created = client.post(
            VENUE_BASE, json={'name': 'Main Hall', 'capacity': 150}, headers=auth_headers(organizer)
        )

        response = client.put(
            VENUE_UPDATE.format(venue_id=created.json()['id']),
            json={'capacity': 1},
            headers=auth_headers(make_user(UserRole.ORGANIZER)),
        )

        assert response.status_code == 403

    def test_event_at_venue_gets_default_ticket(
        self,
        client: TestClient,
        organizer: UserEntity,
        auth_headers: AuthHeaders,
        next_week: datetime,
    ) -> None:
        headers = auth_headers(organizer)
        venue = client.post(
            VENUE_BASE, json={'name': 'Studio', 'capacity': 40}, headers=headers
        ).json()

        response = client.post(
            EVENT_BASE,
            json=_event_payload(next_week, venue_id=venue['id'], venue_name=None, ticket_types=None),
            headers=headers,
        )

        assert response.status_code == 201
        event = response.json()
        assert event['venue_name'] == 'Studio'
        assert [(t['name'], t['kind'], t['capacity']) for t in event['ticket_types']] == [
            ('Standard', 'free', 40)
        ]

    def test_invalid_event_window_is_rejected(
        self,
        client: TestClient,
        organizer: UserEntity,
        auth_headers: AuthHeaders,
        next_week: datetime,
    ) -> None:
        response = client.post(
            EVENT_BASE,
            json=_event_payload(next_week, end_ts=(next_week - timedelta(hours=1)).isoformat()),
            headers=auth_headers(organizer),
        )

        assert response.status_code == 400
        assert 'End time must be after start time' in response.json()['detail']

    def test_missing_fields_are_unprocessable(
        self, client: TestClient, organizer: UserEntity, auth_headers: AuthHeaders
    ) -> None:
        response = client.post(EVENT_BASE, json={'title': 'x'}, headers=auth_headers(organizer))

        assert response.status_code == 422

    def test_update_add_ticket_type_and_list_mine(
        self,
        client: TestClient,
        organizer: UserEntity,
        auth_headers: AuthHeaders,
        next_week: datetime,
    ) -> None:
        headers = auth_headers(organizer)
        event_id = client.post(EVENT_BASE, json=_event_payload(next_week), headers=headers).json()[
            'id'
        ]

        renamed = client.patch(
            EVENT_UPDATE.format(event_id=event_id), json={'title': 'PyData Night'}, headers=headers
        )
        added = client.post(
            EVENT_TICKET_TYPE_CREATE.format(event_id=event_id),
            json={'name': 'Supporter', 'kind': 'donation', 'price': 1500, 'capacity': 5},
            headers=headers,
        )
        mine = client.get(EVENT_MINE, headers=headers)

        assert renamed.status_code == 200
        assert renamed.json()['title'] == 'PyData Night'
        assert added.status_code == 201
        assert added.json()['kind'] == 'donation'
        assert [t['name'] for t in mine.json()[0]['ticket_types']] == ['General', 'Supporter']


@pytest.mark.integration
class TestParticipantRegistration:
    @pytest.fixture
    def event(
        self,
        client: TestClient,
        organizer: UserEntity,
        auth_headers: AuthHeaders,
        next_week: datetime,
    ) -> dict[str, Any]:
        response = client.post(
            EVENT_BASE,
            json=_event_payload(
                next_week,
                ticket_types=[
                    {'name': 'General', 'capacity': 1},
                    {'name': 'Workshop', 'capacity': 1, 'waitlist_enabled': True},
                ],
            ),
            headers=auth_headers(organizer),
        )
        assert response.status_code == 201
        return response.json()

    def _register(
        self,
        client: TestClient,
        user: UserEntity,
        auth_headers: AuthHeaders,
        event: dict[str, Any],
        ticket_index: int = 0,
        extra_headers: dict[str, str] | None = None,
    ) -> Any:
        return client.post(
            REGISTRATION_BASE,
            json={'event_id': event['id'], 'ticket_type_id': event['ticket_types'][ticket_index]['id']},
            headers={**auth_headers(user), **(extra_headers or {})},
        )

    def test_full_registration_flow(
        self,
        client: TestClient,
        event: dict[str, Any],
        organizer: UserEntity,
        participant: UserEntity,
        auth_headers: AuthHeaders,
    ) -> None:
        """
        Core test: End-to-end registration

        Given: An open event with a single General seat
        When: A participant browses, registers, lists and cancels
        Then:
          - The event is listed as open with one seat remaining
          - Registration is confirmed and the seat is gone
          - The participant and the organizer both see it in their rolls
          - Cancelling frees the seat again
        """
        # Browse
        open_events = client.get(EVENT_BASE).json()
        assert [e['id'] for e in open_events] == [event['id']]
        assert open_events[0]['ticket_types'][0]['remaining'] == 1

        # Register
        registered = self._register(client, participant, auth_headers, event)
        assert registered.status_code == 201
        registration = registered.json()
        assert registration['status'] == 'confirmed'
        seat = client.get(EVENT_GET.format(event_id=event['id'])).json()['ticket_types'][0]
        assert (seat['sold_count'], seat['remaining']) == (1, 0)

        # Rolls
        mine = client.get(REGISTRATION_MINE, headers=auth_headers(participant)).json()
        assert mine[0]['event_title'] == 'Python Meetup'
        assert mine[0]['participant_name'] == participant.display_name
        roll = client.get(
            EVENT_REGISTRATIONS.format(event_id=event['id']), headers=auth_headers(organizer)
        ).json()
        assert [r['id'] for r in roll] == [registration['id']]
        assert len(client.get(REGISTRATION_ROLL, headers=auth_headers(organizer)).json()) == 1

        # Cancel
        cancelled = client.patch(
            REGISTRATION_CANCEL.format(registration_id=registration['id']),
            headers=auth_headers(participant),
        )
        assert cancelled.status_code == 200
        assert cancelled.json()['status'] == 'cancelled'
        seat = client.get(EVENT_GET.format(event_id=event['id'])).json()['ticket_types'][0]
        assert seat['sold_count'] == 0

    def test_duplicate_and_sold_out_map_to_conflict(
        self,
        client: TestClient,
        event: dict[str, Any],
        participant: UserEntity,
        make_user: Callable[..., UserEntity],
        auth_headers: AuthHeaders,
    ) -> None:
        assert self._register(client, participant, auth_headers, event).status_code == 201

        duplicate = self._register(client, participant, auth_headers, event)
        sold_out = self._register(client, make_user(), auth_headers, event)

        assert duplicate.status_code == 409
        assert 'already registered' in duplicate.json()['detail']
        assert sold_out.status_code == 409
        assert 'sold out' in sold_out.json()['detail']

    def test_waitlist_and_promotion_over_http(
        self,
        client: TestClient,
        event: dict[str, Any],
        participant: UserEntity,
        make_user: Callable[..., UserEntity],
        auth_headers: AuthHeaders,
    ) -> None:
        """
        Given: The Workshop ticket (capacity 1, waitlist on) is taken
        When: A second participant registers, then the first cancels
        Then: The second is waitlisted, then promoted to confirmed
        """
        holder = self._register(client, participant, auth_headers, event, ticket_index=1).json()
        waiting_user = make_user()
        waiting = self._register(client, waiting_user, auth_headers, event, ticket_index=1).json()
        assert waiting['status'] == 'waitlist'

        client.patch(
            REGISTRATION_CANCEL.format(registration_id=holder['id']),
            headers=auth_headers(participant),
        )

        mine = client.get(REGISTRATION_MINE, headers=auth_headers(waiting_user)).json()
        assert [(r['id'], r['status']) for r in mine] == [(waiting['id'], 'confirmed')]

    def test_idempotency_key_header_replays(
        self,
        client: TestClient,
        event: dict[str, Any],
        participant: UserEntity,
        auth_headers: AuthHeaders,
    ) -> None:
        first = self._register(
            client, participant, auth_headers, event, extra_headers={'Idempotency-Key': 'form-1'}
        )
        retry = self._register(
            client, participant, auth_headers, event, extra_headers={'Idempotency-Key': 'form-1'}
        )

        assert first.status_code == retry.status_code == 201
        assert retry.json()['id'] == first.json()['id']

    def test_organizer_cannot_register(
        self,
        client: TestClient,
        event: dict[str, Any],
        organizer: UserEntity,
        auth_headers: AuthHeaders,
    ) -> None:
        assert self._register(client, organizer, auth_headers, event).status_code == 403

    def test_unknown_event_is_not_found(
        self, client: TestClient, participant: UserEntity, auth_headers: AuthHeaders
    ) -> None:
        response = client.post(
            REGISTRATION_BASE,
            json={'event_id': 999, 'ticket_type_id': 1},
            headers=auth_headers(participant),
        )

        assert response.status_code == 404

    def test_stranger_cannot_cancel(
        self,
        client: TestClient,
        event: dict[str, Any],
        participant: UserEntity,
        make_user: Callable[..., UserEntity],
        auth_headers: AuthHeaders,
    ) -> None:
        registration = self._register(client, participant, auth_headers, event).json()

        response = client.patch(
            REGISTRATION_CANCEL.format(registration_id=registration['id']),
            headers=auth_headers(make_user()),
        )

        assert response.status_code == 403

    def test_delete_event_reports_cancelled_registrations_and_stats(
        self,
        client: TestClient,
        event: dict[str, Any],
        organizer: UserEntity,
        participant: UserEntity,
        auth_headers: AuthHeaders,
    ) -> None:
        self._register(client, participant, auth_headers, event)
        stats = client.get(DASHBOARD_STATS, headers=auth_headers(organizer)).json()
        assert stats == {
            'total_events': 1,
            'total_venues': 0,
            'total_registrations': 1,
            'upcoming_events': 1,
        }

        deleted = client.delete(
            EVENT_DELETE.format(event_id=event['id']), headers=auth_headers(organizer)
        )

        assert deleted.status_code == 200
        assert deleted.json() == {'id': event['id'], 'cancelled_registrations': 1}
        assert client.get(EVENT_GET.format(event_id=event['id'])).status_code == 404
        mine = client.get(REGISTRATION_MINE, headers=auth_headers(participant)).json()
        assert [r['status'] for r in mine] == ['cancelled']
