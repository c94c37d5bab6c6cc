"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.service.registration.driven_adapter.ledger.capacity_ledger_impl import (
    CapacityLedgerImpl,
)
from src.service.registration.driven_adapter.repo.event_command_repo_impl import (
    EventCommandRepoImpl,
)
from src.service.registration.driven_adapter.repo.event_query_repo_impl import EventQueryRepoImpl
from src.service.registration.driven_adapter.repo.profile_repo_impl import ProfileRepoImpl
from src.service.registration.driven_adapter.repo.registration_command_repo_impl import (
    RegistrationCommandRepoImpl,
)
from src.service.registration.driven_adapter.repo.registration_query_repo_impl import (
    RegistrationQueryRepoImpl,
)
from src.service.registration.driven_adapter.repo.venue_repo_impl import VenueRepoImpl
from src.service.registration.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from config_service)
    database = providers.Singleton(Database, read_only=False)
    read_database = providers.Singleton(Database, read_only=True)

    # Capacity ledger (only writer of sold_count, always on the primary)
    capacity_ledger = providers.Singleton(
        CapacityLedgerImpl, session_factory=database.provided.session
    )

    # Repositories (stateless - use session_factory per-request)
    registration_command_repo = providers.Singleton(
        RegistrationCommandRepoImpl, session_factory=database.provided.session
    )
    event_command_repo = providers.Singleton(
        EventCommandRepoImpl, session_factory=database.provided.session
    )
    event_query_repo = providers.Singleton(
        EventQueryRepoImpl, session_factory=database.provided.session
    )
    venue_repo = providers.Singleton(VenueRepoImpl, session_factory=database.provided.session)
    profile_repo = providers.Singleton(ProfileRepoImpl, session_factory=database.provided.session)

    # Query facade (display only, may read from the replica)
    registration_query_repo = providers.Singleton(
        RegistrationQueryRepoImpl, session_factory=read_database.provided.session
    )

    # Auth service
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
