from __future__ import annotations

from dataclasses import dataclass

from app.application.credential_store import CredentialStore
from app.domain.ports.resource_controller import (
    AnnouncementsControllerPort,
    ResourceControllerPort,
)
from app.domain.ports.token_service import TokenServicePort
from app.infrastructure.db.pool import get_pool
from app.infrastructure.db.resources_repo import (
    PgAnnouncementsController,
    PgResourceController,
)
from app.infrastructure.db.uow import PgUnitOfWork
from app.infrastructure.memory.tokens import InMemoryTokenService
from app.infrastructure.redis_cache.pool import get_redis
from app.infrastructure.redis_cache.tokens import RedisTokenService
from app.infrastructure.security.password import hash_password, verify_password
from app.settings import Settings


@dataclass
class Services:
    """Everything the routes need, built once and passed in explicitly."""

    credentials: CredentialStore
    tokens: TokenServicePort
    characteristics: ResourceControllerPort
    property_types: ResourceControllerPort
    announcements: AnnouncementsControllerPort
    announcement_photos: ResourceControllerPort
    announcement_contacts: ResourceControllerPort


def build_token_service(settings: Settings) -> TokenServicePort:
    if settings.token_backend == "memory":
        return InMemoryTokenService(ttl_seconds=settings.session_ttl_seconds)
    return RedisTokenService(get_redis(), ttl_seconds=settings.session_ttl_seconds)


def build_services(settings: Settings) -> Services:
    # get_pool is passed, not called: the pool is opened later, in lifespan()
    credentials = CredentialStore(
        lambda: PgUnitOfWork(get_pool()),
        hash_password=hash_password,
        verify_password=verify_password,
        code_digits=settings.verification_code_digits,
        resend_throttle_seconds=settings.resend_throttle_seconds,
    )
    return Services(
        credentials=credentials,
        tokens=build_token_service(settings),
        characteristics=PgResourceController(
            get_pool, table="characteristics", columns=("name", "active")
        ),
        property_types=PgResourceController(
            get_pool, table="property_types", columns=("name", "icon", "active")
        ),
        announcements=PgAnnouncementsController(
            get_pool,
            table="announcements",
            columns=(
                "title",
                "property_type_id",
                "price",
                "useful_area",
                "gross_area",
                "construction_year",
                "detailed_description",
                "zipcode",
                "address",
                "address_number",
                "neighborhood",
                "city",
                "active",
            ),
        ),
        announcement_photos=PgResourceController(
            get_pool, table="announcement_photos", columns=("announcement_id", "url")
        ),
        announcement_contacts=PgResourceController(
            get_pool,
            table="announcement_contacts",
            columns=("announcement_id", "full_name", "email", "phone", "has_whatsapp"),
        ),
    )
