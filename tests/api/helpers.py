import re

from app.infrastructure.memory.tokens import InMemoryTokenService
from app.presentation.dependencies import Services
from app.presentation.policies import RoutePolicy
from app.presentation.validation import FieldRule
from tests.fakes import FakeAnnouncementsController, FakeResourceController

API = "/api-imovel-finder"

SIGNUP = {
    "email": "ana@example.com",
    "phone_number": "+5511999990000",
    "password": "s3cret",
    "full_name": "Ana Souza",
    "verification_type": "email",
}

ANNOUNCEMENT = {
    "title": "Apartamento 2 quartos",
    "price": 350000,
    "useful_area": 62.5,
    "gross_area": 70,
    "construction_year": 2012,
    "detailed_description": "Perto do metro",
    "zipcode": "01001-000",
    "address": "Rua Direita",
    "address_number": "100",
    "neighborhood": "Centro",
    "city": "Sao Paulo",
}

CONTACT = {
    "full_name": "Ana Souza",
    "email": "ana@example.com",
    "phone": "11999990000",
    "has_whatsapp": True,
}


def sample_value(rule: FieldRule):
    if rule.choices:
        return rule.choices[0]
    if rule.kind == "boolean":
        return True
    if rule.kind in ("number", "integer"):
        return 1
    if rule.format == "email":
        return "someone@example.com"
    if rule.format == "uri":
        return "https://cdn.example.com/a.png"
    return "x"


def sample_body(policy: RoutePolicy) -> dict | None:
    """A body that passes the route's rules."""
    if policy.rules is None:
        return None
    return {rule.name: sample_value(rule) for rule in policy.rules}


def concrete_path(policy: RoutePolicy, value: str = "1") -> str:
    return API + re.sub(r"\{[^}]+\}", value, policy.path)


def build_services(credentials) -> Services:
    """Route-level services over in-memory fakes."""
    characteristics = FakeResourceController()
    property_types = FakeResourceController()
    announcements = FakeAnnouncementsController(
        characteristics=characteristics,
        references={"property_type_id": property_types},
    )
    return Services(
        credentials=credentials,
        tokens=InMemoryTokenService(ttl_seconds=3600),
        characteristics=characteristics,
        property_types=property_types,
        announcements=announcements,
        announcement_photos=FakeResourceController(
            references={"announcement_id": announcements}
        ),
        announcement_contacts=FakeResourceController(
            references={"announcement_id": announcements},
            unique=("announcement_id",),
        ),
    )
