import pytest

from app.domain.errors import ResourceConflict, ResourceNotFound
from app.infrastructure.db.pool import get_pool
from app.infrastructure.db.resources_repo import (
    PgAnnouncementsController,
    PgResourceController,
)

pytest_plugins = ["tests.integration.db_fixtures"]
pytestmark = pytest.mark.integration

ANNOUNCEMENT = {
    "title": "Casa",
    "price": 500000,
    "useful_area": 120,
    "gross_area": 150,
    "construction_year": 1998,
    "detailed_description": "Quintal grande",
    "zipcode": "01001-000",
    "address": "Rua A",
    "address_number": "1",
    "neighborhood": "Centro",
    "city": "Sao Paulo",
}


@pytest.fixture()
def controllers(pool):
    characteristics = PgResourceController(
        get_pool, table="characteristics", columns=("name", "active")
    )
    property_types = PgResourceController(
        get_pool, table="property_types", columns=("name", "icon", "active")
    )
    announcements = PgAnnouncementsController(
        get_pool,
        table="announcements",
        columns=("property_type_id", "active", *ANNOUNCEMENT),
    )
    contacts = PgResourceController(
        get_pool,
        table="announcement_contacts",
        columns=("announcement_id", "full_name", "email", "phone", "has_whatsapp"),
    )
    return characteristics, property_types, announcements, contacts


async def test_crud_round_trip(controllers):
    characteristics, *_ = controllers

    created = await characteristics.create({"name": "Piscina", "active": True})
    assert created["name"] == "Piscina"
    assert (await characteristics.get_by_id(created["id"]))["id"] == created["id"]

    updated = await characteristics.update(created["id"], {"active": False})
    assert updated["active"] is False
    assert updated["updated_at"] >= created["updated_at"]

    assert [r["id"] for r in await characteristics.get_all()] == [created["id"]]
    await characteristics.delete(created["id"])
    with pytest.raises(ResourceNotFound):
        await characteristics.get_by_id(created["id"])


async def test_dangling_reference_and_unique_scope(controllers):
    characteristics, property_types, announcements, contacts = controllers

    with pytest.raises(ResourceNotFound):
        await announcements.create({**ANNOUNCEMENT, "property_type_id": 999})

    ptype = await property_types.create({"name": "Casa", "icon": "https://x.io/c.svg"})
    ann = await announcements.create({**ANNOUNCEMENT, "property_type_id": ptype["id"]})
    scope = {"announcement_id": ann["id"]}
    contact = {"full_name": "Ana", "email": "a@example.com", "phone": "1", "has_whatsapp": True}

    await contacts.create(contact, scope=scope)
    with pytest.raises(ResourceConflict):
        await contacts.create(contact, scope=scope)

    updated = await contacts.update(None, {"phone": "2"}, scope=scope)
    assert updated["phone"] == "2"

    char = await characteristics.create({"name": "Varanda"})
    await announcements.link_characteristic(ann["id"], char["id"])
    await announcements.link_characteristic(ann["id"], char["id"])
    await announcements.unlink_characteristic(ann["id"], char["id"])
    with pytest.raises(ResourceNotFound):
        await announcements.unlink_characteristic(ann["id"], char["id"])
