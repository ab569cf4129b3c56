"""
Access policy for every endpoint: which body rules run, which authentication
strategy runs, and what status a success answers with. Nothing else decides
whether a route is public.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

from app.presentation.validation import FieldRule
from app.schemas import requests as rules

AuthStrategy = Literal["bearer", "local"]


@dataclass(frozen=True)
class RoutePolicy:
    name: str
    method: str
    path: str
    rules: Optional[tuple[FieldRule, ...]] = None
    auth: Optional[AuthStrategy] = None
    status_code: int = 200


ROUTE_POLICIES: tuple[RoutePolicy, ...] = (
    # CHARACTERISTICS
    RoutePolicy("characteristics.create", "POST", "/characteristics", rules.CHARACTERISTIC_CREATE, "bearer", 201),
    RoutePolicy("characteristics.list", "GET", "/characteristics", auth="bearer"),
    RoutePolicy("characteristics.get", "GET", "/characteristics/{id}", auth="bearer"),
    RoutePolicy("characteristics.delete", "DELETE", "/characteristics/{id}", auth="bearer"),
    RoutePolicy("characteristics.update", "PATCH", "/characteristics/{id}", rules.CHARACTERISTIC_UPDATE, "bearer"),
    # PROPERTY TYPES
    RoutePolicy("property_types.create", "POST", "/property-types", rules.PROPERTY_TYPE_CREATE, "bearer", 201),
    RoutePolicy("property_types.list", "GET", "/property-types", auth="bearer"),
    RoutePolicy("property_types.get", "GET", "/property-types/{id}", auth="bearer"),
    RoutePolicy("property_types.delete", "DELETE", "/property-types/{id}", auth="bearer"),
    RoutePolicy("property_types.update", "PATCH", "/property-types/{id}", rules.PROPERTY_TYPE_UPDATE, "bearer"),
    # ANNOUNCEMENTS
    RoutePolicy("announcements.create", "POST", "/announcements", rules.ANNOUNCEMENT_CREATE, "bearer", 201),
    RoutePolicy("announcements.update", "PATCH", "/announcements/{id}", rules.ANNOUNCEMENT_UPDATE, "bearer"),
    RoutePolicy("announcements.get", "GET", "/announcements/{id}", auth="bearer"),
    RoutePolicy("announcements.list", "GET", "/announcements", auth="bearer"),
    RoutePolicy("announcements.delete", "DELETE", "/announcements/{id}", auth="bearer"),
    RoutePolicy(
        "announcements.link_characteristic",
        "POST",
        "/announcements/{id}/characteristic",
        rules.ANNOUNCEMENT_LINK_CHARACTERISTIC,
        "bearer",
        201,
    ),
    RoutePolicy(
        "announcements.unlink_characteristic",
        "DELETE",
        "/announcements/{announcement_id}/characteristic/{characteristic_id}",
        auth="bearer",
    ),
    # ANNOUNCEMENT PHOTOS
    RoutePolicy(
        "announcement_photos.create",
        "POST",
        "/announcements/{announcement_id}/photo",
        rules.ANNOUNCEMENT_PHOTO_CREATE,
        "bearer",
        201,
    ),
    RoutePolicy(
        "announcement_photos.delete",
        "DELETE",
        "/announcements/{announcement_id}/photo/{announcement_photo_id}",
        auth="bearer",
    ),
    # ANNOUNCEMENT CONTACTS
    RoutePolicy(
        "announcement_contacts.create",
        "POST",
        "/announcements/{announcement_id}/contact",
        rules.ANNOUNCEMENT_CONTACT_CREATE,
        "bearer",
        201,
    ),
    RoutePolicy(
        "announcement_contacts.update",
        "PATCH",
        "/announcements/{announcement_id}/contact",
        rules.ANNOUNCEMENT_CONTACT_UPDATE,
        "bearer",
    ),
    # USERS
    RoutePolicy("users.create", "POST", "/users", rules.USER_CREATE, status_code=201),
    RoutePolicy("users.login", "POST", "/users/login", auth="local"),
    RoutePolicy("users.logout", "POST", "/users/logout/{id}", auth="bearer"),
    RoutePolicy("users.verify_email", "POST", "/users/{id}/verify-email", rules.USER_VERIFY_EMAIL),
    RoutePolicy("users.resend_verification", "POST", "/users/{id}/verification-code", status_code=202),
    RoutePolicy("users.update", "PATCH", "/users/{id}", rules.USER_UPDATE, "bearer"),
    RoutePolicy("users.get", "GET", "/users/{id}", auth="bearer"),
)
