"""Field rules for every request body, one tuple per route."""

from dataclasses import replace

from app.presentation.validation import FieldRule

# USERS
USER_CREATE = (
    FieldRule("email", required=True, format="email", max_length=100),
    FieldRule("phone_number", required=True, max_length=20),
    FieldRule("password", required=True, max_length=50),
    FieldRule("full_name", required=True, max_length=100),
    FieldRule("verification_type", required=True, choices=("email",)),
)
USER_VERIFY_EMAIL = (FieldRule("code", kind="integer", required=True, min_value=0),)
USER_UPDATE = (
    FieldRule("email", format="email", max_length=100),
    FieldRule("password", max_length=50),
    FieldRule("full_name", max_length=100),
)

# CHARACTERISTICS
CHARACTERISTIC_CREATE = (
    FieldRule("name", required=True),
    FieldRule("active", kind="boolean", default=True),
)
CHARACTERISTIC_UPDATE = (
    FieldRule("name"),
    FieldRule("active", kind="boolean"),
)

# PROPERTY TYPES
PROPERTY_TYPE_CREATE = (
    FieldRule("name", required=True),
    FieldRule("icon", required=True, format="uri"),
    FieldRule("active", kind="boolean", default=True),
)
PROPERTY_TYPE_UPDATE = (
    FieldRule("name"),
    FieldRule("icon", format="uri"),
    FieldRule("active", kind="boolean"),
)

# ANNOUNCEMENTS
_ANNOUNCEMENT_FIELDS = (
    FieldRule("title", max_length=70),
    FieldRule("property_type_id", kind="integer"),
    FieldRule("price", kind="number"),
    FieldRule("useful_area", kind="number"),
    FieldRule("gross_area", kind="number"),
    FieldRule("construction_year", kind="integer"),
    FieldRule("detailed_description"),
    FieldRule("zipcode", max_length=15),
    FieldRule("address", max_length=150),
    FieldRule("address_number", max_length=20),
    FieldRule("neighborhood", max_length=50),
    FieldRule("city", max_length=50),
)
ANNOUNCEMENT_CREATE = tuple(
    replace(rule, required=True) for rule in _ANNOUNCEMENT_FIELDS
) + (FieldRule("active", kind="boolean", default=True),)
ANNOUNCEMENT_UPDATE = _ANNOUNCEMENT_FIELDS + (FieldRule("active", kind="boolean"),)
ANNOUNCEMENT_LINK_CHARACTERISTIC = (
    FieldRule("characteristic_id", kind="integer", required=True),
)

# ANNOUNCEMENT PHOTOS
ANNOUNCEMENT_PHOTO_CREATE = (FieldRule("url", required=True, format="uri"),)

# ANNOUNCEMENT CONTACTS
_CONTACT_FIELDS = (
    FieldRule("full_name", max_length=60),
    FieldRule("email", format="email", max_length=100),
    FieldRule("phone", max_length=14),
    FieldRule("has_whatsapp", kind="boolean"),
)
ANNOUNCEMENT_CONTACT_CREATE = tuple(
    replace(rule, required=True) for rule in _CONTACT_FIELDS
)
ANNOUNCEMENT_CONTACT_UPDATE = _CONTACT_FIELDS
