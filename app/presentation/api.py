from fastapi import APIRouter

from app.presentation.authentication import (
    Authenticator,
    BearerAuthenticator,
    LocalAuthenticator,
)
from app.presentation.dependencies import Services
from app.presentation.gate import Handler, RouteGate
from app.presentation.handlers.resources import announcement_handlers, crud_handlers
from app.presentation.handlers.users import user_handlers
from app.presentation.policies import ROUTE_POLICIES, RoutePolicy
from app.presentation.routes.health import router as health_router
from app.presentation.validation import RequestValidator
from app.settings import Settings


def build_handlers(services: Services) -> dict[str, Handler]:
    return {
        **crud_handlers("characteristics", services.characteristics),
        **crud_handlers("property_types", services.property_types),
        **announcement_handlers(
            services.announcements,
            services.announcement_photos,
            services.announcement_contacts,
        ),
        **user_handlers(services.credentials, services.tokens),
    }


def build_gate(
    policy: RoutePolicy,
    handler: Handler,
    authenticators: dict[str, Authenticator],
) -> RouteGate:
    return RouteGate(
        policy.name,
        handler,
        validator=(
            RequestValidator(policy.rules, name=policy.name)
            if policy.rules is not None
            else None
        ),
        authenticator=authenticators[policy.auth] if policy.auth else None,
        status_code=policy.status_code,
    )


def build_api(
    services: Services,
    settings: Settings,
    policies: tuple[RoutePolicy, ...] = ROUTE_POLICIES,
) -> APIRouter:
    authenticators: dict[str, Authenticator] = {
        "bearer": BearerAuthenticator(services.tokens),
        "local": LocalAuthenticator(
            services.credentials,
            services.tokens,
            require_verified_email=settings.require_verified_email,
        ),
    }
    handlers = build_handlers(services)

    resources = APIRouter()
    for policy in policies:
        gate = build_gate(policy, handlers[policy.name], authenticators)
        resources.add_api_route(
            policy.path,
            gate.dispatch,
            methods=[policy.method],
            name=policy.name,
            status_code=policy.status_code,
            response_model=None,
        )

    api = APIRouter()
    api.include_router(health_router)
    api.include_router(resources, prefix=settings.api_prefix)
    return api
