from __future__ import annotations

from app.application.credential_store import CredentialStore
from app.domain import services as domain_services
from app.domain.errors import InvalidOrExpiredToken
from app.domain.ports.token_service import TokenServicePort
from app.presentation.context import RequestContext
from app.presentation.gate import Handler
from app.schemas.responses import AcceptedOut, OkOut, TokenOut, UserOut


def user_handlers(
    credentials: CredentialStore, tokens: TokenServicePort
) -> dict[str, Handler]:
    async def create(ctx: RequestContext) -> UserOut:
        body = ctx.body
        user = await credentials.create_user(
            email=body["email"],
            phone_number=body["phone_number"],
            password=body["password"],
            full_name=body["full_name"],
            verification_type=body["verification_type"],
        )
        return UserOut.from_user(user)

    async def login(ctx: RequestContext) -> TokenOut:
        # the local strategy already issued the token
        principal = ctx.require_principal()
        return TokenOut(token=principal.token, user_id=principal.user_id)

    async def logout(ctx: RequestContext) -> OkOut:
        principal = ctx.require_principal()
        if not await tokens.revoke(principal.token):
            # a concurrent logout got there first
            raise InvalidOrExpiredToken()
        return OkOut()

    async def verify_email(ctx: RequestContext) -> UserOut:
        code = domain_services.normalize_code(
            ctx.body["code"], credentials.code_digits
        )
        user = await credentials.consume_verification_code(ctx.path_id("id"), code)
        return UserOut.from_user(user)

    async def resend_verification(ctx: RequestContext) -> AcceptedOut:
        await credentials.issue_verification_code(ctx.path_id("id"))
        return AcceptedOut()

    async def update(ctx: RequestContext) -> UserOut:
        user = await credentials.update_profile(ctx.path_id("id"), ctx.body)
        return UserOut.from_user(user)

    async def get(ctx: RequestContext) -> UserOut:
        user = await credentials.find_by_id(ctx.path_id("id"))
        return UserOut.from_user(user)

    return {
        "users.create": create,
        "users.login": login,
        "users.logout": logout,
        "users.verify_email": verify_email,
        "users.resend_verification": resend_verification,
        "users.update": update,
        "users.get": get,
    }
