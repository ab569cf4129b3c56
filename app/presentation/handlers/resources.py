from __future__ import annotations

from app.domain.ports.resource_controller import (
    AnnouncementsControllerPort,
    Record,
    ResourceControllerPort,
)
from app.presentation.context import RequestContext
from app.presentation.gate import Handler
from app.schemas.responses import OkOut


def crud_handlers(prefix: str, controller: ResourceControllerPort) -> dict[str, Handler]:
    """create/list/get/update/delete for a top-level resource at `/<prefix>/{id}`."""

    async def create(ctx: RequestContext) -> Record:
        return await controller.create(ctx.body)

    async def list_all(ctx: RequestContext) -> list[Record]:
        return await controller.get_all()

    async def get(ctx: RequestContext) -> Record:
        return await controller.get_by_id(ctx.path_id("id"))

    async def update(ctx: RequestContext) -> Record:
        return await controller.update(ctx.path_id("id"), ctx.body)

    async def delete(ctx: RequestContext) -> OkOut:
        await controller.delete(ctx.path_id("id"))
        return OkOut()

    return {
        f"{prefix}.create": create,
        f"{prefix}.list": list_all,
        f"{prefix}.get": get,
        f"{prefix}.update": update,
        f"{prefix}.delete": delete,
    }


def announcement_handlers(
    announcements: AnnouncementsControllerPort,
    photos: ResourceControllerPort,
    contacts: ResourceControllerPort,
) -> dict[str, Handler]:
    handlers = crud_handlers("announcements", announcements)

    async def link_characteristic(ctx: RequestContext) -> Record:
        return await announcements.link_characteristic(
            ctx.path_id("id"), ctx.body["characteristic_id"]
        )

    async def unlink_characteristic(ctx: RequestContext) -> OkOut:
        await announcements.unlink_characteristic(
            ctx.path_id("announcement_id"), ctx.path_id("characteristic_id")
        )
        return OkOut()

    async def create_photo(ctx: RequestContext) -> Record:
        scope = {"announcement_id": ctx.path_id("announcement_id")}
        return await photos.create(ctx.body, scope=scope)

    async def delete_photo(ctx: RequestContext) -> OkOut:
        scope = {"announcement_id": ctx.path_id("announcement_id")}
        await photos.delete(ctx.path_id("announcement_photo_id"), scope=scope)
        return OkOut()

    async def create_contact(ctx: RequestContext) -> Record:
        scope = {"announcement_id": ctx.path_id("announcement_id")}
        return await contacts.create(ctx.body, scope=scope)

    async def update_contact(ctx: RequestContext) -> Record:
        scope = {"announcement_id": ctx.path_id("announcement_id")}
        return await contacts.update(None, ctx.body, scope=scope)

    handlers.update(
        {
            "announcements.link_characteristic": link_characteristic,
            "announcements.unlink_characteristic": unlink_characteristic,
            "announcement_photos.create": create_photo,
            "announcement_photos.delete": delete_photo,
            "announcement_contacts.create": create_contact,
            "announcement_contacts.update": update_contact,
        }
    )
    return handlers
