from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from starlette.datastructures import Headers

from app.domain.entities import Principal
from app.domain.errors import ResourceNotFound


@dataclass
class RequestContext:
    """What a gated handler gets to see of the request."""

    headers: Headers
    path_params: Mapping[str, str] = field(default_factory=dict)
    query_params: Mapping[str, str] = field(default_factory=dict)
    body: Optional[dict[str, Any]] = None
    principal: Optional[Principal] = None

    def path_id(self, name: str) -> int:
        """A path id that is not a positive integer cannot name a record."""
        raw = self.path_params.get(name, "")
        if not raw.isdigit() or int(raw) <= 0:
            raise ResourceNotFound(f"{name} not found")
        return int(raw)

    def require_principal(self) -> Principal:
        if self.principal is None:
            raise RuntimeError("handler needs an authenticated route")
        return self.principal
