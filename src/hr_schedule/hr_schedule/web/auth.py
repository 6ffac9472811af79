"""Capability boundary for the HTTP layer.

Identity is established upstream (gateway / SSO). Handlers ask the injected
``CapabilityChecker`` whether the current actor may do something and then
hand only the actor id to the core services.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol

from flask import request

from ..core.exceptions import AuthorizationError

CLOCK_MANAGE = "system_clock.manage"
SCHEDULES_MANAGE = "schedules.manage"
SCHEDULES_VIEW = "schedules.view"
REQUESTS_SUBMIT_FOR_OTHERS = "requests.submit_for_others"
REQUESTS_DECIDE = "requests.decide"
REQUESTS_ADMIN = "requests.admin"
REQUESTS_VIEW_ALL = "requests.view_all"


@dataclass(frozen=True)
class Actor:
    actor_id: int
    capabilities: FrozenSet[str] = field(default_factory=frozenset)


class CapabilityChecker(Protocol):
    def current_actor(self) -> Optional[Actor]:
        raise NotImplementedError

    def allows(self, actor: Actor, capability: str) -> bool:
        raise NotImplementedError


class HeaderCapabilityChecker:
    """Trusts ``X-Actor-Id`` / ``X-Actor-Capabilities`` set by the gateway."""

    def current_actor(self) -> Optional[Actor]:
        raw_id = (request.headers.get("X-Actor-Id") or "").strip()
        if not raw_id.isdigit() or int(raw_id) <= 0:
            return None
        raw_caps = request.headers.get("X-Actor-Capabilities") or ""
        caps = frozenset(c.strip() for c in raw_caps.split(",") if c.strip())
        return Actor(actor_id=int(raw_id), capabilities=caps)

    def allows(self, actor: Actor, capability: str) -> bool:
        return capability in actor.capabilities


def require_actor(checker: CapabilityChecker) -> Actor:
    actor = checker.current_actor()
    if actor is None:
        raise AuthorizationError("Authentication required")
    return actor


def require_capability(checker: CapabilityChecker, capability: str) -> Actor:
    actor = require_actor(checker)
    if not checker.allows(actor, capability):
        raise AuthorizationError("You do not have permission for this action")
    return actor


def require_self_or_capability(checker: CapabilityChecker, employee_id: int, capability: str) -> Actor:
    actor = require_actor(checker)
    if actor.actor_id != int(employee_id) and not checker.allows(actor, capability):
        raise AuthorizationError("You do not have permission for this employee")
    return actor
