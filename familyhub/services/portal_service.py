"""
Portal logins and the password entries mirrored from them.

The password entry of a portal is keyed by (``<portal_type>_portal``,
portal id). A portal without both a username and a password has no entry.
"""
import logging
from typing import Any, Dict, Optional

from familyhub.core.constants import (
    PORTAL_PASSWORD_CATEGORIES,
    PortalType,
    StepType,
    SyncOperationType,
)
from familyhub.core.exceptions import ResourceNotFoundException
from familyhub.models.portal import Portal
from familyhub.repositories.domain_repositories import PortalRepository
from familyhub.schemas.domain import PortalCreate, PortalResponse, PortalUpdate
from familyhub.schemas.domain import Portal as PortalOut
from familyhub.schemas.sync import PasswordData
from familyhub.services.composite_operation import CompositeOperation
from familyhub.services.domain_service import DomainSyncService, check_removed
from familyhub.services.sync_service import SyncService, require_ok

# Set up module logger
logger = logging.getLogger(__name__)


def portal_password_source(portal_type: str) -> str:
    return f"{portal_type}_portal"


def portal_password_data(portal: Portal, owner_id: Optional[str] = None) -> Optional[PasswordData]:
    """Password entry mirrored from a portal, or None when it carries no credentials."""
    if not portal.username or not portal.password:
        return None

    category = PORTAL_PASSWORD_CATEGORIES.get(PortalType(portal.portal_type), "other")
    return PasswordData(
        name=portal.portal_name,
        website=portal.portal_url,
        username=portal.username,
        password=portal.password,
        category=category,
        source=portal_password_source(portal.portal_type),
        source_reference=portal.id,
        owner_id=owner_id,
        metadata={"portal_id": portal.id, "patient_ids": portal.patient_ids or []},
    )


def sync_portal_password(sync: SyncService, portal: Portal) -> Optional[str]:
    """Ensure or remove the mirrored password entry. Returns its id when one exists."""
    data = portal_password_data(portal, owner_id=portal.created_by)
    if data is None:
        check_removed(
            sync.remove_password_entry(portal_password_source(portal.portal_type), portal.id),
            "portal password",
        )
        return None
    return require_ok(sync.ensure_password_entry(data), "portal password")


class PortalService(DomainSyncService):
    source_table = "portals"

    def __init__(self, db):
        super().__init__(db)
        self.repository = PortalRepository(db)

    async def get_portal(self, portal_id: str) -> Portal:
        portal = self.repository.get(portal_id)
        if not portal:
            raise ResourceNotFoundException(f"Portal {portal_id} not found")
        return portal

    async def create_portal(
        self, user_id: Optional[str], data: PortalCreate, request_id: Optional[str] = None
    ) -> PortalResponse:
        sync = self.sync_service(user_id, request_id)
        state: Dict[str, Any] = {}

        def create_portal() -> Portal:
            values = data.model_dump(exclude_none=True)
            values["portal_type"] = data.portal_type.value
            values["created_by"] = user_id
            portal = self.repository.create(values)
            state["portal"] = portal
            return portal

        def ensure_password() -> Optional[str]:
            state["password_id"] = sync_portal_password(sync, state["portal"])
            return state["password_id"]

        def remove_password(password_id: Optional[str]) -> None:
            if password_id:
                portal = state["portal"]
                check_removed(
                    sync.remove_password_entry(
                        portal_password_source(portal.portal_type), portal.id
                    ),
                    "portal password",
                )

        operation = (
            CompositeOperation(sync.request_id)
            .add_step(StepType.CUSTOM, create_portal, lambda p: self.repository.delete(p.id), name="portal")
            .add_step(StepType.PASSWORD, ensure_password, remove_password)
        )
        await self.run(operation, sync, source_id=lambda: getattr(state.get("portal"), "id", None))

        return PortalResponse(
            portal=PortalOut.model_validate(state["portal"]),
            passwordId=state.get("password_id"),
        )

    async def update_portal(
        self,
        user_id: Optional[str],
        portal_id: str,
        data: PortalUpdate,
        request_id: Optional[str] = None,
    ) -> PortalResponse:
        portal = await self.get_portal(portal_id)
        sync = self.sync_service(user_id, request_id)
        snapshot = {field: getattr(portal, field) for field in data.model_dump(exclude_unset=True)}
        state: Dict[str, Any] = {}

        def update_portal() -> Portal:
            state["portal"] = self.repository.update(portal, data)
            return state["portal"]

        def ensure_password() -> Optional[str]:
            state["password_id"] = sync_portal_password(sync, state["portal"])
            return state["password_id"]

        operation = (
            CompositeOperation(sync.request_id)
            .add_step(
                StepType.CUSTOM,
                update_portal,
                lambda p: self.repository.update(p, snapshot),
                name="portal",
            )
            .add_step(StepType.PASSWORD, ensure_password)
        )
        await self.run(operation, sync, SyncOperationType.UPDATE, source_id=lambda: portal_id)
        return PortalResponse(
            portal=PortalOut.model_validate(state["portal"]),
            passwordId=state.get("password_id"),
        )

    async def delete_portal(
        self, user_id: Optional[str], portal_id: str, request_id: Optional[str] = None
    ) -> None:
        portal = await self.get_portal(portal_id)
        sync = self.sync_service(user_id, request_id)
        check_removed(
            sync.remove_password_entry(portal_password_source(portal.portal_type), portal.id),
            "portal password",
        )
        self.repository.delete(portal.id)
