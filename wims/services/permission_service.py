"""
Permission request service.

Salesmen ask an admin for capabilities (logging in, editing orders,
adjusting prices); admins approve or reject the requests.
"""

from typing import List, Optional, Tuple, Union

from ..models import (
    ActionType,
    PermissionRequest,
    PermissionRequestStatus,
    PermissionRequestType,
    UserRole,
)
from ..storage import WimsStore
from ..utils import get_audit_logger, get_logger
from .auth_service import AuthService


class PermissionService:
    """Service for salesman permission requests."""

    def __init__(self, store: WimsStore, auth_service: AuthService) -> None:
        self.store = store
        self.auth_service = auth_service
        self.logger = get_logger("permission_service")
        self.audit_logger = get_audit_logger(store.storage)

    def request_permission(
        self,
        request_type: Union[PermissionRequestType, str],
        notes: Optional[str] = None,
    ) -> Tuple[bool, str]:
        """
        Ask an admin for a permission on behalf of the logged-in user.

        Args:
            request_type: Permission being requested
            notes: Message for the admin

        Returns:
            Tuple of (success, message for the user)
        """
        request_type = PermissionRequestType(request_type)
        user = self.auth_service.current_user()
        if user is None:
            return False, "You must be logged in to request permissions"

        existing = self._find_latest(user.id, request_type)
        if existing is not None:
            if existing.status == PermissionRequestStatus.APPROVED:
                return True, "Permission already granted"
            if existing.status == PermissionRequestStatus.PENDING:
                return False, "You already have a pending request"

        request = PermissionRequest(
            salesman_id=user.id,
            salesman_name=user.name,
            request_type=request_type,
            notes=notes,
        )
        self.store.permission_requests.insert(0, request)
        self.store.save_permission_requests()

        self.audit_logger.log_action(
            action_type=ActionType.PERMISSION_REQUESTED,
            actor=user.name,
            details={"request_id": request.id, "type": request_type.value},
        )
        self.logger.info(f"{user.name} requested {request_type.value} permission")
        return True, "Permission request sent to admin"

    def approve_request(self, request_id: str) -> Optional[PermissionRequest]:
        """
        Approve a request.

        Approving a login request also approves the salesman's account.

        Returns:
            The request, or None if not found
        """
        request = self._set_status(request_id, PermissionRequestStatus.APPROVED)
        if request is None:
            return None

        if request.request_type == PermissionRequestType.LOGIN:
            user = self.store.find_user(request.salesman_id)
            if user is not None and user.role == UserRole.SALESMAN:
                user.is_approved = True
                self.store.save_users()
                self.logger.info(f"Approved account for {user.name}")
        return request

    def reject_request(self, request_id: str) -> Optional[PermissionRequest]:
        return self._set_status(request_id, PermissionRequestStatus.REJECTED)

    def get_pending_requests(self) -> List[PermissionRequest]:
        return [
            r for r in self.store.permission_requests
            if r.status == PermissionRequestStatus.PENDING
        ]

    def get_request_status(
        self,
        salesman_id: str,
        request_type: Union[PermissionRequestType, str],
    ) -> Optional[PermissionRequestStatus]:
        """Status of the salesman's latest request of this type, if any."""
        request = self._find_latest(salesman_id, PermissionRequestType(request_type))
        return request.status if request else None

    def has_permission(self, salesman_id: str, request_type: Union[PermissionRequestType, str]) -> bool:
        return self.get_request_status(salesman_id, request_type) == PermissionRequestStatus.APPROVED

    def _find_latest(
        self,
        salesman_id: str,
        request_type: PermissionRequestType,
    ) -> Optional[PermissionRequest]:
        # Requests are kept newest first
        return next(
            (r for r in self.store.permission_requests
             if r.salesman_id == salesman_id and r.request_type == request_type),
            None,
        )

    def _set_status(
        self,
        request_id: str,
        status: PermissionRequestStatus,
    ) -> Optional[PermissionRequest]:
        request = next((r for r in self.store.permission_requests if r.id == request_id), None)
        if request is None:
            self.logger.warning(f"Permission update ignored: unknown request {request_id}")
            return None

        request.status = status
        self.store.save_permission_requests()

        action = (
            ActionType.PERMISSION_APPROVED
            if status == PermissionRequestStatus.APPROVED
            else ActionType.PERMISSION_REJECTED
        )
        admin = self.auth_service.current_user()
        self.audit_logger.log_action(
            action_type=action,
            actor=admin.name if admin else "Admin",
            details={"request_id": request_id, "salesman_id": request.salesman_id},
        )
        self.logger.info(
            f"{status.value.capitalize()} {request.request_type.value} request from {request.salesman_name}"
        )
        return request
