from __future__ import annotations


class ApprovalSyncError(RuntimeError):
    """Base error for approvalsync."""


class ConfigError(ApprovalSyncError):
    """Raised at startup when a required setting is missing or invalid."""


class RegistryError(ApprovalSyncError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MembershipError(ApprovalSyncError):
    """Base error for guild membership operations."""


class MemberNotFound(MembershipError):
    def __init__(self, user_id: str, message: str | None = None) -> None:
        super().__init__(message or f"Unknown Member: {user_id}")
        self.user_id = user_id


class RoleGrantError(MembershipError):
    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
