"""
core/errors.py
--------------
Typed failure outcomes raised by services, validators and the session layer.

Each class carries the HTTP status its category maps to:
  401 → identity / signature / session failures
  403 → tenant isolation and permission failures
  404 → missing entities (including entities owned by another tenant)
  409 → the entity is already in the requested state
  400 → malformed payloads and cross-tenant references in request input

main.py installs a single exception handler that renders these as
{"detail": ...}; routes never build error responses by hand.
"""

from fastapi import status


class TaskHubError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "Operation failed"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


# ── 401 ───────────────────────────────────────────────────────────────────────

class MissingIdentity(TaskHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "User ID not provided in request headers"


class UserNotFound(TaskHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "User not found"


class InvalidSessionToken(TaskHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Unauthorized"


class SignatureMismatch(TaskHubError):
    status_code = status.HTTP_401_UNAUTHORIZED
    detail = "Invalid Telegram data"


# ── 403 ───────────────────────────────────────────────────────────────────────

class TenantNotAssigned(TaskHubError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "User not assigned to any company"


class AccessDenied(TaskHubError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Access denied"


class AccountDeactivated(AccessDenied):
    detail = "Account is deactivated"


class TaskInTrash(TaskHubError):
    status_code = status.HTTP_403_FORBIDDEN
    detail = "Cannot modify task in trash"


# ── 404 ───────────────────────────────────────────────────────────────────────

class EntityNotFound(TaskHubError):
    status_code = status.HTTP_404_NOT_FOUND
    detail = "Not found"


# ── 400 ───────────────────────────────────────────────────────────────────────

class MalformedPayload(TaskHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "No user data found"


class InvalidReference(TaskHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    detail = "Referenced entity not found or not accessible"


# ── 409 ───────────────────────────────────────────────────────────────────────

class AlreadyInTargetState(TaskHubError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Entity is already in the requested state"


class TaskNotInTrash(TaskHubError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Task must be in trash before permanent deletion"


class Conflict(TaskHubError):
    status_code = status.HTTP_409_CONFLICT
    detail = "Conflicting data"
