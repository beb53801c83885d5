"""
Exceptions raised by repositories and services.

Routers never catch these; the handlers registered in ``skillz.main``
turn them into JSON error responses using ``status_code``.
"""

from typing import Any, Dict, Optional


class SkillzError(Exception):
    """Base exception for Skillz"""

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class NotFoundError(SkillzError):
    """Raised when a user, domain or skill does not exist"""

    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} not found: {entity_id}",
            {"entity": entity, "id": entity_id},
        )


class ConflictError(SkillzError):
    """Raised when a unique name or email is already taken"""

    status_code = 409


class InvalidPasswordError(SkillzError):
    """Raised when the current password given for a change does not match"""

    status_code = 400

    def __init__(self, message: str = "Current password is incorrect"):
        super().__init__(message)


class ValidationError(SkillzError):
    """Raised when a request is well-formed but not acceptable"""

    status_code = 422
