"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks shared by the domain apps. No chat or
user logic lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Model Mixins (import from core.model_mixins):
    - SoftDeleteMixin: Soft delete support (is_deleted, deleted_at)

Managers (import from core.managers):
    - SoftDeleteManager: Filter deleted records by default
    - SoftDeleteQuerySet: QuerySet with soft delete operations

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling
    - ErrorKind: Failure categories mapped to HTTP status codes

Exceptions (import from core.exceptions):
    - BaseApplicationError and subclasses, one per ErrorKind
    - exception_for_result: ServiceResult failure -> exception
    - api_exception_handler: DRF EXCEPTION_HANDLER rendering {message, status}

Note:
    Exceptions, models, mixins and managers are NOT imported here. They pull
    in DRF or need the app registry, so import them from their modules.
"""

from .services import BaseService, ErrorKind, ServiceResult

__all__ = [
    "BaseService",
    "ErrorKind",
    "ServiceResult",
]
