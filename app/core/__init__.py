"""
Core Application - Infrastructure & Base Classes

Generic building blocks shared by the orders and payments apps. Nothing in
here knows about orders or Stripe.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)
    - VersionedModel: BaseModel plus an optimistic locking version

Model Mixins (import from core.model_mixins):
    - UUIDPrimaryKeyMixin: UUID as primary key

Services (import from core.services):
    - BaseService: Base class for service layer

Locks (import from core.locks):
    - DistributedLock: Redis-based mutual exclusion
    - check_version: Optimistic locking with row lock

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - ValidationError: Validation failures
    - NotFoundError: Resource not found
    - ConflictError: State conflicts
    - StaleRecordError: Optimistic locking conflict
    - LockAcquisitionError: Distributed lock timeout

Note:
    - Django models, model mixins and locks are NOT imported here to avoid
      AppRegistryNotReady errors. Import them directly from their modules.
"""

# Services (no Django model dependencies)
from .services import BaseService

# Exceptions (no Django dependencies)
from .exceptions import (
    BaseApplicationError,
    ConflictError,
    LockAcquisitionError,
    NotFoundError,
    StaleRecordError,
    ValidationError,
)

__all__ = [
    # Services
    "BaseService",
    # Exceptions
    "BaseApplicationError",
    "ValidationError",
    "NotFoundError",
    "ConflictError",
    "StaleRecordError",
    "LockAcquisitionError",
]
