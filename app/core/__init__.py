"""
Core Application - Infrastructure & Base Classes

Generic, reusable building blocks shared by the domain apps (users, chat,
media). No domain-specific logic lives here.

Models (import from core.models):
    - BaseModel: Abstract model with timestamps (created_at, updated_at)

Services (import from core.services):
    - BaseService: Base class for service layer
    - ServiceResult: Standard result wrapper for success/failure handling
    - ErrorCode: Failure codes shared by all services

Exceptions (import from core.exceptions):
    - BaseApplicationError: Base exception with error codes
    - AuthenticationError: Identity token could not be verified
    - ValidationError, NotFoundError: Input and lookup failures
    - ExternalServiceError: Third-party service failures

Views (import from core.views):
    - health_check: Liveness/readiness endpoint
    - failure_response: ServiceResult failure -> DRF Response
"""
