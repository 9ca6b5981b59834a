"""API request and response schemas."""

from .alerts import (
    AlertListResponse,
    MarkReadRequest,
    RuleCreateRequest,
    RuleListResponse,
    RuleUpdateRequest,
)
from .compliance import (
    AccessValidationRequest,
    AccessValidationResponse,
    AuditLogResponse,
    ConsentListResponse,
    ConsentRequest,
    ExportRequest,
    ExportResponse,
    PurgeResponse,
)
from .errors import APIError, ErrorCode
from .health import ComponentHealth, HealthResponse, HealthStatus
from .reports import ReportListResponse, ReportRequest, SyncRequest

__all__ = [
    # Errors
    "APIError",
    "ErrorCode",
    # Health
    "ComponentHealth",
    "HealthResponse",
    "HealthStatus",
    # Compliance
    "AccessValidationRequest",
    "AccessValidationResponse",
    "AuditLogResponse",
    "ConsentListResponse",
    "ConsentRequest",
    "ExportRequest",
    "ExportResponse",
    "PurgeResponse",
    # Alerts and rules
    "AlertListResponse",
    "MarkReadRequest",
    "RuleCreateRequest",
    "RuleListResponse",
    "RuleUpdateRequest",
    # Reports and registry
    "ReportListResponse",
    "ReportRequest",
    "SyncRequest",
]
