"""Error handling framework for the repository provisioner."""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Dict, Any, Optional


class ErrorCategory(Enum):
    """Categories of errors for structured error handling."""
    REMOTE_API = "remote_api"
    TRANSPORT = "transport"
    LOCAL_GIT = "local_git"
    CONFIGURATION = "configuration"


class ProvisionError(Exception):
    """Base class for failures that abort a provisioning run."""

    error_code = "PROVISION_ERROR"
    category = ErrorCategory.REMOTE_API

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code


class RemoteAPIError(ProvisionError):
    """The hosting service answered with a non-2xx status."""

    error_code = "REMOTE_API_ERROR"
    category = ErrorCategory.REMOTE_API

    def __init__(self, message: str, status_code: int, error_code: Optional[str] = None):
        super().__init__(message, error_code)
        self.status_code = status_code


class TransportError(ProvisionError):
    """The request never produced a usable response."""

    error_code = "TRANSPORT_ERROR"
    category = ErrorCategory.TRANSPORT


class ConfigurationError(ProvisionError, ValueError):
    """An option has an invalid value."""

    error_code = "CONFIGURATION_ERROR"
    category = ErrorCategory.CONFIGURATION


@dataclass
class ErrorResponse:
    """Standardized error response format for provisioning operations."""
    error: str
    error_code: str
    message: str
    timestamp: str
    category: str
    context: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error response to dictionary format."""
        result = {
            "error": self.error,
            "error_code": self.error_code,
            "message": self.message,
            "timestamp": self.timestamp,
            "category": self.category
        }
        if self.context:
            result["context"] = self.context
        return result


class ErrorHandler:
    """Turns provisioning failures into logged, structured responses."""

    def __init__(self):
        self.logger = logging.getLogger('ghprovision.error_handler')

    def handle_remote_api_error(self, error: RemoteAPIError, context: Dict[str, Any] = None) -> ErrorResponse:
        """Handle a rejection from the hosting service."""
        context = context or {}

        if error.status_code in (401, 403):
            error_code = "REMOTE_AUTH_FAILED"
        elif error.status_code == 422:
            error_code = "REMOTE_VALIDATION_FAILED"
        elif error.status_code == 404:
            error_code = "REMOTE_NOT_FOUND"
        else:
            error_code = error.error_code

        error_response = ErrorResponse(
            error="Repository creation failed",
            error_code=error_code,
            message=error.message,
            timestamp=datetime.now().isoformat(),
            category=ErrorCategory.REMOTE_API.value,
            context=context
        )

        self.logger.error(
            f"GitHub API error: {error.message}",
            extra={
                'operation': 'remote_api_error',
                'error_code': error_code,
                'status_code': error.status_code,
                'repository': context.get('repository')
            }
        )

        return error_response

    def handle_transport_error(self, error: TransportError, context: Dict[str, Any] = None) -> ErrorResponse:
        """Handle network failures and unusable responses."""
        context = context or {}

        error_response = ErrorResponse(
            error="Repository creation failed",
            error_code=error.error_code,
            message=error.message,
            timestamp=datetime.now().isoformat(),
            category=ErrorCategory.TRANSPORT.value,
            context=context
        )

        self.logger.error(
            f"Transport error: {error.message}",
            extra={
                'operation': 'transport_error',
                'error_code': error.error_code,
                'url': context.get('url')
            }
        )

        return error_response

    def handle_local_git_error(self, error: Exception, context: Dict[str, Any] = None) -> ErrorResponse:
        """Handle a failure while mutating the local repository."""
        context = context or {}

        if "permission" in str(error).lower():
            error_code = "LOCAL_GIT_PERMISSION_ERROR"
            message = "Permission denied for Git operation"
        else:
            error_code = "LOCAL_GIT_ERROR"
            message = f"Git operation failed: {error}"

        error_response = ErrorResponse(
            error="Local git wiring failed",
            error_code=error_code,
            message=message,
            timestamp=datetime.now().isoformat(),
            category=ErrorCategory.LOCAL_GIT.value,
            context=context
        )

        self.logger.warning(
            f"Local git error: {message}",
            extra={
                'operation': 'local_git_error',
                'error_code': error_code,
                'repository_path': context.get('repository_path')
            }
        )

        return error_response

    def create_success_response(self, operation: str, data: Dict[str, Any], context: Dict[str, Any] = None) -> Dict[str, Any]:
        """Create a standardized success response."""
        response = {
            "success": True,
            "operation": operation,
            "timestamp": datetime.now().isoformat(),
            "data": data
        }

        if context:
            response["context"] = context

        return response


# Initialize global error handler
error_handler = ErrorHandler()
