"""
Error hierarchy for flow export.

Configuration errors are raised eagerly and always reach the caller.
HookExecutionError is scoped to a single record and output; the router
logs it and keeps going.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class FlowExportError(Exception):
    """Base exception for all flow export errors."""

    error_code: str = "FLOW_EXPORT_ERROR"
    message: str = "flow export failed"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"error": self.error_code, "message": self.message}
        if self.details:
            result["details"] = self.details
        return result


class ConfigurationError(FlowExportError):
    error_code = "CONFIGURATION_ERROR"
    message = "invalid configuration"


class UnknownTemplateError(ConfigurationError):
    error_code = "UNKNOWN_TEMPLATE"

    def __init__(self, template_id: int):
        self.template_id = template_id
        super().__init__(
            f"template id {template_id} is not defined in templates",
            details={"template_id": template_id},
        )


class UnknownFieldError(ConfigurationError):
    error_code = "UNKNOWN_FIELD"

    def __init__(self, name: str, template_id: Optional[int] = None):
        self.name = name
        self.template_id = template_id
        details: Dict[str, Any] = {"field": name}
        message = f"field {name!r} is not a registered IPFIX field"
        if template_id is not None:
            details["template_id"] = template_id
            message += f" (template {template_id})"
        super().__init__(message, details=details)


class InvalidHookConfigurationError(ConfigurationError):
    error_code = "INVALID_HOOK"
    message = "hook must set exactly one backend"


class InvalidOutputConfigurationError(ConfigurationError):
    error_code = "INVALID_OUTPUT"
    message = "output must set exactly one of collector or log"


class MessageLengthError(ConfigurationError):
    """maxIpfixMessageLen leaves no room for a single record of a template."""

    error_code = "MESSAGE_LENGTH"

    def __init__(self, template_id: int, record_length: int, max_message_len: int):
        self.template_id = template_id
        self.record_length = record_length
        self.max_message_len = max_message_len
        super().__init__(
            f"template {template_id} record length {record_length} does not fit "
            f"maxIpfixMessageLen {max_message_len}",
            details={
                "template_id": template_id,
                "record_length": record_length,
                "max_ipfix_message_len": max_message_len,
            },
        )


class HookExecutionError(FlowExportError):
    error_code = "HOOK_FAILED"

    def __init__(self, hook_name: str, reason: str):
        self.hook_name = hook_name
        self.reason = reason
        super().__init__(
            f"hook {hook_name!r} failed: {reason}",
            details={"hook": hook_name, "reason": reason},
        )


class InvalidFlowFileError(FlowExportError):
    error_code = "INVALID_FLOW_FILE"
    message = "malformed flow file"


class FlowEncodeError(FlowExportError):
    """A flow value cannot be written at its field's wire length."""

    error_code = "ENCODE_FAILED"

    def __init__(self, template_id: int, field: str, reason: str):
        self.template_id = template_id
        self.field = field
        self.reason = reason
        super().__init__(
            f"template {template_id} field {field!r}: {reason}",
            details={"template_id": template_id, "field": field, "reason": reason},
        )
