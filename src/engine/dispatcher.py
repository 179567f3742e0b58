"""
Request dispatcher for the comparison tool.

Validates the request envelope, parses the parameter model for the action,
routes to the matching ComparisonService method, and converts every error
into the uniform {success, data?, error?} envelope. Nothing raised below this
point reaches the transport layer.
"""
import logging
import traceback
from typing import Any

from engine.service import ComparisonService
from engine.validation import parse_parameters
from models.requests import (
    ENUM_FIELDS,
    PARAMETER_MODELS,
    Operation,
    RequestContext,
    ToolResponse,
)
from security.exceptions import (
    ApplicationError,
    InvalidParametersError,
    MissingFieldsError,
    UnknownOperationError,
)
from security.sanitization import sanitize_text

logger = logging.getLogger(__name__)

COMPARISON_TOOL = "comparison"
SUPPORTED_TOOLS = [COMPARISON_TOOL]


def _echo(request: Any, name: str):
    """Envelope field to echo back; only string values are echoed."""
    value = request.get(name) if isinstance(request, dict) else None
    return value if isinstance(value, str) else None


class RequestDispatcher:
    """Routes comparison tool requests to a ComparisonService."""

    def __init__(self, service: ComparisonService):
        self.service = service

    def handle(self, request: Any) -> ToolResponse:
        """
        Handle one decoded request body.

        Args:
            request: Decoded JSON body ({tool, action, parameters, context?})

        Returns:
            ToolResponse; success=False responses carry an error message and
            code but never data
        """
        tool = _echo(request, "tool")
        action = _echo(request, "action")

        try:
            data = self._dispatch(request)
            return ToolResponse(success=True, data=data, tool=tool, action=action)

        except ApplicationError as e:
            log = logger.error if e.is_transient else logger.info
            log("Comparison %s failed [%s]: %s", action, e.error_code, sanitize_text(str(e)))
            return ToolResponse(
                success=False,
                error=sanitize_text(str(e)),
                error_code=e.error_code,
                tool=tool,
                action=action,
            )

        except Exception as e:
            logger.error("Unhandled error in comparison %s: %s", action, sanitize_text(str(e)))
            logger.error(sanitize_text(traceback.format_exc()))
            return ToolResponse(
                success=False,
                error=sanitize_text(str(e)) or "Unknown error occurred",
                error_code=getattr(e, "error_code", "INTERNAL_ERROR"),
                tool=tool,
                action=action,
            )

    def _dispatch(self, request: Any) -> Any:
        if not isinstance(request, dict):
            raise InvalidParametersError("Request body must be an object")

        tool = request.get("tool")
        action = request.get("action")
        missing = [name for name, value in (("tool", tool), ("action", action)) if not value]
        if missing:
            raise MissingFieldsError(
                "Missing required fields: tool and action are required",
                fields=missing,
            )

        if tool not in SUPPORTED_TOOLS:
            raise UnknownOperationError(
                f"Unknown tool: {tool}. Available tools: {', '.join(SUPPORTED_TOOLS)}",
                supported=SUPPORTED_TOOLS,
            )

        try:
            operation = Operation(action)
        except (ValueError, TypeError):
            raise UnknownOperationError(
                f"Unknown action: {action}. Supported actions: {', '.join(Operation.names())}",
                supported=Operation.names(),
            )

        context = parse_parameters(RequestContext, request.get("context"), set())

        params = parse_parameters(PARAMETER_MODELS[operation], request.get("parameters"), ENUM_FIELDS)
        logger.debug(
            "Dispatching %s (user=%s, role=%s)", operation.value, context.user_id, context.user_role
        )

        if operation is Operation.GET_RANDOM_ROBOTS:
            return self.service.get_random_robots(params)
        elif operation is Operation.GET_COMPARISON_DATA:
            return self.service.get_comparison_data(params)
        elif operation is Operation.TRACK_INTERACTION:
            return self.service.track_interaction(params, context)
        elif operation is Operation.GET_POPULAR_COMPARISONS:
            return self.service.get_popular_comparisons(params)
        elif operation is Operation.GET_COMPARISON_STATS:
            return self.service.get_comparison_stats(params)

        # Every Operation member is handled above
        raise UnknownOperationError(
            f"Unknown action: {action}. Supported actions: {', '.join(Operation.names())}",
            supported=Operation.names(),
        )
