"""
Content Portal - Logging Infrastructure

This module provides structured logging with support for:
- JSON formatted logs for production
- Console formatted logs for development
- Context binding for request tracing
- Dedicated security and audit event loggers
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, ParamSpec

import structlog
from structlog.types import Processor

from portal.core.config import get_settings

# Context variables for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
user_id_context: ContextVar[Optional[str]] = ContextVar("user_id", default=None)

P = ParamSpec("P")
R = TypeVar("R")


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add context variables to log entries.

    This processor adds request_id and user_id from context
    variables to every log entry.
    """
    request_id = request_id_context.get()
    if request_id:
        event_dict["request_id"] = request_id

    user_id = user_id_context.get()
    if user_id:
        event_dict.setdefault("user_id", user_id)

    return event_dict


def get_log_level(settings: Any) -> int:
    """Convert string log level to logging constant."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(settings.LOG_LEVEL.upper(), logging.INFO)


def get_processors(settings: Any) -> list[Processor]:
    """Get structlog processors based on settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    This should be called once at application startup.
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=get_log_level(settings),
    )

    structlog.configure(
        processors=get_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A structlog BoundLogger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("document_created", slug="budget-law-2024")
    """
    return structlog.get_logger(name)


def log_execution_time(
    log: structlog.stdlib.BoundLogger,
    operation: str,
    **extra_fields: Any
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to log execution time of a function.

    Args:
        log: Logger instance
        operation: Name of the operation being timed
        **extra_fields: Additional fields to include in the log

    Example:
        >>> @log_execution_time(log, "export_document")
        ... def export(document: Document) -> str:
        ...     ...
    """
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.info(
                    f"{operation}_completed",
                    duration_ms=round(duration_ms, 2),
                    success=True,
                    **extra_fields
                )
                return result
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.error(
                    f"{operation}_failed",
                    duration_ms=round(duration_ms, 2),
                    success=False,
                    error=str(e),
                    error_type=type(e).__name__,
                    **extra_fields
                )
                raise
        return wrapper
    return decorator


# =====================================
# Security Event Logger
# =====================================

class SecurityLogger:
    """
    Specialized logger for authentication and authorization events.

    Every event carries ``event_category="security"`` so it can be
    filtered out of the general application stream.
    """

    def __init__(self, name: str = "portal.security"):
        self.log = get_logger(name)

    def _emit(self, level: str, event: str, **fields: Any) -> None:
        getattr(self.log, level)(event, event_category="security", **fields)

    def log_login_success(self, user_id: str, ip_address: str, user_agent: str = "unknown") -> None:
        self._emit("info", "login_success", user_id=user_id, ip_address=ip_address, user_agent=user_agent)

    def log_login_failure(self, email: str, ip_address: str, reason: str) -> None:
        self._emit("warning", "login_failure", email=email, ip_address=ip_address, reason=reason)

    def log_account_locked(self, user_id: str, ip_address: str) -> None:
        self._emit("warning", "account_locked", user_id=user_id, ip_address=ip_address)

    def log_token_invalid(self, reason: str, ip_address: str) -> None:
        self._emit("warning", "token_invalid", reason=reason, ip_address=ip_address)

    def log_token_refresh(self, user_id: str) -> None:
        self._emit("info", "token_refresh", user_id=user_id)

    def log_logout(self, user_id: str) -> None:
        self._emit("info", "logout", user_id=user_id)

    def log_password_changed(self, user_id: str) -> None:
        self._emit("info", "password_changed", user_id=user_id)

    def log_unauthorized_access(self, user_id: Optional[str], resource: str, action: str) -> None:
        """Log a denied policy decision or role check."""
        self._emit("warning", "unauthorized_access", user_id=user_id, resource=resource, action=action)

    def log_pending_account_blocked(self, user_id: str, path: str) -> None:
        self._emit("info", "pending_account_blocked", user_id=user_id, path=path)

    def log_rate_limit_exceeded(self, ip_address: str, path: str) -> None:
        self._emit("warning", "rate_limit_exceeded", ip_address=ip_address, path=path)


# =====================================
# Audit Logger
# =====================================

class AuditLogger:
    """
    Logger for state-changing administrative actions.

    Audit entries record who did what to which resource.
    """

    def __init__(self, name: str = "portal.audit"):
        self.log = get_logger(name)

    def log_action(self, action: str, actor_id: str, resource: str, resource_id: str, **fields: Any) -> None:
        self.log.info(
            "audit_event",
            event_category="audit",
            action=action,
            actor_id=actor_id,
            resource=resource,
            resource_id=resource_id,
            **fields,
        )

    def log_roles_assigned(self, actor_id: str, target_id: str, old_roles: list[str], new_roles: list[str]) -> None:
        self.log_action(
            "roles_assigned", actor_id, "user", target_id,
            old_roles=old_roles, new_roles=new_roles,
        )

    def log_account_deleted(self, actor_id: str, target_id: str, email: str) -> None:
        self.log_action("account_deleted", actor_id, "user", target_id, email=email)

    def log_document_deleted(self, actor_id: str, document_id: str, title: str) -> None:
        self.log_action("document_deleted", actor_id, "document", document_id, title=title)

    def log_document_published(self, actor_id: str, document_id: str, title: str) -> None:
        self.log_action("document_published", actor_id, "document", document_id, title=title)

    def log_member_deleted(self, actor_id: str, member_id: str, name: str) -> None:
        self.log_action("member_deleted", actor_id, "member", member_id, name=name)


security_logger = SecurityLogger()
audit_logger = AuditLogger()
