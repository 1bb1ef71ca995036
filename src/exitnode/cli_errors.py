#!/usr/bin/env python3
"""Centralized error handling for CLI operations"""

from typing import Optional, Callable, Any, TypeVar
from functools import wraps
import os
import sys
import logging

from .constants import EXIT_NODES_KB_URL
from .errors import CommitDenied, DaemonError, ExitNodeError

logger = logging.getLogger(__name__)

# Type variable for decorator
F = TypeVar("F", bound=Callable[..., Any])

EXIT_ERROR = 1
EXIT_CONFIG = 3
EXIT_NETWORK = 5
EXIT_INTERRUPTED = 130


class CLIError(Exception):
    """Base exception for CLI operations."""

    exit_code = EXIT_ERROR

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(message)


class ConfigError(CLIError):
    """Configuration error."""

    exit_code = EXIT_CONFIG


def program_name() -> str:
    return os.path.basename(sys.argv[0]) if sys.argv and sys.argv[0] else "exitnode"


def remediation_for(error: BaseException, program: Optional[str] = None) -> str:
    """Guidance shown under an error message; empty when there is none."""
    if not isinstance(error, CommitDenied):
        return ""
    program = program or program_name()
    return f"""Permission denied. Tailscale preferences require elevated access.

Try one of these solutions:

1. Run with sudo:
   sudo {program}

2. Run as the tailscale user (Linux):
   sudo -u tailscale {program}

3. Grant your user access to Tailscale (Linux):
   sudo usermod -a -G tailscale $USER
   (then logout and login again)

4. On macOS, ensure you're running as an admin user or use sudo

5. Use the tailscale CLI directly as an alternative:
   tailscale set --exit-node=<node-hostname>

For more information, see: {EXIT_NODES_KB_URL}"""


def exit_code_for(error: BaseException) -> int:
    if isinstance(error, CLIError):
        return error.exit_code
    if isinstance(error, DaemonError):
        return EXIT_NETWORK
    if isinstance(error, ValueError):
        return EXIT_CONFIG
    if isinstance(error, (TimeoutError, ConnectionError)):
        return EXIT_NETWORK
    return EXIT_ERROR


def format_error_message(
    error: Exception, context: Optional[str] = None, include_traceback: bool = False
) -> str:
    """
    Format error message for user display.

    Args:
        error: Exception that occurred
        context: Additional context about operation
        include_traceback: Whether to include full traceback

    Returns:
        Formatted error message string
    """
    error_types = {
        PermissionError: "Permission denied",
        TimeoutError: "Operation timeout",
        ConnectionError: "Connection failed",
        ValueError: "Invalid value",
        KeyboardInterrupt: "Operation cancelled",
    }

    if isinstance(error, (ExitNodeError, CLIError)):
        error_name = "Error"
    else:
        error_name = error_types.get(type(error), type(error).__name__)

    if context:
        message = f"❌ {context}: {error_name}"
    else:
        message = f"❌ {error_name}"

    if str(error):
        message += f" - {str(error)}"

    remediation = remediation_for(error)
    if remediation:
        message += f"\n\n{remediation}"

    if include_traceback:
        import traceback

        message += f"\n{traceback.format_exc()}"

    return message


def handle_cli_errors(
    context: str = "",
    exit_on_keyboard_interrupt: bool = True,
    exit_code: Optional[int] = None,
) -> Callable[[F], F]:
    """
    Decorator to handle CLI errors automatically.

    Args:
        context: Context string for error messages
        exit_on_keyboard_interrupt: Exit on Ctrl+C (vs re-raise)
        exit_code: Exit status for every failure other than a CLIError;
            None derives it from the exception type

    Returns:
        Decorated function
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                if exit_on_keyboard_interrupt:
                    print("\n⚠️  Operation cancelled by user", file=sys.stderr)
                    sys.exit(EXIT_INTERRUPTED)
                else:
                    raise
            except CLIError as e:
                message = format_error_message(e, context or e.context)
                print(message, file=sys.stderr)
                sys.exit(e.exit_code)
            except (ExitNodeError, ValueError, TimeoutError, ConnectionError) as e:
                message = format_error_message(e, context)
                print(message, file=sys.stderr)
                logger.debug(f"CLI Error: {message}", exc_info=True)
                sys.exit(exit_code if exit_code is not None else exit_code_for(e))
            except Exception as e:
                op_context = context or "Operation"
                message = format_error_message(e, op_context, include_traceback=True)
                print(message, file=sys.stderr)
                sys.exit(exit_code if exit_code is not None else EXIT_ERROR)

        return wrapper  # type: ignore

    return decorator
