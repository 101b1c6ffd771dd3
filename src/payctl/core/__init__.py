"""Core utilities and shared components for payctl."""

# Note: Import context lazily to avoid circular imports
# Use: from payctl.core.context import PayctlContext, pass_context
from payctl.core.exceptions import PayctlError, ConfigError, PayaraError, BuildError
from payctl.core.output import OutputFormatter, console

__all__ = [
    "PayctlError",
    "ConfigError",
    "PayaraError",
    "BuildError",
    "OutputFormatter",
    "console",
]
