"""Module errors: structured error taxonomy for the workerforge build pipeline."""
#
from enum import Enum
from typing import Dict, Any, Optional
# PURPOSE:
# Provides a structured error taxonomy for workerforge with error codes,
# a typed exception, and consistent error reporting across pipeline stages.
#
# ERROR CODE FORMAT:
# - ASSET_XXX: Missing or unreadable inputs
# - TRANSFORM_XXX: Minifier / compactor rejections
# - BUNDLE_XXX: Bundler and constant wiring errors
# - OBFS_XXX: Obfuscation errors
# - PACKAGE_XXX: Output write errors
# - TOOL_XXX: External tool execution errors
# - CONFIG_XXX: Configuration errors
#
# USAGE:
#   from workerforge.errors import BuildError, ErrorCode
#
#   raise BuildError(
#       ErrorCode.ASSET_PAGE_FILE_MISSING,
#       "Page 'panel' is missing style.css",
#       details={"page": "panel", "file": "style.css"}
#   )
#
class ErrorCode(Enum):
    # Asset Errors
    ASSET_ROOT_NOT_FOUND = "ASSET_001"
    ASSET_PAGE_FILE_MISSING = "ASSET_002"
    ASSET_ICON_UNREADABLE = "ASSET_003"
    ASSET_ENTRY_UNREADABLE = "ASSET_004"
    ASSET_PAGE_UNREADABLE = "ASSET_005"

    # Transformation Errors
    TRANSFORM_COMPACT_FAILED = "TRANSFORM_001"
    TRANSFORM_HTML_FAILED = "TRANSFORM_002"
    TRANSFORM_MINIFY_FAILED = "TRANSFORM_003"

    # Bundle Errors
    BUNDLE_FAILED = "BUNDLE_001"
    BUNDLE_UNRESOLVED_CONSTANT = "BUNDLE_002"

    # Obfuscation Errors
    OBFUSCATION_FAILED = "OBFS_001"

    # Packaging Errors
    PACKAGE_WRITE_FAILED = "PACKAGE_001"

    # Tool Errors
    TOOL_NOT_INSTALLED = "TOOL_001"
    TOOL_EXEC_FAILED = "TOOL_002"

    # Config Errors
    CONFIG_INVALID = "CONFIG_001"

    # System Errors
    SYSTEM_INTERNAL_ERROR = "SYSTEM_001"


class ErrorCategory(str, Enum):
    """Coarse failure classes reported by the CLI."""
    MISSING_ASSET = "missing_asset"
    TRANSFORMATION = "transformation"
    OBFUSCATION = "obfuscation"
    PACKAGING = "packaging"
    CONFIGURATION = "configuration"
    INTERNAL = "internal"


class BuildError(Exception):
    """
    Base exception class for workerforge with structured error information.

    Attributes:
        code: ErrorCode enum value (e.g., "ASSET_002")
        message: Human-readable error message
        details: Optional dictionary with additional context
        category: ErrorCategory the code belongs to
    """

    CATEGORY_MAP: Dict[ErrorCode, ErrorCategory] = {
        ErrorCode.ASSET_ROOT_NOT_FOUND: ErrorCategory.MISSING_ASSET,
        ErrorCode.ASSET_PAGE_FILE_MISSING: ErrorCategory.MISSING_ASSET,
        ErrorCode.ASSET_ICON_UNREADABLE: ErrorCategory.MISSING_ASSET,
        ErrorCode.ASSET_ENTRY_UNREADABLE: ErrorCategory.MISSING_ASSET,
        ErrorCode.ASSET_PAGE_UNREADABLE: ErrorCategory.MISSING_ASSET,

        ErrorCode.TRANSFORM_COMPACT_FAILED: ErrorCategory.TRANSFORMATION,
        ErrorCode.TRANSFORM_HTML_FAILED: ErrorCategory.TRANSFORMATION,
        ErrorCode.TRANSFORM_MINIFY_FAILED: ErrorCategory.TRANSFORMATION,
        ErrorCode.BUNDLE_FAILED: ErrorCategory.TRANSFORMATION,
        ErrorCode.BUNDLE_UNRESOLVED_CONSTANT: ErrorCategory.TRANSFORMATION,

        ErrorCode.OBFUSCATION_FAILED: ErrorCategory.OBFUSCATION,

        ErrorCode.PACKAGE_WRITE_FAILED: ErrorCategory.PACKAGING,

        # A missing or crashing tool fails the stage that needed it
        ErrorCode.TOOL_NOT_INSTALLED: ErrorCategory.TRANSFORMATION,
        ErrorCode.TOOL_EXEC_FAILED: ErrorCategory.TRANSFORMATION,

        ErrorCode.CONFIG_INVALID: ErrorCategory.CONFIGURATION,

        ErrorCode.SYSTEM_INTERNAL_ERROR: ErrorCategory.INTERNAL,
    }

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize a BuildError.

        Args:
            code: ErrorCode enum value
            message: Human-readable error message
            details: Optional dictionary with additional context
        """
        self.code = code
        self.message = message
        self.details = details or {}
        self.category = self.CATEGORY_MAP.get(code, ErrorCategory.INTERNAL)

        # Build exception message with code for easy debugging
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for JSON serialization."""
        return {
            "code": self.code.value,
            "category": self.category.value,
            "message": self.message,
            "details": self.details,
        }

    def to_json(self) -> str:
        """Serialize error to JSON string."""
        import json
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BuildError":
        """
        Deserialize error from dictionary.

        Args:
            data: Dictionary with code, message, details

        Returns:
            BuildError instance
        """
        code = ErrorCode(data["code"])
        return cls(code, data["message"], data.get("details", {}))


# ============================================================================
# Convenience Functions
# ============================================================================

def handle_error(error: Exception, context: Optional[str] = None) -> BuildError:
    """
    Convert a generic exception to a BuildError.

    BuildErrors pass through untouched so the original code survives
    re-wrapping at every stage boundary.

    Args:
        error: The original exception
        context: Optional context string (e.g., "while packaging")

    Returns:
        BuildError with appropriate code and message
    """
    if isinstance(error, BuildError):
        return error

    error_type = type(error).__name__

    if isinstance(error, FileNotFoundError):
        code = ErrorCode.ASSET_PAGE_FILE_MISSING
    elif isinstance(error, (PermissionError, IsADirectoryError)):
        code = ErrorCode.PACKAGE_WRITE_FAILED
    elif isinstance(error, OSError) and "No space left" in str(error):
        code = ErrorCode.PACKAGE_WRITE_FAILED
    else:
        code = ErrorCode.SYSTEM_INTERNAL_ERROR

    message = str(error) or error_type
    if context:
        message = f"{context}: {message}"

    return BuildError(
        code=code,
        message=message,
        details={
            "original_type": error_type,
            "original_message": str(error),
        },
    )


# ============================================================================
# Module-Level Exports
# ============================================================================

__all__ = ["ErrorCode", "ErrorCategory", "BuildError", "handle_error"]
