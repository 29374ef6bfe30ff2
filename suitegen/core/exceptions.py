"""
Base exception classes for the suite generator.

Provides a hierarchy of exceptions for the error types that can occur
while turning a component module into a browser test suite.
"""

from typing import Optional, Dict, Any, List


class SuiteGenError(Exception):
    """Base exception class for all suite generator errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "context": self.context,
        }


class RecipeError(SuiteGenError):
    """Raised when a test-creation recipe is missing or malformed."""

    def __init__(
        self,
        message: str,
        field_name: Optional[str] = None,
        module_path: Optional[str] = None,
    ):
        super().__init__(message, "RECIPE_INVALID")
        self.field_name = field_name
        self.module_path = module_path
        self.context.update(
            {
                "field_name": field_name,
                "module_path": module_path,
            }
        )


class BundleError(SuiteGenError):
    """Raised when the esbuild gateway fails to resolve, bundle or transform."""

    def __init__(
        self,
        message: str,
        module_path: Optional[str] = None,
        operation: Optional[str] = None,
        exit_code: Optional[int] = None,
        stderr: Optional[str] = None,
    ):
        super().__init__(message, "BUNDLE_FAILED")
        self.module_path = module_path
        self.operation = operation
        self.exit_code = exit_code
        self.stderr = stderr
        self.context.update(
            {
                "module_path": module_path,
                "operation": operation,
                "exit_code": exit_code,
                "stderr": stderr,
            }
        )


class ValidationError(SuiteGenError):
    """Raised when configuration validation fails."""

    def __init__(
        self,
        message: str,
        validation_type: Optional[str] = None,
        violations: Optional[List[str]] = None,
    ):
        super().__init__(message, "VALIDATION_FAILED")
        self.validation_type = validation_type
        self.violations = violations or []
        self.context.update(
            {
                "validation_type": validation_type,
                "violations": violations,
            }
        )
