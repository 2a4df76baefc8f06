"""
Custom exception hierarchy for the template registry.

Exceptions are categorized as:
- RetryableError: the caller may re-read registry state and try again
- NonRetryableError: permanent errors that should fail immediately

ResolutionInvariantError sits outside that split. It means the resolver was
handed a registry state that cannot exist, and must never be swallowed.
"""


class TemplateRegistryException(Exception):
    """Base exception for the template registry."""
    pass


# ============================================
# RETRYABLE ERRORS
# ============================================
class RetryableError(TemplateRegistryException):
    """
    Base class for errors where re-resolving from fresh reads might succeed.
    """
    pass


class TemplateConflictError(RetryableError):
    """
    A concurrent publish won the uniqueness race for this name or version.

    Raised by the registry on create. The publish service re-reads the
    registry and resolves again, at most once.
    """
    def __init__(self, name: str, version: str | None = None, reason: str = "already exists"):
        self.name = name
        self.version = version
        self.reason = reason
        target = f"{name}@{version}" if version else name
        super().__init__(f"Template {target} conflict: {reason}")


class DatabaseTransientError(RetryableError):
    """
    Transient database error.

    Examples: connection pool exhausted, deadlock, temporary unavailability
    """
    pass


# ============================================
# NON-RETRYABLE ERRORS
# ============================================
class NonRetryableError(TemplateRegistryException):
    """
    Base class for errors that should NOT trigger retry.

    Use this for permanent errors where retrying won't help:
    - Missing data
    - Authentication errors
    """
    pass


class TemplateNotFoundError(NonRetryableError):
    """Template does not exist."""
    def __init__(self, template_id):
        self.template_id = template_id
        super().__init__(f"Template {template_id} does not exist")


class PipelineNotFoundError(NonRetryableError):
    """Pipeline referenced by the build token does not exist."""
    def __init__(self, pipeline_id):
        self.pipeline_id = pipeline_id
        super().__init__(f"Pipeline {pipeline_id} does not exist")


class AuthenticationError(NonRetryableError):
    """Build token could not be verified."""
    pass


# ============================================
# INVARIANT VIOLATIONS
# ============================================
class ResolutionInvariantError(AssertionError, TemplateRegistryException):
    """
    Registry lookups returned a combination that cannot occur.

    Indicates a registry bug or a caller passing mismatched lookups.
    """
    pass
