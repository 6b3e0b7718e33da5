"""Custom exceptions for branchflow."""

class FlowError(Exception):
    """Base exception for all branchflow errors."""
    pass

class CommandError(FlowError):
    """Raised when a shell command that must succeed fails."""

    def __init__(self, message: str, command: str = "", stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.stderr = stderr

class ConfigurationError(FlowError):
    """Raised for configuration errors."""
    pass

class ProtectedBranchError(FlowError):
    """Raised when an operation would mutate main, develop or staging."""

    def __init__(self, branch: str, operation: str):
        super().__init__(f"Refusing to {operation} protected branch '{branch}'")
        self.branch = branch
        self.operation = operation

class LLMError(FlowError):
    """Raised for LLM provider errors."""
    pass

class GenerationError(LLMError):
    """Raised when generated content fails schema validation."""
    pass

class WorkflowError(FlowError):
    """Raised when a workflow cannot continue."""
    pass

class IssueTrackerError(FlowError):
    """Raised for issue tracker errors."""
    pass
