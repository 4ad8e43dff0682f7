"""Custom exceptions for protomod.

This module defines a hierarchy of exceptions used throughout protomod to
report why a run was aborted. Every stage fails fast, so each exception
carries enough context (offending package name, file path, command) to
diagnose the problem without re-running with extra logging.
"""


class ProtomodError(Exception):
    """Base exception for all protomod errors.

    Example:
        try:
            Build(config).run()
        except ProtomodError as e:
            print(f"protomod error: {e}")
    """

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class PlanningError(ProtomodError):
    """Base exception for errors raised while planning the module tree."""

    pass


class MalformedPackageNameError(PlanningError):
    """A package name cannot be mapped onto a module path.

    Attributes:
        package: The offending package name.
        reason: Explanation of which rule the name violates.
    """

    def __init__(self, package: str, reason: str | None = None):
        self.package = package
        self.reason = reason
        message = f"Malformed package name '{package}'"
        if reason:
            message += f': {reason}'
        super().__init__(message)


class DuplicatePackageError(PlanningError):
    """Two artifacts resolve to the same module path.

    Attributes:
        package: The package name that appeared more than once.
    """

    def __init__(self, package: str):
        self.package = package
        super().__init__(f"Duplicate package '{package}'")


class EmptyInputError(PlanningError):
    """No generated artifacts were supplied to the planner."""

    def __init__(self, message: str = 'No generated artifacts to modularize'):
        super().__init__(message)


class SchemaPatchError(ProtomodError):
    """Failed to read or write a schema file while patching it.

    Attributes:
        path: The schema file or directory being processed.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        message = f"Failed to patch protobuf schema '{path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class CompilationError(ProtomodError):
    """The Protobuf compiler could not be run or reported a failure.

    Attributes:
        command: The command line that was executed, if any.
        stderr: Diagnostic output captured from the compiler.
    """

    def __init__(
        self,
        message: str,
        command: list[str] | None = None,
        stderr: str | None = None,
    ):
        self.command = command
        self.stderr = stderr
        full_message = message
        if stderr:
            full_message += f': {stderr.strip()}'
        super().__init__(full_message)


class ArtifactError(ProtomodError):
    """Failed to read a generated source file.

    Attributes:
        path: The generated file that could not be read.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        self.cause = cause
        message = f"Failed to read generated source file '{path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)


class ConfigurationError(ProtomodError):
    """Error in configuration.

    Attributes:
        config_path: The path to the configuration file, if applicable.
        field: The specific configuration field that is invalid.
    """

    def __init__(
        self, message: str, config_path: str | None = None, field: str | None = None
    ):
        self.config_path = config_path
        self.field = field
        full_message = message
        if config_path:
            full_message = f"{message} in '{config_path}'"
        if field:
            full_message += f' (field: {field})'
        super().__init__(full_message)


class OutputError(ProtomodError):
    """Error writing planned output.

    Attributes:
        output_path: The path where output was being written.
        cause: The underlying exception that caused the failure.
    """

    def __init__(self, output_path: str, cause: Exception | None = None):
        self.output_path = output_path
        self.cause = cause
        message = f"Failed to write output to '{output_path}'"
        if cause:
            message += f': {cause}'
        super().__init__(message)
