#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Custom exceptions for the mdxbridge library.

This module defines the exception classes raised at the edges of the
conversion engine. The engine itself is total over markdown and front matter
input: malformed markup is recovered from and reported as diagnostics, never
raised. Exceptions are reserved for caller-side mistakes (bad options, missing
schema fields), corrupted tree state, storage failures, and transformer
failures in strict mode.

Exception Hierarchy
-------------------
- MdxBridgeError (base exception)

  - ValidationError (parameter/option validation)
    - InvalidOptionsError (wrong options class supplied)
    - ConfigurationError (config files, schema lookup)

  - MalformedTreeError (unusable document tree or serialized tree state)

  - TransformerError (a transformer failed while in strict mode)

  - StorageError (markup file read/write failures)

"""

from typing import Any


class MdxBridgeError(Exception):
    """Base exception class for all mdxbridge-specific errors.

    Parameters
    ----------
    message : str
        Human-readable description of the error
    original_error : Exception, optional
        The original exception that caused this error, if applicable

    Attributes
    ----------
    message : str
        The error message
    original_error : Exception or None
        The wrapped original exception, if any

    """

    def __init__(self, message: str, original_error: Exception | None = None):
        """Initialize the error with a message and optional original exception."""
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class ValidationError(MdxBridgeError):
    """Exception raised for invalid input parameters or options.

    Parameters
    ----------
    message : str
        Description of the validation error
    parameter_name : str, optional
        Name of the invalid parameter
    parameter_value : any, optional
        The invalid value that was provided
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(
        self,
        message: str,
        parameter_name: str | None = None,
        parameter_value: Any = None,
        original_error: Exception | None = None,
    ):
        """Initialize the validation error with parameter details."""
        super().__init__(message, original_error=original_error)
        self.parameter_name = parameter_name
        self.parameter_value = parameter_value


class InvalidOptionsError(ValidationError):
    """Exception raised when an options object of the wrong class is supplied.

    Parameters
    ----------
    component_name : str
        Name of the component that received invalid options
    expected_type : type
        The expected options class
    received_type : type
        The options class that was actually received
    message : str, optional
        Custom error message. If not provided, a message is generated

    """

    def __init__(
        self,
        component_name: str,
        expected_type: type,
        received_type: type,
        message: str | None = None,
        original_error: Exception | None = None,
    ):
        """Initialize the error with component and type details."""
        if message is None:
            message = (
                f"Invalid options type for {component_name}: expected {expected_type.__name__}, "
                f"got {received_type.__name__}"
            )
        super().__init__(
            message,
            parameter_name="options",
            parameter_value=received_type,
            original_error=original_error,
        )
        self.component_name = component_name
        self.expected_type = expected_type
        self.received_type = received_type


class ConfigurationError(ValidationError):
    """Exception raised for unusable configuration.

    Covers unreadable or invalid config files and schema lookups that cannot
    find the rich-text field a hook was configured for.

    """


class MalformedTreeError(MdxBridgeError):
    """Exception raised when a document tree or its serialized state is unusable.

    Parameters
    ----------
    message : str
        Description of the problem
    path : str, optional
        Location of the offending node (e.g. ``root.children[2]``)
    original_error : Exception, optional
        The original exception that caused this error

    """

    def __init__(self, message: str, path: str | None = None, original_error: Exception | None = None):
        """Initialize the error with the offending node path."""
        super().__init__(message, original_error=original_error)
        self.path = path


class TransformerError(MdxBridgeError):
    """Exception raised when a transformer fails and strict mode is enabled.

    Parameters
    ----------
    transformer_name : str
        Name of the failing transformer
    operation : str
        Either ``"render"`` or ``"parse"``
    original_error : Exception, optional
        The exception raised by the transformer

    """

    def __init__(self, transformer_name: str, operation: str, original_error: Exception | None = None):
        """Initialize the error with transformer details."""
        message = f"Transformer '{transformer_name}' failed during {operation}"
        if original_error is not None:
            message += f": {original_error}"
        super().__init__(message, original_error=original_error)
        self.transformer_name = transformer_name
        self.operation = operation


class StorageError(MdxBridgeError):
    """Exception raised when a markup file cannot be read or written.

    Parameters
    ----------
    message : str
        Description of the failure
    path : str, optional
        The path involved
    original_error : Exception, optional
        The underlying OS error

    """

    def __init__(self, message: str, path: str | None = None, original_error: Exception | None = None):
        """Initialize the error with the file path."""
        super().__init__(message, original_error=original_error)
        self.path = path
