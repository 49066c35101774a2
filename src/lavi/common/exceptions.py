"""
Exception hierarchy for the Lavi longitudinal analysis library.

Every failure raised by the library derives from ``LaviError`` so callers can
catch library errors with a single except clause. Analysis runs are batch
operations: any of these exceptions escaping ``FrameAnalyst.run()`` means the
whole run is aborted and its incremental state can no longer be trusted.

Hierarchy::

    LaviError
    ├── ValidationError
    │   └── DataFormatError
    ├── ConfigurationError
    ├── DataIntegrityError
    └── InvalidOperationError
"""

from typing import Dict, Any, Optional, List, Union
import traceback

# Containers rendered longer than this are summarised in messages
_MAX_DETAIL_LENGTH = 100


def _render_value(key: str, value: Any) -> str:
    if isinstance(value, (list, dict, set, tuple)) and len(str(value)) > _MAX_DETAIL_LENGTH:
        return f"{key}=<{type(value).__name__} with {len(value)} items>"
    return f"{key}={value}"


def _with_entries(base: Optional[Dict[str, Any]], **entries: Any) -> Dict[str, Any]:
    """Copy ``base`` and add every entry whose value is set."""
    merged = dict(base or {})
    merged.update({key: value for key, value in entries.items() if value is not None})
    return merged


class LaviError(Exception):
    """
    Base exception for all Lavi errors.

    Parameters
    ----------
    message : str
        What went wrong
    details : Dict[str, Any], optional
        Structured data describing the failure (offending values, limits)
    cause : Exception, optional
        Underlying exception; also set as ``__cause__``
    context : Dict[str, Any], optional
        Where it went wrong (operation, ids involved)

    Examples
    --------
    >>> raise LaviError("Frame analysis failed")
    >>> raise LaviError("Bad window", details={"dropped": 4, "consumed": 2})
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        self.message = message
        self.details = details or {}
        self.cause = cause
        self.context = context or {}
        super().__init__(self._compose())
        if cause is not None:
            self.__cause__ = cause

    def _compose(self) -> str:
        text = self.message
        if self.details:
            text += " (Details: " + ", ".join(_render_value(k, v) for k, v in self.details.items()) + ")"
        if self.context:
            text += " (Context: " + ", ".join(f"{k}={v}" for k, v in self.context.items()) + ")"
        return text

    def add_context(self, **kwargs: Any) -> "LaviError":
        """Attach more context and return self, for chaining in ``raise`` statements."""
        self.context.update(kwargs)
        return self

    def get_debug_info(self) -> Dict[str, Any]:
        """Everything known about the error as a plain dictionary."""
        return {
            "exception_type": type(self).__name__,
            "message": self.message,
            "details": self.details,
            "context": self.context,
            "cause": None if self.cause is None else str(self.cause),
            "traceback": traceback.format_exc() if self.__traceback__ is not None else None,
        }


class ValidationError(LaviError):
    """
    An input value is not acceptable.

    ``field``, ``value`` and ``expected`` are kept as attributes and copied
    into ``details`` (the value under ``invalid_value``).
    """

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs
    ) -> None:
        self.field = field
        self.value = value
        self.expected = expected

        prefix = f"Validation error in field '{field}'" if field else "Validation error"
        super().__init__(
            f"{prefix}: {message}",
            details=_with_entries(details, field=field, invalid_value=value, expected=expected),
            **kwargs
        )


class DataFormatError(ValidationError):
    """
    A malformed act log (LAX file, CSV, DataFrame) or output record.

    Examples
    --------
    >>> raise DataFormatError(
    ...     "Act is missing the 'src' attribute",
    ...     format_type="LAX",
    ...     file_path="testdata/test1.lax"
    ... )
    """

    def __init__(
        self,
        message: str,
        format_type: Optional[str] = None,
        file_path: Optional[str] = None,
        line_number: Optional[int] = None,
        **kwargs
    ) -> None:
        kwargs["details"] = _with_entries(
            kwargs.get("details"),
            format_type=format_type or None,
            file_path=file_path or None,
            line_number=line_number,
        )
        super().__init__(message, **kwargs)


class ConfigurationError(LaviError):
    """
    Invalid configuration or out-of-order usage.

    Covers bad parameter values (a non-positive frame size) as well as
    lifecycle mistakes such as running an analyst before ``setup()`` or
    mutating a community builder after ``freeze()``. When both ``parameter``
    and ``valid_options`` are given, the options are appended to the message.

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "Analyst is not initialized yet; call setup() first",
    ...     function="FrameAnalyst.run"
    ... )
    """

    def __init__(
        self,
        message: str,
        parameter: Optional[str] = None,
        value: Optional[Any] = None,
        valid_options: Optional[List[Any]] = None,
        function: Optional[str] = None,
        **kwargs
    ) -> None:
        self.parameter = parameter
        self.value = value
        self.valid_options = valid_options
        self.function = function

        if parameter and valid_options:
            message = f"{message}. Valid options for '{parameter}': {valid_options}"
        kwargs["details"] = _with_entries(
            kwargs.get("details"),
            parameter=parameter or None,
            invalid_value=value,
            valid_options=valid_options or None,
            function=function or None,
        )
        super().__init__(message, **kwargs)


class DataIntegrityError(LaviError):
    """
    Community or ego-network state is inconsistent.

    Raised for replies referencing unknown acts, duplicate act ids, lookups of
    unknown ids and ego-network set operations that would corrupt the
    incremental window state (removing a non-member, re-adding a member).
    ``act_id``, ``actor_id`` and ``operation`` go into ``context``.
    """

    def __init__(
        self,
        message: str,
        act_id: Optional[int] = None,
        actor_id: Optional[int] = None,
        operation: Optional[str] = None,
        **kwargs
    ) -> None:
        self.act_id = act_id
        self.actor_id = actor_id
        self.operation = operation
        kwargs["context"] = _with_entries(
            kwargs.get("context"),
            act_id=act_id,
            actor_id=actor_id,
            operation=operation or None,
        )
        super().__init__(message, **kwargs)


class InvalidOperationError(LaviError):
    """
    An operation does not apply to the given object.

    The canonical case is asking a ``Call`` act for its target actor: calls
    start a conversation and have no target by definition.
    """

    def __init__(self, message: str, operation: Optional[str] = None, **kwargs) -> None:
        self.operation = operation
        kwargs["context"] = _with_entries(kwargs.get("context"), operation=operation or None)
        super().__init__(message, **kwargs)


def validate_parameter(
    value: Any,
    valid_options: List[Any],
    parameter_name: str,
    function_name: Optional[str] = None
) -> None:
    """
    Check that ``value`` is one of ``valid_options``.

    Raises
    ------
    ConfigurationError
        Listing the valid options
    """
    if value in valid_options:
        return
    raise ConfigurationError(
        f"Invalid value for parameter '{parameter_name}': {value}",
        parameter=parameter_name,
        value=value,
        valid_options=valid_options,
        function=function_name
    )


def require_positive(
    value: Union[int, float],
    parameter_name: str,
    allow_zero: bool = False
) -> None:
    """
    Check that a numeric parameter is positive (or non-negative with ``allow_zero``).

    Raises
    ------
    ConfigurationError
        If the bound is violated
    """
    if value > 0 or (allow_zero and value == 0):
        return
    requirement = "non-negative" if allow_zero else "positive"
    raise ConfigurationError(
        f"Parameter '{parameter_name}' must be {requirement}, got {value}",
        parameter=parameter_name,
        value=value
    )
