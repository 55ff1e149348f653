"""
Exception classes for thinslice.

Custom exception hierarchy for the sample bookkeeping and rebinning engine.
"""

from __future__ import annotations

from typing import Any

from pydantic import (
    ValidationError,
    ValidationInfo,
    WrapValidator,
)
from pydantic_core import ErrorDetails, InitErrorDetails, PydanticCustomError


class ThinSliceException(Exception):
    """
    Base exception class for all thinslice-related errors.

    Allows users to catch every thinslice-specific error with a single except clause.
    """


class InvalidDimension(ThinSliceException, ValueError):
    """
    Raised when a histogram is requested or filled with an unsupported number of axes.

    Only 1-, 2- and 3-dimensional histograms are supported. Also raised when the
    number of values passed to a fill does not match the dimensionality of the
    target histogram.
    """

    def __init__(self, ndim: int, message: str | None = None) -> None:
        self.ndim = ndim
        if message is None:
            message = f"Histograms must have between 1 and 3 axes, got {ndim}"
        super().__init__(message)


class UnknownChannel(ThinSliceException, KeyError):
    """
    Raised when a selection channel id is looked up but is not part of the sample.

    Fills on unknown channels never raise this; they are silently ignored.
    """

    def __init__(self, channel_id: int) -> None:
        self.channel_id = channel_id
        super().__init__(f"No selection channel with id {channel_id}")

    def __str__(self) -> str:
        return str(self.args[0])


class NotInitialized(ThinSliceException, RuntimeError):
    """
    Raised when the rebinned histograms are refilled before they were made.
    """


class DivisionByZeroFactor(ThinSliceException, ZeroDivisionError):
    """
    Raised when the normalization factor is reset while it is zero.
    """


def custom_error_msg(custom_messages: dict[str, str]) -> Any:
    r"""
    Customize an error message for pydantic validation errors.

    See https://github.com/pydantic/pydantic/discussions/8468.

    Example:

    >>> from typing import Annotated
    >>> from pydantic import BaseModel
    >>> from pydantic.types import StringConstraints
    >>> NameString = Annotated[
    ...     str,
    ...     StringConstraints(pattern=r"^[a-zA-Z0-9]*$"),
    ...     custom_error_msg({"string_pattern_mismatch": "The field {field_name} can only contain letters and numbers."}),
    ... ]
    >>> class Model(BaseModel):
    ...     name: NameString
    >>> Model(name="dog@123")  # doctest: +IGNORE_EXCEPTION_DETAIL
    Traceback (most recent call last):
    ...
    pydantic_core._pydantic_core.ValidationError: 1 validation error for Model
    name
      The field name can only contain letters and numbers. ...
    """

    def _validator(v: Any, next_: Any, ctx: ValidationInfo) -> Any:
        try:
            return next_(v, ctx)
        except ValidationError as exc:
            new_errors: list[InitErrorDetails | ErrorDetails] = []
            for error in exc.errors():
                error["loc"] = error["loc"][1:]  # to skip current location
                custom_message = custom_messages.get(error["type"])

                if custom_message:
                    err_ctx = error.get("ctx", {}).copy()

                    # Add input and ValidationInfo data to context
                    err_ctx["input"] = error["input"]
                    if ctx.data:
                        err_ctx.update(ctx.data)

                    new_error = InitErrorDetails(
                        type=PydanticCustomError(
                            error["type"], custom_message, err_ctx
                        ),
                        loc=error["loc"],
                        input=error["input"],
                    )

                    new_errors.append(new_error)
                else:
                    new_errors.append(error)

            raise ValidationError.from_exception_data(
                title=exc.title,
                line_errors=new_errors,  # type: ignore[arg-type]
            ) from None

    return WrapValidator(_validator)


__all__ = (
    "DivisionByZeroFactor",
    "InvalidDimension",
    "NotInitialized",
    "ThinSliceException",
    "UnknownChannel",
    "custom_error_msg",
)
