# formstate/core/errors.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Optional


class FormStateError(Exception):
    """
    Base exception class for errors within the form engine.
    """


class FieldValidationError(FormStateError):
    """
    Raised when a caller asks for an invalid field verdict to be turned into an
    exception. The engine itself reports field failures as outcomes.
    """

    def __init__(self, message: str, field_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.field_id = field_id


class ResourceLoadError(FormStateError):
    """
    Raised when the remote option source cannot produce a usable list: transport
    failure, non-success status, undecodable body, unexpected shape or timeout.
    """


class ReentrantSubmissionError(FormStateError):
    """
    Raised by a strict submission state machine when a submit is attempted
    while another submission is in flight. By default such attempts are
    ignored.
    """


class ConfigurationError(FormStateError):
    """
    Raised when engine configuration or rule registration violates its constraints.
    """
