"""formstate: headless interactive form engine

This package validates form input field by field against declarative rules and
coordinates the asynchronous work an interactive registration form needs.

Responsibilities:
    - Declarative rule registry for every validated field
    - Field validation with a memoized verdict per field
    - Debounced coordination of high-frequency input events
    - Remote option loading with a bounded timeout and an embedded fallback
    - Submission state machine guarding against re-entrant submits

Interactions:
    - Presentation layer through the PresentationAdapter protocol
    - Remote country listing over HTTP (httpx)
    - asyncio event loop for timers and suspension points
    - Logging system for diagnostics

Cross-cutting Concerns:
    Concurrency:
        - Single-threaded cooperative scheduling on one asyncio loop
        - The submission state flag is the only mutual exclusion guard

    Error Handling:
        - Structured error hierarchy rooted at FormStateError
        - Every runtime failure path has a silent, defined recovery

    Logging:
        - Standard library logging, one logger per module
"""

from formstate.core.config import FormConfig
from formstate.core.engine import ValidationEngine
from formstate.core.outcomes import Invalid, Valid, ValidationOutcome
from formstate.core.registry import RuleRegistry, default_registry
from formstate.runtime.controller import FormController
from formstate.runtime.debounce import Debouncer, debounce
from formstate.runtime.loader import LoaderStatus, OptionList, OptionLoader
from formstate.runtime.log_config import configure_logging
from formstate.runtime.presentation import MemoryPresentation
from formstate.runtime.submission import SubmissionResult, SubmissionState, SubmissionStateMachine

__version__ = "0.1.0"

__all__ = [
    "Debouncer",
    "FormConfig",
    "FormController",
    "Invalid",
    "LoaderStatus",
    "MemoryPresentation",
    "OptionList",
    "OptionLoader",
    "RuleRegistry",
    "SubmissionResult",
    "SubmissionState",
    "SubmissionStateMachine",
    "Valid",
    "ValidationEngine",
    "ValidationOutcome",
    "configure_logging",
    "debounce",
    "default_registry",
]
