# formstate/interfaces/types.py
# Copyright (c) 2024 Brad Edwards
# Licensed under the MIT License - see LICENSE file for details
from typing import Any, Awaitable, Callable, Union

FieldID = str

# Callback Types
ReadinessCallback = Callable[[], Any]
Handler = Callable[..., Union[None, Awaitable[None]]]
