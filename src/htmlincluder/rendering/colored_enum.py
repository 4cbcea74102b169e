# topmark:header:start
#
#   project      : HTMLIncluder
#   file         : colored_enum.py
#   file_relpath : src/htmlincluder/rendering/colored_enum.py
#   license      : MIT
#   copyright    : (c) 2025 HTMLIncluder contributors
#
# topmark:header:end

"""Color-aware enum primitives for human-facing rendering.

`ColoredStrEnum` is a `str, Enum` whose `.value` stays a plain string while a
colorizer (typically a yachalk style) is exposed through `.color`. It is used
for state enums that the CLI prints, such as the resolution state of a page.

Example:
    ```python
    from yachalk import chalk

    class Outcome(ColoredStrEnum):
        OK = ("ok", chalk.green)
        FAILED = ("failed", chalk.red_bright)

    print(Outcome.OK.value)  # 'ok'
    print(Outcome.OK.color("hello"))  # green "hello"
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol


class Colorizer(Protocol):
    """Callable that decorates a string for display.

    Compatible with `yachalk.ChalkBuilder.__call__`, which accepts a variadic
    list of arguments and a `sep` keyword.
    """

    def __call__(self, *args: object, sep: str = " ") -> str:
        """Colorize and concatenate the provided arguments."""
        ...


class ColoredStrEnum(str, Enum):
    """Enum whose *value* is a string and that carries an associated colorizer."""

    _value_: str
    _color: Colorizer

    def __new__(cls, text: str, color: Colorizer) -> ColoredStrEnum:
        """Construct a colored enum member.

        Args:
            text (str): The textual value for the enum member (stored in `_value_`).
            color (Colorizer): A callable used to colorize text for display.

        Returns:
            ColoredStrEnum: The newly constructed enum member.
        """
        obj: ColoredStrEnum = str.__new__(cls, text)
        obj._value_ = text
        obj._color = color
        return obj

    @property
    def value(self) -> str:
        """Return the textual value of the enum member."""
        return self._value_

    @property
    def color(self) -> Colorizer:
        """Return the colorizer associated with this member."""
        return self._color
