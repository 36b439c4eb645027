"""
Command-line parameter compilation.

Turns structured parameters into a single command-line fragment that
can be appended to a base command. Quoting follows POSIX shell rules
via shlex, so embedded spaces and metacharacters never break
tokenization.
"""

import logging
import re
import shlex
import warnings
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

ParameterValue = Union[str, bool, int, float]
Parameters = Union[
    Sequence[Union[ParameterValue, Tuple[Any, ParameterValue]]],
    Mapping[Any, ParameterValue],
]

NON_STRING_DEPRECATION = (
    "Passing non-string parameters is deprecated, "
    "convert all parameters to string."
)

_NUMERIC = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def _is_numeric(key: Any) -> bool:
    """Check whether a parameter key is positional rather than a name."""
    if key is None or isinstance(key, (int, float)):
        return True
    return bool(_NUMERIC.match(str(key)))


def _entries(parameters: Parameters) -> List[Tuple[Optional[Any], Any]]:
    """Split parameters into ordered (name, value) entries."""
    if isinstance(parameters, (str, bytes)):
        raise TypeError(
            f"Parameters must be a sequence or mapping, not {type(parameters).__name__}"
        )
    if isinstance(parameters, Mapping):
        return list(parameters.items())

    entries = []
    for item in parameters:
        if isinstance(item, tuple):
            if len(item) != 2:
                raise TypeError(
                    f"Named parameters must be (name, value) pairs, got {item!r}"
                )
            entries.append((item[0], item[1]))
        else:
            entries.append((None, item))
    return entries


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise TypeError(
        f"Unsupported parameter value {value!r} ({type(value).__name__})"
    )


def compile_parameters(parameters: Parameters) -> str:
    """
    Compile parameters into a quoted command-line fragment.

    Named parameters are emitted as two tokens, the name then the value.
    Bare values and numeric keys emit only the value. Input order is
    preserved.

    Args:
        parameters: Sequence of values or (name, value) pairs, or a mapping
            of name to value

    Returns:
        Command-line fragment, empty if there are no parameters

    Raises:
        TypeError: If parameters is a plain string, or a value is not a
            str, bool, int or float
    """
    entries = _entries(parameters)

    if not all(isinstance(value, str) for _, value in entries):
        warnings.warn(NON_STRING_DEPRECATION, DeprecationWarning, stacklevel=2)
        logger.debug(f"Normalizing non-string parameters: {entries!r}")
        entries = [(key, _to_string(value)) for key, value in entries]

    tokens = []
    for key, value in entries:
        if not _is_numeric(key):
            tokens.append(str(key))
        tokens.append(value)

    return shlex.join(tokens)
