"""
Date: 2026-10-18
Description:

Flat (dotted-name, raw-value) parameters and the binding target they are
bound against.

The public surface is the Parameters collection: build it from a query string,
pairs or a mapping, then ask it for_target(target) to get the parameters that
address that target, in submission order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Mapping, Optional, Tuple, Type, Union
from urllib.parse import parse_qsl

from dotbinder.exceptions import DecodeError, EmptyInputError

logger = logging.getLogger(__name__)

ContainerKind = Union[str, type]


@dataclass(frozen=True)
class Target:
    """
    Declared shape an instantiator is asked to produce.

    Attributes:
        name (str): Root segment the parameters are addressed to. Empty binds every parameter.
        kind (Optional[ContainerKind]): Registered container tag ("default", "ordered", ...) or a
            mapping type. None falls back to the configured default kind.
        key_type (type): Declared key type of the mapping, unless *kind* is parameterized.
    """
    name: str = ""
    kind: Optional[ContainerKind] = None
    key_type: Type = str


@dataclass(frozen=True)
class Parameter:
    name: str
    value: str

    def addresses(self, target: Target, delimiter: str = ".") -> bool:
        """Does this parameter live under *target*'s root segment?"""
        if not target.name:
            return True
        return self.name.startswith(target.name + delimiter)

    def relative_path(self, target: Target, delimiter: str = ".") -> str:
        """Path of this parameter with *target*'s root segment stripped."""
        if not target.name:
            return self.name
        return self.name[len(target.name) + len(delimiter):]


def _to_str(raw: Union[str, bytes]) -> str:
    """
    Return *raw* as UTF-8 text or raise.
    Args:
        raw (Union[str, bytes]): The raw query string.
    Returns:
        str: The query string as text, surrounding whitespace removed.
    Raises:
        DecodeError: If bytes cannot be decoded as UTF-8.
        EmptyInputError: If the input is missing, empty or whitespace only.
    """
    if raw is None:
        raise EmptyInputError("Incoming query string is missing")
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.exception("Could not decode incoming bytes")
            raise DecodeError("Query string is not valid UTF-8") from e
    raw = raw.strip()
    if not raw:
        raise EmptyInputError("Incoming query string is empty or whitespace only")
    return raw


class Parameters:
    """
    Ordered, read-only collection of parameters.
    Ordering matters: for the same path the later parameter wins.
    """

    def __init__(self, *parameters: Parameter):
        self._parameters: Tuple[Parameter, ...] = tuple(parameters)

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, Any]]) -> "Parameters":
        return cls(*(Parameter(str(name), str(value)) for name, value in pairs))

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "Parameters":
        return cls.from_pairs(mapping.items())

    @classmethod
    def from_query_string(cls, raw: Union[str, bytes]) -> "Parameters":
        """
        Decode an URL-encoded query string (a=1&b.c=2) into parameters.
        Blank values are kept as empty strings; repeated names are kept in order.
        Args:
            raw (Union[str, bytes]): The query string, with or without a leading '?'.
        Returns:
            Parameters: The decoded parameters in submission order.
        """
        text = _to_str(raw).lstrip("?")
        pairs = parse_qsl(text, keep_blank_values=True)
        logger.debug("Decoded %d parameters from query string", len(pairs))
        return cls.from_pairs(pairs)

    def for_target(self, target: Target, delimiter: str = ".") -> List[Parameter]:
        """
        Filter down to the parameters addressing *target*, keeping their relative order.
        Args:
            target (Target): The binding target.
            delimiter (str): Path segment separator.
        Returns:
            List[Parameter]: The relevant parameters.
        """
        relevant = [p for p in self._parameters if p.addresses(target, delimiter)]
        logger.debug(
            "%d of %d parameters are relevant for target '%s'",
            len(relevant), len(self._parameters), target.name,
        )
        return relevant

    def __iter__(self) -> Iterator[Parameter]:
        return iter(self._parameters)

    def __len__(self) -> int:
        return len(self._parameters)

    def __repr__(self) -> str:
        return f"Parameters{self._parameters!r}"
