"""
Date: 2026-10-18
Description:

Fold one dot-path and its value into a nested mapping.

The root node is owned by the caller and handed in on every call; merge
returns the (possibly replaced) node so the caller can store it back.
Whatever already sits at the leaf is overwritten, and a scalar found half way
down the path is replaced by a fresh container so the rest of the path fits.
"""

import logging
from collections.abc import MutableMapping
from typing import Any, List

from dotbinder.containers import container_for
from dotbinder.exceptions import MalformedPath
from dotbinder.parameters import ContainerKind

logger = logging.getLogger(__name__)


def split_path(path: str, delimiter: str = ".", max_depth: int = None) -> List[str]:
    """
    Split *path* into its segments, rejecting empty ones.
    Args:
        path (str): The dotted path.
        delimiter (str): Segment separator.
        max_depth (int): Deepest path accepted, unlimited when None.
    Returns:
        List[str]: The segments.
    Raises:
        MalformedPath: If the path is empty, has an empty segment or is too deep.
    """
    segments = path.split(delimiter)
    if any(not s for s in segments):
        raise MalformedPath(f"Empty segment in path '{path}'")
    if max_depth is not None and len(segments) > max_depth:
        raise MalformedPath(f"Path '{path}' is {len(segments)} levels deep, limit is {max_depth}")
    return segments


def merge(
        kind: ContainerKind,
        node: Any,
        path: str,
        value: Any,
        delimiter: str = ".",
) -> MutableMapping:
    """
    Set *value* at *path* below *node*.
    Args:
        kind (ContainerKind): Container kind for every node that has to be created.
        node (Any): Current node; None or a non-mapping is replaced by a new container.
        path (str): Remaining dotted path, relative to *node*. Must already be validated.
        value (Any): Leaf value.
        delimiter (str): Segment separator.
    Returns:
        MutableMapping: The node holding *value* at *path*.
    """
    if not isinstance(node, MutableMapping):
        if node is not None:
            logger.debug("Replacing leaf %r with a container to fit '%s'", node, path)
        node = container_for(kind)

    head, sep, tail = path.partition(delimiter)
    logger.debug("node = %s, path = %s, head = %s", node, path, head)

    if not sep:
        logger.debug("Reached the path's end. Setting %s = %r", head, value)
        node[head] = value
    else:
        node[head] = merge(kind, node.get(head), tail, value, delimiter)
    return node
