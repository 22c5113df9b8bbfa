"""
Split value tuples into groups that each fit in one statement.

Packing is greedy and keeps the original order of the values: a group is
closed as soon as the next value would push the statement past the limit.
Values are never reordered to save statements, since callers commonly rely on
insert order (auto-increment ids, for one).
"""
import logging
from typing import Any, Callable, List, Sequence

from insert_batcher.exceptions import ValueSetTooLargeError
from insert_batcher.models import byte_size

logger = logging.getLogger(__name__)


def total_statement_bytes(
    values: Sequence[Any],
    reserved_bytes: int,
    size_func: Callable[[Any], int] = byte_size,
) -> int:
    """
    Bytes needed to insert every value in a single statement.

    Args:
        values: Pre-rendered value tuples
        reserved_bytes: Bytes each statement needs besides its values
        size_func: Function returning the byte size of one value

    Returns:
        Reserved bytes plus all values plus the commas between them
    """
    if not values:
        return reserved_bytes
    return reserved_bytes + sum(size_func(value) for value in values) + len(values) - 1


def partition_value_sets(
    values: Sequence[Any],
    reserved_bytes: int,
    max_bytes: int,
    size_func: Callable[[Any], int] = byte_size,
) -> List[List[Any]]:
    """
    Partition values into ordered groups that respect a statement size limit.

    Every value is checked before anything is returned, so an oversized value
    is reported before a single statement runs.

    Args:
        values: Pre-rendered value tuples, in insert order
        reserved_bytes: Bytes each statement needs besides its values
        max_bytes: Maximum size of one statement in bytes
        size_func: Function returning the byte size of one value

    Returns:
        List of groups; concatenated in order they give back ``values``

    Raises:
        ValueError: If ``values`` is empty or ``max_bytes`` is not positive
        ValueSetTooLargeError: If one value cannot fit in a statement on its own
    """
    if not values:
        raise ValueError("Cannot partition an empty list of values")
    if max_bytes <= 0:
        raise ValueError(f"max_bytes must be positive to partition values, got {max_bytes}")

    value_sets: List[List[Any]] = []
    current: List[Any] = []
    current_size = 0

    for value in values:
        value_size = size_func(value)

        insert_size = reserved_bytes + value_size
        if insert_size > max_bytes:
            raise ValueSetTooLargeError(insert_size, max_bytes)

        # one comma per value already in the group
        bytes_thus_far = reserved_bytes + current_size + value_size + len(current)
        if bytes_thus_far <= max_bytes:
            current.append(value)
            current_size += value_size
        else:
            value_sets.append(current)
            current = [value]
            current_size = value_size

    value_sets.append(current)

    logger.debug(
        f"Partitioned {len(values)} values into {len(value_sets)} groups "
        f"(reserved={reserved_bytes}, max_bytes={max_bytes})"
    )
    return value_sets
