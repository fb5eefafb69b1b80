"""Roll per-directory sizes up into cumulative subtree totals."""

from diskprobe.walker import DirectoryAggregate


def roll_up(aggregates: dict[str, DirectoryAggregate]) -> dict[str, DirectoryAggregate]:
    """
    Add every directory's totals into its parent, deepest directories first.

    Processing by descending depth means a directory has received all of its
    descendants' contributions before passing its own total upward. A parent
    path with no aggregate drops the contribution.

    Args:
        aggregates: Directory path -> immediate totals, as filled by the walker

    Returns:
        The same mapping, now holding cumulative totals
    """
    ordered = sorted(aggregates.values(), key=lambda agg: agg.depth, reverse=True)
    for agg in ordered:
        if not agg.parent:
            continue
        parent = aggregates.get(agg.parent)
        if parent is None:
            continue
        parent.size_bytes += agg.size_bytes
        parent.file_count += agg.file_count
    return aggregates
