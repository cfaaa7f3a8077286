"""Human-readable formatting helpers."""

KB = 1024
MB = 1024 * KB
GB = 1024 * MB


def size_format(size: int) -> str:
    """
    Format a byte count for display.

    Whole bytes below 1 KB, whole kilobytes below 1 MB, one decimal for
    megabytes and two decimals for gigabytes.

    Raises:
        ValueError: If size is negative
    """
    if size < 0:
        raise ValueError(f"Size must be non-negative, got {size}")
    if size < KB:
        return f"{size} B"
    if size < MB:
        return f"{size // KB} KB"
    if size < GB:
        return f"{size / MB:.1f} MB"
    return f"{size / GB:.2f} GB"
