"""
General utility functions for the CLI application.
"""

_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_bytes(size: int) -> str:
    """
    Format a byte count for humans, using powers of 1024.

    Args:
        size: Number of bytes. Negative values are treated as 0.

    Returns:
        str: e.g. "512B", "1.50KB", "3.00MB".
    """
    value = float(max(size, 0))
    for unit in _UNITS:
        if value < 1024 or unit == _UNITS[-1]:
            if unit == "B":
                return f"{int(value)}B"
            return f"{value:.2f}{unit}"
        value /= 1024
    return f"{value:.2f}{_UNITS[-1]}"
