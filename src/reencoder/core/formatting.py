"""Human-readable formatting helpers."""


def format_mb(size: int) -> str:
    """Format a byte count in megabytes with two decimals (e.g. '95.37 MB')."""
    return f"{size / 1_048_576:.2f} MB"
