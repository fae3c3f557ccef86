"""Time label formatting."""


def format_time(seconds: float) -> str:
    """
    Format a duration as ``H:MM:SS.mmm``, dropping the hours when zero.

    Negative input is treated as zero; sub-millisecond fractions are truncated.

    Examples:
        >>> format_time(3.5)
        '0:03.500'
        >>> format_time(3723.25)
        '1:02:03.250'
    """
    # epsilon keeps 1.001 from flooring to 1000 ms
    total_ms = int(max(0.0, seconds) * 1000 + 1e-6)
    hours, rem = divmod(total_ms, 3_600_000)
    minutes, rem = divmod(rem, 60_000)
    secs, millis = divmod(rem, 1000)

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}.{millis:03d}"
    return f"{minutes}:{secs:02d}.{millis:03d}"
