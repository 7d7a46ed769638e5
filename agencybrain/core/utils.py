"""Small helpers shared across apps."""


def round_percent(part: int, whole: int) -> int:
    """
    part / whole as a whole-number percentage, rounding halves up.

    Returns 0 when whole is 0.
    """
    if whole <= 0:
        return 0
    return (part * 200 + whole) // (whole * 2)
