"""Temperature conversion from provider units (Kelvin) to display units (Celsius)."""

KELVIN_OFFSET = 273.15


def to_display_unit(raw_temp: float) -> float:
    """Convert a Kelvin reading to degrees Celsius."""
    return raw_temp - KELVIN_OFFSET
