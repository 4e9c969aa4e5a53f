"""Temperature presets — named sampling modes for common tasks.

Each mode maps to the temperature recommended for that kind of work.
Users pick one with ``/mode <name>`` and can fine-tune with ``/temp``.
"""

from __future__ import annotations

MODES: dict[str, float] = {
    "code": 0.0,
    "data": 1.0,
    "chat": 1.3,
    "translate": 1.3,
    "creative": 1.5,
}


def resolve_mode(name: str) -> float:
    """Return the temperature for a named mode.

    Raises:
        ValueError: If the mode name is unknown.
    """
    key = name.strip().lower()
    if key not in MODES:
        valid = ", ".join(MODES)
        msg = f"Unknown mode: '{name}'. Choose from: {valid}"
        raise ValueError(msg)
    return MODES[key]


def matching_modes(temperature: float) -> list[str]:
    """Return every mode whose temperature equals ``temperature``."""
    return [name for name, value in MODES.items() if value == temperature]


def format_modes() -> str:
    """Format the mode table for help output, e.g. ``code(0.0), data(1.0)``."""
    return ", ".join(f"{name}({value})" for name, value in MODES.items())
