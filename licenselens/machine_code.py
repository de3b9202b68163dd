"""A machine code supplied by the application itself."""

from __future__ import annotations


class StaticMachineCode:
    """Holds a machine code that was set explicitly rather than computed."""

    def __init__(self, machine_code: str = "") -> None:
        self._machine_code = machine_code

    def set_machine_code(self, machine_code: str) -> None:
        """Replace the stored machine code."""
        self._machine_code = machine_code

    def get_machine_code(self) -> str:
        """Return the stored machine code."""
        return self._machine_code