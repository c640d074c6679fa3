"""HDMI-CEC support states."""

from __future__ import annotations

from enum import IntEnum


class HdmiCecState(IntEnum):
    """How much of HDMI-CEC is enabled."""

    DISABLED = 0
    CONTROL_ONLY = 1
    CONTROL_AND_WAKE = 2

    @classmethod
    def from_str(cls, text: str) -> HdmiCecState:
        """Parse a state from any of its accepted spellings, ignoring case."""
        value = text.lower()
        if value in ("disable", "disabled", "off"):
            return cls.DISABLED
        if value in ("control-only", "controlonly"):
            return cls.CONTROL_ONLY
        if value in ("control-wake", "control-and-wake", "controlandwake"):
            return cls.CONTROL_AND_WAKE
        raise ValueError(f"No enum match for value {value}")

    def __str__(self) -> str:
        return {
            HdmiCecState.DISABLED: "Disabled",
            HdmiCecState.CONTROL_ONLY: "ControlOnly",
            HdmiCecState.CONTROL_AND_WAKE: "ControlAndWake",
        }[self]

    def to_human_readable(self) -> str:
        """Return the lower-case, hyphenated name of the state."""
        return {
            HdmiCecState.DISABLED: "disabled",
            HdmiCecState.CONTROL_ONLY: "control-only",
            HdmiCecState.CONTROL_AND_WAKE: "control-and-wake",
        }[self]