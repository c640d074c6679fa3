"""Device identification and hardware-related enumerations."""

from __future__ import annotations

from enum import Enum, IntEnum

from steamos_manager.paths import path

SYS_VENDOR_PATH = "/sys/class/dmi/id/sys_vendor"
BOARD_NAME_PATH = "/sys/class/dmi/id/board_name"
PRODUCT_NAME_PATH = "/sys/class/dmi/id/product_name"


class _NamedEnum(Enum):
    """An enum whose values are its string forms, parsed case-insensitively."""

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def _parse(cls, text: str):
        wanted = text.lower()
        for member in cls:
            if str(member).lower() == wanted:
                return member
        raise ValueError(f"No {cls.__name__} matches {text!r}")


class SteamDeckVariant(_NamedEnum):
    """Steam Deck board variants."""

    UNKNOWN = "unknown"
    JUPITER = "jupiter"
    GALILEO = "galileo"

    @classmethod
    def from_str(cls, text: str) -> SteamDeckVariant:
        """Parse a variant name, ignoring case."""
        return cls._parse(text)


class DeviceType(_NamedEnum):
    """Known handheld device families."""

    UNKNOWN = "unknown"
    STEAM_DECK = "steam_deck"
    LEGION_GO = "legion_go"
    LEGION_GO_S = "legion_go_s"
    ROG_ALLY = "rog_ally"
    ROG_ALLY_X = "rog_ally_x"
    ZOTAC_GAMING_ZONE = "zotac_gaming_zone"

    @classmethod
    def from_str(cls, text: str) -> DeviceType:
        """Parse a device type name, ignoring case."""
        return cls._parse(text)


class FanControlState(IntEnum):
    """Who controls the fan."""

    BIOS = 0
    OS = 1

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_str(cls, text: str) -> FanControlState:
        """Parse ``BIOS`` or ``OS``, ignoring case."""
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"No FanControlState matches {text!r}") from None


class FactoryResetKind(IntEnum):
    """Which partitions a factory reset covers."""

    USER = 1
    OS = 2
    ALL = 3

    def __str__(self) -> str:
        return {
            FactoryResetKind.USER: "User",
            FactoryResetKind.OS: "OS",
            FactoryResetKind.ALL: "All",
        }[self]

    @classmethod
    def from_str(cls, text: str) -> FactoryResetKind:
        """Parse ``User``, ``OS`` or ``All``, ignoring case."""
        try:
            return cls[text.upper()]
        except KeyError:
            raise ValueError(f"No FactoryResetKind matches {text!r}") from None


def _read_trimmed(file: str) -> str:
    return path(file).read_text().rstrip()


def steam_deck_variant() -> SteamDeckVariant:
    """Return the Steam Deck variant, or UNKNOWN on other hardware."""
    if _read_trimmed(SYS_VENDOR_PATH) != "Valve":
        return SteamDeckVariant.UNKNOWN
    try:
        return SteamDeckVariant.from_str(_read_trimmed(BOARD_NAME_PATH))
    except ValueError:
        return SteamDeckVariant.UNKNOWN


def device_type() -> DeviceType:
    """Return the device family of this machine."""
    return device_variant()[0]


def device_variant() -> tuple[DeviceType, str]:
    """Return the device family together with its model identifier."""
    sys_vendor = _read_trimmed(SYS_VENDOR_PATH)
    product_name = _read_trimmed(PRODUCT_NAME_PATH)
    board_name = _read_trimmed(BOARD_NAME_PATH)

    match (sys_vendor, product_name, board_name):
        case ("ASUSTeK COMPUTER INC.", _, "RC71L"):
            return DeviceType.ROG_ALLY, board_name
        case ("ASUSTeK COMPUTER INC.", _, "RC72LA"):
            return DeviceType.ROG_ALLY_X, board_name
        case ("LENOVO", "83E1", _):
            return DeviceType.LEGION_GO, product_name
        case ("LENOVO", "83L3" | "83N6" | "83Q2" | "83Q3", _):
            return DeviceType.LEGION_GO_S, product_name
        case ("Valve", _, "Jupiter" | "Galileo"):
            return DeviceType.STEAM_DECK, board_name
        case ("ZOTAC", _, "G0A1W"):
            return DeviceType.ZOTAC_GAMING_ZONE, board_name
        case _:
            return DeviceType.UNKNOWN, "unknown"