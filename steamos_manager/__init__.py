"""SteamOS device management: HDMI-CEC states, device detection, controller inhibition, jobs and daemon files."""

__version__ = "25.5.2"