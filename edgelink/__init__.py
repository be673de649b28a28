"""Client console for a network-attached device: Wi-Fi join, Ethernet setup
and OTA firmware updates over the device's HTTP/JSON API."""

__version__ = "0.1.0"
