"""Use case for applying an Ethernet addressing request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from edgelink.domain.ports import EthernetPort, UseCaseError
from edgelink.domain.validation import EthernetRequest, validate_ethernet_request
from edgelink.usecases.error_mapping import map_api_error


@dataclass
class ConnectEthernet:
    """Validate an addressing request and issue ``/ethConnect.json``."""

    ethernet_port: EthernetPort

    def __call__(
        self,
        *,
        mode: Optional[str],
        ip: str = "",
        subnet: str = "",
        gateway: str = "",
        dns: str = "",
    ) -> EthernetRequest:
        """Send the request; status polling only starts if this returns.

        Raises:
            ValidationError: On malformed static addressing. No request is made.
            UseCaseError: If the device could not be reached or rejected the
                request; the message carries the raw adapter error.
        """
        request = validate_ethernet_request(mode, ip=ip, subnet=subnet, gateway=gateway, dns=dns)
        try:
            self.ethernet_port.connect_ethernet(request.to_headers())
        except UseCaseError:
            raise
        except Exception as exc:
            raise map_api_error(
                exc,
                default_code="ETH_CONNECT_FAILED",
                default_message="Failed to connect Ethernet.",
            ) from exc
        return request


__all__ = ["ConnectEthernet"]
