from __future__ import annotations

import ipaddress
from typing import Iterable, List, Union

Network = Union[ipaddress.IPv4Network, ipaddress.IPv6Network]


class NetblockMatcher:
    """
    Decides whether an address belongs to one of our own networks.

    networks
      CIDR strings such as "10.0.0.0/8". Host bits are ignored, so
      "10.1.2.3/8" means 10.0.0.0/8.

    Anything that is not a literal IP address (host names, "unknown") is
    treated as external.
    """

    def __init__(self, networks: Iterable[str] = ()):
        self.networks: List[Network] = [ipaddress.ip_network(n, strict=False) for n in networks]

    def is_internal(self, addr: str) -> bool:
        try:
            ip = ipaddress.ip_address(addr)
        except ValueError:
            return False
        # Mixed v4/v6 membership is simply False.
        return any(ip in net for net in self.networks)
