"""Client address helpers for webhook source checks."""
from __future__ import annotations

import ipaddress
from typing import Iterable, Optional


def is_ip_allowed(remote_ip: Optional[str], allowlist: Optional[Iterable[str]]) -> bool:
    """True when remote_ip matches one of the plain IPs or CIDR blocks.

    An empty allowlist permits everyone; an unparsable address permits no one.
    """
    entries = [e.strip() for e in allowlist or () if e and e.strip()]
    if not entries:
        return True
    if not remote_ip:
        return False
    try:
        rip = ipaddress.ip_address(remote_ip)
    except ValueError:
        return False
    for entry in entries:
        try:
            if "/" in entry:
                if rip in ipaddress.ip_network(entry, strict=False):
                    return True
            elif rip == ipaddress.ip_address(entry):
                return True
        except ValueError:
            continue
    return False
