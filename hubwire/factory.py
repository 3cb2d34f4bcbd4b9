from __future__ import annotations
from typing import Dict, List, Optional, Type, Union

from .converter import TypeConverter
from .protocol import HubProtocol, JSONHubProtocol, MessagePackHubProtocol

_PROTOCOLS: Dict[str, Type[HubProtocol]] = {
    JSONHubProtocol.name:        JSONHubProtocol,
    MessagePackHubProtocol.name: MessagePackHubProtocol,
}

def available_protocols() -> List[str]:
    return sorted(_PROTOCOLS)

def hub_protocol(protocol: Union[str, HubProtocol] = "json",
                 *,
                 type_converter: Optional[TypeConverter] = None) -> HubProtocol:
    """
    One-liner factory:
      hub_protocol()                                  -> JSONHubProtocol
      hub_protocol("messagepack")                     -> MessagePackHubProtocol
      hub_protocol("json", type_converter=MyConverter())

    - protocol: registered name (case-insensitive) or a HubProtocol instance, returned as is
    - type_converter: replaces the protocol's default admissibility checker
    """
    if isinstance(protocol, HubProtocol):
        if type_converter is not None:
            raise ValueError("type_converter cannot be combined with a protocol instance")
        return protocol

    cls = _PROTOCOLS.get(protocol.lower())
    if cls is None:
        raise ValueError(f"Unknown hub protocol: {protocol}")
    return cls(type_converter)
