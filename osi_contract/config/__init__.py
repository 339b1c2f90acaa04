from .defaults import NegotiationDefaults
from .loader import (
    apply_overrides,
    dump_negotiation,
    load_capability,
    load_capability_file,
    load_capability_preset,
    load_request_file,
)

__all__ = [
    "NegotiationDefaults",
    "apply_overrides",
    "dump_negotiation",
    "load_capability",
    "load_capability_file",
    "load_capability_preset",
    "load_request_file",
]
