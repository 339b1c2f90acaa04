from .capability import SimulatorCapability, TechnologyCapability
from .resolver import NegotiationResolver, NegotiationResult, resolve, select_preferred
from .timing import align_up, first_update_time, update_instants

__all__ = [
    "SimulatorCapability",
    "TechnologyCapability",
    "NegotiationResolver",
    "NegotiationResult",
    "resolve",
    "select_preferred",
    "align_up",
    "first_update_time",
    "update_instants",
]
