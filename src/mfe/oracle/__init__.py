from .gateway import PendingRequest, RandomnessGateway
from .local import LocalRandomnessOracle, OracleRequest

__all__ = [
    "LocalRandomnessOracle",
    "OracleRequest",
    "PendingRequest",
    "RandomnessGateway",
]
