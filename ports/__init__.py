from .provider import ProviderTransport
from .repos import ProfilesRepoPort, ExtractionStatusRepoPort

__all__ = [
    "ProviderTransport",
    "ProfilesRepoPort",
    "ExtractionStatusRepoPort",
]
