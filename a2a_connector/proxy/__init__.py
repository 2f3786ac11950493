"""Transform Pipeline and the reverse proxy that drives it."""

from .pipeline import PreparedRequest, RequestOutcome, TransformPipeline
from .reverse_proxy import LegacyReverseProxy, strip_hop_by_hop

__all__ = [
    "LegacyReverseProxy",
    "PreparedRequest",
    "RequestOutcome",
    "TransformPipeline",
    "strip_hop_by_hop",
]
