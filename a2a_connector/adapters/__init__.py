"""Legacy system adapters.

Defines the adapter contract and the REST implementation used for every
supported ``adapter.type``.
"""

from .base import AdapterType, LegacyAdapter
from .registry import create_adapter
from .rest import RestAdapter

__all__ = ["AdapterType", "LegacyAdapter", "RestAdapter", "create_adapter"]
