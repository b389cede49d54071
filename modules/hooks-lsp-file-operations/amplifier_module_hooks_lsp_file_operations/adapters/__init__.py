"""File explorer integrations, one instance per supported plugin."""

from .base import SourceAdapter
from .neo_tree import NeoTreeAdapter
from .nvim_tree import NvimTreeAdapter
from .triptych import TriptychAdapter

__all__ = ["ADAPTERS", "NeoTreeAdapter", "NvimTreeAdapter", "SourceAdapter", "TriptychAdapter"]

ADAPTERS: list[SourceAdapter] = [NvimTreeAdapter(), NeoTreeAdapter(), TriptychAdapter()]
