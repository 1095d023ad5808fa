"""
Module Store - Append-only sink for saved modules
"""

import logging
from abc import ABC, abstractmethod
from typing import List

from models.schemas import Module

class ModuleStore(ABC):
    """Where saved modules go. Records are appended, never updated or removed.

    Implementations raise SinkFailure when a save cannot be accepted.
    """

    @abstractmethod
    async def append(self, module: Module) -> None:
        ...

    @abstractmethod
    async def list_all(self) -> List[Module]:
        """Every saved module, in insertion order."""

class InMemoryModuleStore(ModuleStore):
    """Process-lifetime store; contents are lost on restart."""

    def __init__(self):
        self._modules: List[Module] = []

    async def append(self, module: Module) -> None:
        self._modules.append(module.model_copy(deep=True))
        logging.info(f"Stored module '{module.module_name}' ({len(self._modules)} total)")

    async def list_all(self) -> List[Module]:
        return list(self._modules)

    def __len__(self) -> int:
        return len(self._modules)
