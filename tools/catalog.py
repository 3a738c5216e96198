"""Unify the tool catalogs of several providers into one routing table."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from errors import CatalogError
from .connection import Connection
from .sanitizer import SanitizerKind
from .spec import ToolDescriptor, ToolSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProviderBinding:
    """A connected provider as the catalog builder sees it."""

    label: str
    connection: Connection
    sanitizer: SanitizerKind = SanitizerKind.NONE


@dataclass(frozen=True)
class RouteEntry:
    connection: Connection
    sanitizer: SanitizerKind
    label: str = ""


@dataclass(frozen=True)
class ToolCollision:
    tool_name: str
    previous: str
    winner: str


@dataclass
class ToolCatalog:
    """The model-facing tool list plus the name -> provider routing table."""

    specs: List[ToolSpec] = field(default_factory=list)
    routes: Dict[str, RouteEntry] = field(default_factory=dict)
    failures: Dict[str, CatalogError] = field(default_factory=dict)
    collisions: List[ToolCollision] = field(default_factory=list)

    def tool_definitions(self) -> List[Dict[str, object]]:
        return [spec.to_anthropic_definition() for spec in self.specs]

    def route(self, tool_name: str) -> Optional[RouteEntry]:
        return self.routes.get(tool_name)

    @property
    def tool_names(self) -> List[str]:
        return [spec.name for spec in self.specs]


async def build_tool_catalog(
    providers: Sequence[ProviderBinding],
    *,
    on_collision: str = "replace",
    strict: bool = False,
) -> ToolCatalog:
    """List every provider's tools concurrently and build a fresh catalog.

    A provider whose listing fails is skipped and recorded in
    ``ToolCatalog.failures``; with ``strict=True`` the failure is raised.
    When two providers declare the same name the later one in *providers*
    wins, unless ``on_collision="error"``.
    """
    if on_collision not in ("replace", "error"):
        raise ValueError("on_collision must be 'replace' or 'error'")

    listings = await asyncio.gather(
        *(provider.connection.list_tools() for provider in providers),
        return_exceptions=True,
    )

    catalog = ToolCatalog()
    by_name: Dict[str, ToolSpec] = {}

    for provider, listing in zip(providers, listings):
        if isinstance(listing, BaseException):
            if not isinstance(listing, Exception):
                raise listing
            error = CatalogError(provider.label, str(listing) or type(listing).__name__)
            if strict:
                raise error from listing
            logger.warning("%s", error)
            catalog.failures[provider.label] = error
            continue

        descriptors: List[ToolDescriptor] = list(listing)
        logger.info(
            "provider %s offers %d tools: %s",
            provider.label,
            len(descriptors),
            ", ".join(tool.name for tool in descriptors),
        )
        for descriptor in descriptors:
            existing = catalog.routes.get(descriptor.name)
            if existing is not None:
                collision = ToolCollision(descriptor.name, existing.label, provider.label)
                if on_collision == "error":
                    raise CatalogError(
                        provider.label,
                        f"tool '{descriptor.name}' is already provided by '{existing.label}'",
                    )
                logger.warning(
                    "tool '%s' from '%s' overrides the one from '%s'",
                    descriptor.name,
                    provider.label,
                    existing.label,
                )
                catalog.collisions.append(collision)

            by_name[descriptor.name] = ToolSpec.from_descriptor(descriptor, label=provider.label)
            catalog.routes[descriptor.name] = RouteEntry(
                connection=provider.connection,
                sanitizer=provider.sanitizer,
                label=provider.label,
            )

    catalog.specs = list(by_name.values())
    return catalog


__all__ = [
    "ProviderBinding",
    "RouteEntry",
    "ToolCatalog",
    "ToolCollision",
    "build_tool_catalog",
]
