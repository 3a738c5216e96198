"""The tool bridge: connected providers, their unified catalog and session state."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from config import SandboxConfig, load_sandbox_config
from errors import ProviderConnectionError
from session import BridgeSettings, MCPServerDefinition, SessionState
from tools import (
    Connection,
    PreparedCall,
    ProviderBinding,
    SanitizerKind,
    ToolCatalog,
    ToolRouter,
    build_tool_catalog,
    connect_provider,
)

logger = logging.getLogger(__name__)

ConnectionFactory = Callable[[MCPServerDefinition], Awaitable[Connection]]


async def fulfill_tool_uses(
    router: ToolRouter,
    content_blocks: Iterable[Mapping[str, Any]],
    state: SessionState,
) -> List[Dict[str, Any]]:
    """Return one ``tool_result`` block per ``tool_use`` block, in block order.

    Arguments are sanitized one call at a time in block order, so a repository
    path set by an earlier call is visible to the later ones. Calls routed to
    the same connection then run one after another in block order; calls to
    different connections run concurrently.
    """
    prepared: List[PreparedCall] = []
    for block in content_blocks or ():
        call = router.build_tool_call(block)
        if call is None:
            continue
        prepared.append(router.prepare(call, state))

    if not prepared:
        return []

    lanes: Dict[Any, List[int]] = {}
    for index, item in enumerate(prepared):
        if item.route is None or item.error is not None:
            key: Any = ("rejected", index)
        else:
            key = id(item.route.connection)
        lanes.setdefault(key, []).append(index)

    results: List[Dict[str, Any]] = [{} for _ in prepared]

    async def run_lane(indexes: List[int]) -> None:
        for index in indexes:
            results[index] = await router.execute(prepared[index])

    await asyncio.gather(*(run_lane(indexes) for indexes in lanes.values()))
    return results


class ToolBridge:
    """Owns the provider connections and the state of one conversation."""

    def __init__(
        self,
        settings: BridgeSettings,
        *,
        sandbox: Optional[SandboxConfig] = None,
        connection_factory: Optional[ConnectionFactory] = None,
        state: Optional[SessionState] = None,
    ) -> None:
        self.settings = settings
        self.sandbox = sandbox or load_sandbox_config()
        self.state = state or SessionState()
        self._connect = connection_factory or connect_provider
        self._bindings: List[ProviderBinding] = []
        self._catalog = ToolCatalog()
        self._router = ToolRouter(self._catalog, self.sandbox)

    @property
    def catalog(self) -> ToolCatalog:
        return self._catalog

    @property
    def router(self) -> ToolRouter:
        return self._router

    @property
    def enabled(self) -> bool:
        return bool(self._bindings)

    def tool_definitions(self) -> List[Dict[str, Any]]:
        return self._catalog.tool_definitions()

    async def connect(self) -> List[ProviderBinding]:
        """Connect to every configured provider.

        Raises ``ProviderConnectionError`` for the first provider that cannot
        be reached, after closing whatever was already opened.
        """
        await self.aclose()
        bindings: List[ProviderBinding] = []
        for definition in self.settings.providers:
            try:
                connection = await self._connect(definition)
            except ProviderConnectionError:
                await _close_all(bindings)
                raise
            except Exception as exc:
                await _close_all(bindings)
                raise ProviderConnectionError(definition.name, str(exc) or type(exc).__name__) from exc
            except BaseException:
                await _close_all(bindings)
                raise
            bindings.append(
                ProviderBinding(
                    label=definition.label,
                    connection=connection,
                    sanitizer=SanitizerKind.parse(definition.sanitizer),
                )
            )
        self._bindings = bindings
        return list(bindings)

    async def build_catalog(self) -> ToolCatalog:
        """Rebuild the catalog and routing table from the connected providers."""
        catalog = await build_tool_catalog(
            self._bindings,
            on_collision=self.settings.on_collision,
            strict=self.settings.strict_catalog,
        )
        self._catalog = catalog
        self._router = ToolRouter(catalog, self.sandbox)
        logger.info("tool catalog ready: %d tools from %d providers", len(catalog.specs), len(self._bindings))
        return catalog

    async def enable(self) -> ToolCatalog:
        """Connect every provider and build the catalog.

        Any failure closes the connections opened so far before it propagates.
        """
        await self.connect()
        try:
            return await self.build_catalog()
        except BaseException:
            await self.aclose()
            raise

    async def fulfill(self, content_blocks: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        return await fulfill_tool_uses(self._router, content_blocks, self.state)

    def reset_session(self) -> None:
        self.state.reset()

    async def aclose(self) -> None:
        bindings, self._bindings = self._bindings, []
        await _close_all(bindings)
        self._catalog = ToolCatalog()
        self._router = ToolRouter(self._catalog, self.sandbox)

    async def __aenter__(self) -> "ToolBridge":
        await self.enable()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


async def _close_all(bindings: Sequence[ProviderBinding]) -> None:
    for binding in reversed(bindings):
        try:
            await binding.connection.aclose()
        except Exception as exc:
            logger.debug("closing provider %s failed: %s", binding.label, exc)


__all__ = ["ConnectionFactory", "ToolBridge", "fulfill_tool_uses"]
