"""Pool data providers — which vaults to read for each mint and venue.

Pool discovery and account-layout decoding live elsewhere; the static provider
just serves vault pairs listed in a JSON file:

    {
      "<mint>": {
        "raydium": [{"base_vault": "...", "quote_vault": "...", "pool_id": "..."}],
        "pump":    [{"base_vault": "...", "quote_vault": "..."}]
      }
    }
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Protocol

from solarb.models.price import PoolVaults

logger = logging.getLogger(__name__)


class PoolProvider(Protocol):
    async def get_pools(self, mint: str) -> dict[str, list[PoolVaults]]:
        ...


class StaticPoolProvider:
    """Serve a fixed mint → venue → pools mapping."""

    def __init__(self, pools: Mapping[str, Mapping[str, list[PoolVaults]]] | None = None):
        self._pools: dict[str, dict[str, list[PoolVaults]]] = {
            mint: {venue: list(items) for venue, items in venues.items()}
            for mint, venues in (pools or {}).items()
        }

    async def get_pools(self, mint: str) -> dict[str, list[PoolVaults]]:
        """mint의 베뉴별 풀 목록. 없으면 빈 dict."""
        venues = self._pools.get(mint, {})
        return {venue: list(items) for venue, items in venues.items()}

    @property
    def mints(self) -> list[str]:
        return list(self._pools)

    @classmethod
    def from_dict(cls, raw: Mapping) -> StaticPoolProvider:
        """JSON dict → provider. 형식이 틀리면 ValueError."""
        if not isinstance(raw, Mapping):
            raise ValueError("pools config must be an object keyed by mint")
        pools: dict[str, dict[str, list[PoolVaults]]] = {}
        for mint, venues in raw.items():
            if not isinstance(venues, Mapping):
                raise ValueError(f"pools for {mint} must be an object keyed by venue")
            pools[mint] = {}
            for venue, entries in venues.items():
                if not isinstance(entries, list):
                    raise ValueError(f"{mint}/{venue}: expected a list of pools")
                parsed = []
                for entry in entries:
                    try:
                        parsed.append(PoolVaults(
                            venue=venue,
                            base_vault=entry["base_vault"],
                            quote_vault=entry["quote_vault"],
                            pool_id=entry.get("pool_id"),
                        ))
                    except (KeyError, TypeError, AttributeError) as exc:
                        raise ValueError(f"{mint}/{venue}: invalid pool entry {entry!r}") from exc
                pools[mint][venue] = parsed
        return cls(pools)

    @classmethod
    def from_file(cls, path: str | Path) -> StaticPoolProvider:
        path = Path(path)
        with path.open(encoding="utf-8") as f:
            raw = json.load(f)
        provider = cls.from_dict(raw)
        logger.info("Loaded pool config for %d mints from %s", len(provider.mints), path)
        return provider
