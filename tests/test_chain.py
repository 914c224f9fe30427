"""Tests for the Solana RPC balance reader and the static pool provider."""

from __future__ import annotations

import asyncio
import json

import aiohttp
import pytest
from aioresponses import aioresponses

from solarb.chain.balance_reader import SolanaRpcBalanceReader
from solarb.chain.pool_provider import StaticPoolProvider
from solarb.errors import BalanceReadError
from solarb.models.price import PoolVaults, TokenBalance

RPC_URL = "https://rpc.test.local"


class TestSolanaRpcBalanceReader:
    async def test_reads_balance(self):
        with aioresponses() as m:
            m.post(RPC_URL, payload={
                "jsonrpc": "2.0",
                "id": 1,
                "result": {
                    "context": {"slot": 1},
                    "value": {"amount": "123456789", "decimals": 6, "uiAmount": 123.456789},
                },
            })
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                balance = await reader.get_token_account_balance("vault_1")
        assert balance == TokenBalance(raw_amount="123456789", decimals=6)

    async def test_rpc_error_object(self):
        with aioresponses() as m:
            m.post(RPC_URL, payload={
                "jsonrpc": "2.0", "id": 1,
                "error": {"code": -32602, "message": "Invalid param: could not find account"},
            })
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                with pytest.raises(BalanceReadError, match="could not find account") as exc_info:
                    await reader.get_token_account_balance("vault_1")
        assert exc_info.value.account == "vault_1"

    async def test_http_status_error(self):
        with aioresponses() as m:
            m.post(RPC_URL, status=429)
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                with pytest.raises(BalanceReadError, match="429"):
                    await reader.get_token_account_balance("vault_1")

    async def test_malformed_value(self):
        with aioresponses() as m:
            m.post(RPC_URL, payload={"result": {"value": {"amount": 5, "decimals": 6}}})
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                with pytest.raises(BalanceReadError, match="malformed"):
                    await reader.get_token_account_balance("vault_1")

    async def test_missing_value(self):
        with aioresponses() as m:
            m.post(RPC_URL, payload={"result": {}})
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                with pytest.raises(BalanceReadError):
                    await reader.get_token_account_balance("vault_1")

    async def test_timeout(self):
        with aioresponses() as m:
            m.post(RPC_URL, exception=asyncio.TimeoutError())
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                with pytest.raises(BalanceReadError):
                    await reader.get_token_account_balance("vault_1")

    async def test_connection_error(self):
        with aioresponses() as m:
            m.post(RPC_URL, exception=aiohttp.ClientConnectionError("refused"))
            async with SolanaRpcBalanceReader(RPC_URL) as reader:
                with pytest.raises(BalanceReadError, match="RPC request error"):
                    await reader.get_token_account_balance("vault_1")


class TestStaticPoolProvider:
    async def test_get_pools(self):
        provider = StaticPoolProvider({
            "mint_a": {"raydium": [PoolVaults("raydium", "b1", "q1")]},
        })
        pools = await provider.get_pools("mint_a")
        assert pools == {"raydium": [PoolVaults("raydium", "b1", "q1")]}

    async def test_unknown_mint(self):
        assert await StaticPoolProvider().get_pools("missing") == {}

    async def test_returned_lists_are_copies(self):
        provider = StaticPoolProvider({"m": {"pump": [PoolVaults("pump", "b", "q")]}})
        pools = await provider.get_pools("m")
        pools["pump"].clear()
        assert len((await provider.get_pools("m"))["pump"]) == 1

    def test_from_dict(self):
        provider = StaticPoolProvider.from_dict({
            "mint_a": {
                "raydium": [{"base_vault": "b1", "quote_vault": "q1", "pool_id": "p1"}],
                "pump": [],
            },
        })
        assert provider.mints == ["mint_a"]

    @pytest.mark.parametrize(
        "raw",
        [
            [],
            {"mint_a": []},
            {"mint_a": {"raydium": {}}},
            {"mint_a": {"raydium": [{"base_vault": "b1"}]}},
            {"mint_a": {"raydium": ["not-a-dict"]}},
        ],
    )
    def test_from_dict_invalid(self, raw):
        with pytest.raises(ValueError):
            StaticPoolProvider.from_dict(raw)

    async def test_from_file(self, tmp_path):
        path = tmp_path / "pools.json"
        path.write_text(json.dumps({
            "mint_a": {"pump": [{"base_vault": "b", "quote_vault": "q"}]},
        }))
        provider = StaticPoolProvider.from_file(path)
        pools = await provider.get_pools("mint_a")
        assert pools["pump"][0].venue == "pump"
        assert pools["pump"][0].pool_id is None
