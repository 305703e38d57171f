"""
Testes para RedisKeyValueStore com cliente redis mockado.

O pipeline é um MagicMock usado como context manager, como em
`with client.pipeline() as pipe`.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from redis.exceptions import WatchError

from src.adapters.redis_store import RedisKeyValueStore
from src.adapters.redis_store.store import MAX_TENTATIVAS_SET
from src.core.shared.exceptions import StorageUnavailableError
from src.core.storage import VERSAO_AUSENTE


def envelope(data, version):
    return json.dumps({"v": version, "data": data}).encode("utf-8")


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def pipe(client):
    pipe = MagicMock()
    client.pipeline.return_value.__enter__.return_value = pipe
    return pipe


@pytest.fixture
def redis_store(client):
    return RedisKeyValueStore(client)


class TestLeitura:

    def test_chave_ausente(self, redis_store, client):
        client.get.return_value = None

        assert redis_store.get_versioned("workspace:W1") == (None, VERSAO_AUSENTE)

    def test_abre_envelope(self, redis_store, client):
        client.get.return_value = envelope({"staffMembers": ["u1"]}, 3)

        assert redis_store.get_versioned("workspace:W1") == ({"staffMembers": ["u1"]}, 3)
        assert redis_store.get("workspace:W1") == {"staffMembers": ["u1"]}

    def test_timeout_vira_storage_unavailable(self, redis_store, client):
        client.get.side_effect = RedisTimeoutError("timeout")

        with pytest.raises(StorageUnavailableError):
            redis_store.get("workspace:W1")

    def test_scan_decodifica_e_ordena(self, redis_store, client):
        client.scan_iter.return_value = iter([b"ticket:W1:0002", b"ticket:W1:0001", b"ticket:W1:0002"])

        assert redis_store.scan("ticket:W1:*") == ["ticket:W1:0001", "ticket:W1:0002"]
        client.scan_iter.assert_called_once_with(match="ticket:W1:*")


class TestEscrita:

    def test_set_if_version_grava_proxima_versao(self, redis_store, pipe):
        pipe.get.return_value = envelope({"a": 1}, 2)

        assert redis_store.set_if_version("k", {"a": 2}, 2) is True

        pipe.watch.assert_called_once_with("k")
        pipe.multi.assert_called_once()
        key, raw = pipe.set.call_args.args
        assert key == "k"
        assert json.loads(raw) == {"v": 3, "data": {"a": 2}}
        pipe.execute.assert_called_once()

    def test_criacao_exige_chave_ausente(self, redis_store, pipe):
        pipe.get.return_value = envelope({}, 1)

        assert redis_store.set_if_version("k", {"a": 1}, VERSAO_AUSENTE) is False
        pipe.unwatch.assert_called_once()
        pipe.execute.assert_not_called()

    def test_watch_error_e_conflito(self, redis_store, pipe):
        pipe.get.return_value = None
        pipe.execute.side_effect = WatchError()

        assert redis_store.set_if_version("k", {"a": 1}, VERSAO_AUSENTE) is False

    def test_set_repete_apos_watch_error(self, redis_store, pipe):
        pipe.get.return_value = envelope({}, 4)
        pipe.execute.side_effect = [WatchError(), True]

        assert redis_store.set("k", {"a": 1}) is True
        assert pipe.execute.call_count == 2
        assert json.loads(pipe.set.call_args.args[1])["v"] == 5

    def test_conexao_perdida(self, redis_store, pipe):
        pipe.watch.side_effect = RedisConnectionError("fora")

        with pytest.raises(StorageUnavailableError):
            redis_store.set_if_version("k", {}, 1)

    def test_delete(self, redis_store, client):
        client.delete.return_value = 1

        assert redis_store.delete("k") is True


class TestFromUrl:

    def test_configura_timeouts(self):
        with patch("redis.Redis.from_url") as from_url:
            RedisKeyValueStore.from_url("redis://cache:6379/2", timeout=3)

        from_url.assert_called_once_with(
            "redis://cache:6379/2", socket_timeout=3, socket_connect_timeout=3
        )


class TestContencao:

    def test_set_desiste_apos_conflitos_seguidos(self, redis_store, pipe):
        pipe.get.return_value = envelope({}, 1)
        pipe.execute.side_effect = WatchError()

        with pytest.raises(StorageUnavailableError):
            redis_store.set("k", {"a": 1})

        assert pipe.execute.call_count == MAX_TENTATIVAS_SET
