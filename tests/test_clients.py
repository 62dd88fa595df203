"""Tests for the websocket client registry"""

import threading

from fsbench.clients import ClientRegistry


class TestClientRegistry:
    def test_add_remove(self):
        registry = ClientRegistry('test')
        a, b = object(), object()

        registry.add(a)
        registry.add(b)
        registry.add(a)
        assert len(registry) == 2
        assert a in registry

        assert registry.remove(a) is True
        assert registry.remove(a) is False
        assert registry.snapshot() == [b]

    def test_snapshot_is_a_copy(self):
        registry = ClientRegistry()
        client = object()
        registry.add(client)
        snapshot = registry.snapshot()
        registry.remove(client)
        assert snapshot == [client]
        assert len(registry) == 0

    def test_concurrent_add_remove(self):
        registry = ClientRegistry()
        clients = [object() for _ in range(200)]

        def churn(batch):
            for c in batch:
                registry.add(c)
            for c in batch[::2]:
                registry.remove(c)

        threads = [threading.Thread(target=churn, args=(clients[i::4],)) for i in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        expected = {id(c) for i in range(4) for c in clients[i::4][1::2]}
        assert {id(c) for c in registry.snapshot()} == expected
