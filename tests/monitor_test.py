import copy
from unittest import TestCase, mock

import elasticsearch

from esmonitor import catalog, exceptions, metrics
from esmonitor.measures import RateMeasureRegistry
from esmonitor.monitor import Monitor, Sampler
from tests import test_helpers

GROUP = catalog.METRIC_GROUP
PARAMS = {"use-full-url": True, "url": "http://localhost:9200/"}


def sequence(*responses):
    remaining = list(responses)

    def supplier(*args, **kwargs):
        return copy.deepcopy(remaining.pop(0))
    return supplier


def create_client(health=test_helpers.CLUSTER_HEALTH, nodes_info=test_helpers.NODES_INFO,
                  cluster_stats=test_helpers.CLUSTER_STATS, nodes_stats=test_helpers.NODES_STATS):
    return test_helpers.Client(cluster=test_helpers.ClusterClient(health=health, stats=cluster_stats),
                               nodes=test_helpers.NodesClient(info=nodes_info, stats=nodes_stats))


class MonitorTests(TestCase):
    def setUp(self):
        self.environment = metrics.InMemoryMetricsEnvironment()
        self.rate_measures = RateMeasureRegistry()

    def create_monitor(self, client, timestamps=None, rewrite_scalar=False):
        monitor = Monitor(self.environment,
                          client_factory_class=test_helpers.static_client_factory(client),
                          clock=test_helpers.TestClock(timestamps or [1000]),
                          rate_measures=self.rate_measures,
                          rewrite_scalar=rewrite_scalar)
        monitor.setup(PARAMS)
        return monitor

    def test_publishes_measures_of_all_apis(self):
        client = create_client()
        monitor = self.create_monitor(client)

        published = monitor.execute()

        self.assertTrue(client.closed)
        # cluster health
        self.assertEqual(5, self.environment.value(GROUP, catalog.NODE_COUNT))
        self.assertEqual(3, self.environment.value(GROUP, catalog.DATA_NODE_COUNT))
        self.assertEqual(100.0, self.environment.value(GROUP, catalog.ACTIVE_SHARDS_PERCENT))
        self.assertEqual(0, self.environment.value(GROUP, catalog.UNASSIGNED_SHARDS))
        # nodes info
        self.assertEqual({("Node", "A"): 1073741824, ("Node", "B"): 536870912},
                         self.environment.dynamic_measures(GROUP, catalog.MEM_MAX_HEAP))
        # cluster stats
        self.assertEqual(1000, self.environment.value(GROUP, catalog.DOCUMENT_COUNT))
        self.assertEqual({("State", "primary"): 10, ("State", "replicationFactor"): 1.0},
                         self.environment.dynamic_measures(GROUP, catalog.SHARD_COUNT))
        # nodes stats
        self.assertEqual(3000, self.environment.value(GROUP, catalog.STORE_SIZE))
        self.assertEqual({("Node", "A"): 1000, ("Node", "B"): 2000},
                         self.environment.dynamic_measures(GROUP, catalog.STORE_SIZE))

        # no rate after the first sample and no percolation stats on nodes
        self.assertNotIn(catalog.DOCUMENT_COUNT_PER_SECOND, published)
        self.assertNotIn(catalog.PERCOLATE_SIZE, published)
        self.assertIsNone(self.environment.value(GROUP, catalog.DOCUMENT_COUNT_PER_SECOND))
        self.assertEqual(catalog.NODE_COUNT, published[0])
        self.assertEqual(catalog.PERCOLATE_COUNT, published[-1])

    def test_cluster_stats_are_published_after_node_stats(self):
        nodes_stats = copy.deepcopy(test_helpers.NODES_STATS)
        nodes_stats["nodes"]["5uQqFOLRQ0eyaqY2Ww_xPw"]["indices"]["fielddata"]["memory_size_in_bytes"] = 300
        nodes_stats["nodes"]["5uQqFOLRQ0eyaqY2Ww_xPw"]["indices"]["query_cache"]["memory_size_in_bytes"] = 4000
        monitor = self.create_monitor(create_client(nodes_stats=nodes_stats))

        published = monitor.execute()

        self.assertEqual(2, published.count(catalog.FIELD_DATA_SIZE))
        self.assertEqual(2, published.count(catalog.QUERY_CACHE_SIZE))
        self.assertLess(published.index(catalog.STORE_SIZE), published.index(catalog.INDEX_COUNT))
        # the sum over all nodes is 556 and 5024 but the cluster wide values are written last
        self.assertEqual(512, self.environment.value(GROUP, catalog.FIELD_DATA_SIZE))
        self.assertEqual(2048, self.environment.value(GROUP, catalog.QUERY_CACHE_SIZE))
        query_cache = self.environment.dynamic_measures(GROUP, catalog.QUERY_CACHE_SIZE)
        self.assertEqual(60, query_cache[("State", "hit_count")])
        self.assertEqual(4000, query_cache[("Node", "A")])
        self.assertEqual(300, self.environment.dynamic_measures(GROUP, catalog.FIELD_DATA_SIZE)[("Node", "A")])

    def test_computes_document_rates_across_cycles(self):
        second_stats = copy.deepcopy(test_helpers.CLUSTER_STATS)
        second_stats["indices"]["docs"] = {"count": 1600, "deleted": 0}
        client = create_client(cluster_stats=sequence(test_helpers.CLUSTER_STATS, second_stats))
        monitor = self.create_monitor(client, timestamps=[1000, 1060])

        monitor.execute()
        published = monitor.execute()

        self.assertIn(catalog.DOCUMENT_COUNT_PER_SECOND, published)
        self.assertEqual(1600, self.environment.value(GROUP, catalog.DOCUMENT_COUNT))
        self.assertEqual(10, self.environment.value(GROUP, catalog.DOCUMENT_COUNT_PER_SECOND))
        self.assertEqual(0, self.environment.value(GROUP, catalog.DELETED_COUNT_PER_SECOND))

    def test_rates_are_kept_per_target(self):
        monitor = self.create_monitor(create_client())
        monitor.execute()

        rate_measure = self.rate_measures.rate_measure("http://localhost:9200", catalog.DOCUMENT_COUNT)
        self.assertEqual(1000, rate_measure.previous_value)
        self.assertEqual(1000, rate_measure.previous_timestamp)
        self.assertEqual(2, len(self.rate_measures))

    def test_failing_request_publishes_nothing(self):
        client = create_client(cluster_stats=test_helpers.raise_error(elasticsearch.ConnectionError("connection refused")))
        monitor = self.create_monitor(client)

        with self.assertRaises(exceptions.CollectionError) as ctx:
            monitor.execute()

        self.assertIsInstance(ctx.exception.cause, elasticsearch.ConnectionError)
        self.assertIn("http://localhost:9200", ctx.exception.message)
        self.assertEqual(0, self.environment.writes)
        self.assertTrue(client.closed)

    def test_error_status_publishes_nothing(self):
        error = elasticsearch.ApiError("unavailable", meta=mock.Mock(status=503), body={})
        client = create_client(nodes_stats=test_helpers.raise_error(error))
        monitor = self.create_monitor(client)

        with self.assertRaises(exceptions.CollectionError):
            monitor.execute()

        self.assertEqual(0, self.environment.writes)
        self.assertTrue(client.closed)

    def test_malformed_response_publishes_nothing(self):
        client = create_client(health=test_helpers.ApiResponse(["not", "an", "object"]))
        monitor = self.create_monitor(client)

        with self.assertRaises(exceptions.CollectionError):
            monitor.execute()

        self.assertEqual(0, self.environment.writes)
        self.assertTrue(client.closed)

    def test_programming_errors_are_not_swallowed(self):
        client = create_client(health=test_helpers.raise_error(KeyError("unexpected")))
        monitor = self.create_monitor(client)

        with self.assertRaises(KeyError):
            monitor.execute()
        self.assertTrue(client.closed)

    def test_requires_setup(self):
        monitor = Monitor(self.environment, rate_measures=self.rate_measures)

        with self.assertRaises(exceptions.SystemSetupError):
            monitor.execute()

    def test_rewrites_scalar_values(self):
        monitor = self.create_monitor(create_client(), rewrite_scalar=True)
        monitor.execute()

        self.assertEqual(3000, self.environment.value(GROUP, catalog.STORE_SIZE))
        self.assertEqual({("Node", "A"): 1000, ("Node", "B"): 2000},
                         self.environment.dynamic_measures(GROUP, catalog.STORE_SIZE))


class SamplerTests(TestCase):
    def test_runs_requested_number_of_cycles(self):
        monitor = mock.Mock()
        monitor.execute.side_effect = [["NodeCount"], exceptions.CollectionError("unreachable"), ["NodeCount"]]
        sleep = mock.Mock()
        on_cycle = mock.Mock()

        sampler = Sampler(monitor, 30, sleep=sleep, on_cycle=on_cycle)

        self.assertEqual(3, sampler.run(cycles=3))
        self.assertEqual(1, sampler.failures)
        self.assertEqual(3, monitor.execute.call_count)
        self.assertEqual([mock.call(30), mock.call(30)], sleep.call_args_list)
        self.assertEqual(2, on_cycle.call_count)

    def test_can_be_stopped(self):
        monitor = mock.Mock()
        monitor.execute.return_value = []
        sleep = mock.Mock()
        sampler = Sampler(monitor, 30, sleep=sleep)

        def stop(published):
            sampler.stop = True

        sampler.on_cycle = stop

        self.assertEqual(1, sampler.run())
        sleep.assert_not_called()

    def test_does_not_swallow_precondition_errors(self):
        monitor = mock.Mock()
        monitor.execute.side_effect = exceptions.PreconditionError("no dimension")
        sampler = Sampler(monitor, 30, sleep=mock.Mock())

        with self.assertRaises(exceptions.PreconditionError):
            sampler.run(cycles=2)
