# SPDX-License-Identifier: Apache-2.0
#
# The OpenSearch Contributors require contributions made to
# this file be licensed under the Apache-2.0 license or a
# compatible open source license.
# Modifications Copyright OpenSearch Contributors. See
# GitHub history for details.
# Licensed to Elasticsearch B.V. under one or more contributor
# license agreements. See the NOTICE file distributed with
# this work for additional information regarding copyright
# ownership. Elasticsearch B.V. licenses this file to you under
# the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#	http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.

import logging

from esmonitor import catalog, client, collectors, exceptions, measures, time
from esmonitor.config import MonitorConfig
from esmonitor.publisher import MeasurePublisher


class Monitor:
    """
    Polls the diagnostic APIs of one cluster and publishes the resulting measures.
    """

    def __init__(self, environment, client_factory_class=client.EsClientFactory, clock=time.Clock,
                 rate_measures=measures.REGISTRY, rewrite_scalar=False):
        """
        :param environment: The ``MetricsEnvironment`` measures are published to.
        :param client_factory_class: A factory class creating the Elasticsearch client from a ``MonitorConfig``.
        :param clock: Provides the timestamps for rate computations.
        :param rate_measures: Holds the rate measures across polling cycles.
        :param rewrite_scalar: See ``MeasurePublisher``.
        """
        self.environment = environment
        self.client_factory_class = client_factory_class
        self.clock = clock
        self.rate_measures = rate_measures
        self.publisher = MeasurePublisher(environment, rewrite_scalar=rewrite_scalar)
        self.cfg = None
        self.logger = logging.getLogger(__name__)

    def setup(self, params, host=None):
        self.cfg = MonitorConfig.from_params(params, host=host)
        self.logger.info("Monitoring cluster at [%s].", self.cfg.url)
        return self.cfg

    def execute(self):
        """
        Runs one polling cycle.

        :return: The names of all published metrics.
        """
        if self.cfg is None:
            raise exceptions.SystemSetupError("The monitor has not been set up.")
        self.logger.info("Executing Elasticsearch Monitor for URL [%s].", self.cfg.url)
        stop_watch = self.clock.stop_watch()
        stop_watch.start()

        documents = self._retrieve()
        timestamp = self.clock.now()
        # QueryCacheSize and FieldDataSize appear in both stats results, the cluster wide value is written last
        results = [
            collectors.collect_cluster_health(documents[client.CLUSTER_HEALTH]),
            collectors.collect_node_info(documents[client.NODES_INFO]),
            collectors.collect_node_stats(documents[client.NODES_STATS]),
            collectors.collect_cluster_stats(documents[client.CLUSTER_STATS],
                                             self.rate_measures.rate_measure(self.cfg.url, catalog.DOCUMENT_COUNT),
                                             self.rate_measures.rate_measure(self.cfg.url, catalog.DELETED_COUNT),
                                             timestamp),
        ]

        published = []
        for result in results:
            self.logger.debug("Publishing [%d] measures from %s.", len(result), result.source)
            published.extend(self.publisher.publish_all(catalog.METRIC_GROUP, result.items()))
        stop_watch.stop()
        self.logger.info("Published [%d] measures for [%s] in [%.3f] seconds.", len(published), self.cfg.url, stop_watch.total_time())
        return published

    def _retrieve(self):
        # pylint: disable=import-outside-toplevel
        import elasticsearch

        es = self.client_factory_class(self.cfg).create()
        try:
            return client.fetch_documents(es)
        except (elasticsearch.ApiError, elasticsearch.TransportError) as e:
            msg = "Could not retrieve diagnostic data from cluster at [{}].".format(self.cfg.url)
            self.logger.exception(msg)
            raise exceptions.CollectionError(msg, e) from e
        finally:
            es.close()

    def teardown(self):
        # the client is scoped to a single cycle and rate measures live as long as the process
        self.logger.info("Stopping to monitor [%s].", self.cfg.url if self.cfg else None)


class Sampler:
    """
    Runs polling cycles in the calling thread until stopped or until the requested number of cycles has been run.
    """

    def __init__(self, monitor, sample_interval, sleep=time.sleep, on_cycle=None):
        self.monitor = monitor
        self.sample_interval = sample_interval
        self.sleep = sleep
        self.on_cycle = on_cycle
        self.stop = False
        self.failures = 0
        self.logger = logging.getLogger(__name__)

    def run(self, cycles=None):
        completed = 0
        while not self.stop and (cycles is None or completed < cycles):
            try:
                published = self.monitor.execute()
                if self.on_cycle:
                    self.on_cycle(published)
            except exceptions.CollectionError:
                # already logged, the next cycle retries
                self.failures += 1
            completed += 1
            if not self.stop and (cycles is None or completed < cycles):
                self.sleep(self.sample_interval)
        return completed
