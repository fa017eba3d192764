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

import collections

from esmonitor import catalog


class MonitorMeasure:
    """
    A handle to one measure in the monitoring backend. Dynamic measures carry the dimension and the key they
    were created for.
    """

    def __init__(self, group, name, dimension=None, key=None):
        self.group = group
        self.name = name
        self.dimension = dimension
        self.key = key
        self.value = None

    def set_value(self, value):
        self.value = value

    def __repr__(self):
        if self.dimension:
            return "{}@{}[{}={}]".format(self.name, self.group, self.dimension, self.key)
        return "{}@{}".format(self.name, self.group)


class MetricsEnvironment:
    """
    The monitoring backend measures are published to.
    """

    def get_monitor_measures(self, group, name):
        """
        :param group: The metric group.
        :param name: The metric name.
        :return: A list of all measure handles registered for this metric. May be empty.
        """
        raise NotImplementedError("abstract method")

    def create_dynamic_measure(self, measure, dimension, key):
        """
        :param measure: The parent measure handle.
        :param dimension: The breakdown dimension, e.g. "Node".
        :param key: The breakdown key, e.g. a node name.
        :return: A measure handle for the dynamic child measure.
        """
        raise NotImplementedError("abstract method")


class InMemoryMetricsEnvironment(MetricsEnvironment):
    """
    Keeps all published values in memory.
    """

    def __init__(self, group=catalog.METRIC_GROUP, names=None):
        """
        :param group: The metric group to register measures for.
        :param names: The metric names to register. Defaults to the whole catalog.
        """
        self._measures = collections.OrderedDict()
        self._dynamic_measures = collections.OrderedDict()
        self.writes = 0
        for name in (catalog.ALL_MEASURES if names is None else names):
            self.register(group, name)

    def register(self, group, name):
        handle = _RecordingMeasure(self, group, name)
        self._measures.setdefault((group, name), []).append(handle)
        return handle

    def get_monitor_measures(self, group, name):
        return list(self._measures.get((group, name), []))

    def create_dynamic_measure(self, measure, dimension, key):
        dynamic_key = (measure.group, measure.name, dimension, key)
        if dynamic_key not in self._dynamic_measures:
            self._dynamic_measures[dynamic_key] = _RecordingMeasure(self, measure.group, measure.name, dimension, key)
        return self._dynamic_measures[dynamic_key]

    def value(self, group, name):
        handles = self._measures.get((group, name))
        return handles[0].value if handles else None

    def dynamic_measures(self, group, name):
        return {(m.dimension, m.key): m.value for (g, n, _, _), m in self._dynamic_measures.items() if g == group and n == name}

    def values(self):
        """
        :return: A list of (name, dimension, key, value) tuples of all measures that have been written to.
        """
        rows = []
        for (group, name), handles in self._measures.items():
            if handles[0].value is not None:
                rows.append((name, None, None, handles[0].value))
            for (g, n, dimension, key), m in self._dynamic_measures.items():
                if g == group and n == name and m.value is not None:
                    rows.append((name, dimension, key, m.value))
        return rows


class _RecordingMeasure(MonitorMeasure):
    def __init__(self, environment, group, name, dimension=None, key=None):
        super().__init__(group, name, dimension, key)
        self._environment = environment

    def set_value(self, value):
        super().set_value(value)
        self._environment.writes += 1
