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

import datetime
import logging
import threading


class Measure:
    """
    Accumulates one scalar value and, optionally, per-key sub values along a named breakdown dimension
    (e.g. one value per node).
    """

    def __init__(self, breakdown_dimension=None, value=None):
        """
        :param breakdown_dimension: The name of the breakdown axis, e.g. "Node" or "State". Fixed for the lifetime
                                    of this measure.
        :param value: An optional initial value. If provided the measure counts as written.
        """
        self._breakdown_dimension = breakdown_dimension
        self._breakdown = {}
        self._value = 0.0
        self._written = False
        if value is not None:
            self.set_value(value)

    @property
    def value(self):
        return self._value

    @property
    def breakdown_dimension(self):
        return self._breakdown_dimension

    @property
    def breakdown(self):
        return dict(self._breakdown)

    @property
    def has_breakdown(self):
        return len(self._breakdown) > 0

    @property
    def written(self):
        return self._written

    def set_value(self, value):
        self._value = value
        self._written = True

    def add_value(self, value):
        self._value += value
        self._written = True

    def add_breakdown(self, key, value):
        self._breakdown[key] = self._breakdown.get(key, 0) + value
        self._written = True

    def __repr__(self):
        if self._breakdown_dimension is None and not self._breakdown:
            return "Measure(value={})".format(self._value)
        return "Measure(value={}, {}={})".format(self._value, self._breakdown_dimension, self._breakdown)


class RateMeasure:
    """
    Derives a non-negative per-time-unit rate from a cumulative counter which is sampled at irregular intervals.

    The previous sample is kept in this object, so instances need to live across polling cycles. Cumulative counters
    may legitimately go down (e.g. documents disappear when an index is deleted); such a decrease is reported as a
    rate of zero.
    """

    def __init__(self, unit=datetime.timedelta(seconds=1)):
        if unit.total_seconds() <= 0:
            raise ValueError("unit must be a positive time span but was [{}]".format(unit))
        self.unit = unit
        self.previous_value = None
        self.previous_timestamp = None
        self._base_measure = Measure()
        self._derived_measure = Measure()
        self._lock = threading.Lock()
        self.logger = logging.getLogger(__name__)

    @property
    def base_measure(self):
        """
        :return: The measure holding the latest absolute value of the counter.
        """
        return self._base_measure

    @property
    def derived_measure(self):
        """
        :return: The measure holding the most recently computed rate.
        """
        return self._derived_measure

    def sample(self, value, timestamp):
        """
        Records a new observation of the counter.

        :param value: The absolute value of the counter.
        :param timestamp: The point in time of the observation in seconds since the epoch.
        """
        with self._lock:
            self._base_measure.set_value(value)
            if self.previous_timestamp is not None:
                delta_time = (timestamp - self.previous_timestamp) / self.unit.total_seconds()
                if delta_time > 0:
                    rate = (value - self.previous_value) / delta_time
                    if rate < 0:
                        self.logger.debug("Counter decreased from [%s] to [%s]. Reporting a rate of 0.", self.previous_value, value)
                        rate = 0
                    self._derived_measure.set_value(rate)
                else:
                    self.logger.debug("Skipping rate computation as no time has passed since the previous sample at [%s].",
                                      self.previous_timestamp)
            self.previous_value = value
            self.previous_timestamp = timestamp

    def __repr__(self):
        return "RateMeasure(previous_value={}, previous_timestamp={}, rate={})".format(
            self.previous_value, self.previous_timestamp, self._derived_measure.value)


class RateMeasureRegistry:
    """
    Process wide store of rate measures, keyed by the monitored target and the counter's metric name.
    """

    def __init__(self, unit=datetime.timedelta(seconds=1)):
        self.unit = unit
        self._rate_measures = {}
        self._lock = threading.Lock()

    def rate_measure(self, target, name):
        key = (target, name)
        with self._lock:
            if key not in self._rate_measures:
                self._rate_measures[key] = RateMeasure(unit=self.unit)
            return self._rate_measures[key]

    def clear(self):
        with self._lock:
            self._rate_measures.clear()

    def __len__(self):
        return len(self._rate_measures)


# rate measures outlive a single polling cycle and are implicitly reset when the process restarts
REGISTRY = RateMeasureRegistry()
