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

from esmonitor import exceptions
from esmonitor.measures import Measure


class MeasurePublisher:
    """
    Writes finished measures to the monitoring backend. The base value goes to every registered handle of a metric
    and each breakdown entry becomes a dynamic child measure of that handle.
    """

    def __init__(self, environment, rewrite_scalar=False):
        """
        :param environment: The ``MetricsEnvironment`` to publish to.
        :param rewrite_scalar: Whether to write the base value once more through a plain scalar measure before
                               creating dynamic measures. Some backends drop the base value of a measure that also
                               receives dynamic children otherwise.
        """
        self.environment = environment
        self.rewrite_scalar = rewrite_scalar
        self.logger = logging.getLogger(__name__)

    def publish_all(self, group, measures):
        """
        :param group: The metric group.
        :param measures: An iterable of (name, measure) pairs.
        :return: A list of the names that have been written to at least one handle.
        """
        published = []
        for name, measure in measures:
            if self.publish(group, name, measure):
                published.append(name)
        return published

    def publish(self, group, name, measure):
        if measure.has_breakdown and measure.breakdown_dimension is None:
            raise exceptions.PreconditionError(
                "Measure [{}@{}] has dynamic measures {} but no dimension name.".format(name, group, measure.breakdown))
        if not measure.written:
            self.logger.debug("Skipping measure [%s@%s] as no value has been collected.", name, group)
            return False

        handles = self.environment.get_monitor_measures(group, name)
        if not handles:
            self.logger.warning("Could not find measure [%s@%s], tried to report value [%s].", name, group, measure)
            return False

        if measure.has_breakdown:
            self.logger.info("Setting measure [%s] to value [%s], dynamic: %s: %s, measures: %s",
                             name, measure.value, measure.breakdown_dimension, measure.breakdown, handles)
        else:
            self.logger.info("Setting measure [%s] to value [%s], measures: %s", name, measure.value, handles)

        for handle in handles:
            handle.set_value(measure.value)
            if measure.has_breakdown:
                if self.rewrite_scalar:
                    self.publish(group, name, Measure(value=measure.value))
                for key, value in measure.breakdown.items():
                    dynamic_measure = self.environment.create_dynamic_measure(handle, measure.breakdown_dimension, key)
                    dynamic_measure.set_value(value)
        return True
