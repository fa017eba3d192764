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

from esmonitor import exceptions
from esmonitor.utils import opts

DEFAULT_TIMEOUT_MILLIS = 60000
MAX_TIMEOUT_MILLIS = 2 ** 31 - 1
DEFAULT_SAMPLE_INTERVAL = 60


class MonitorConfig:
    def __init__(self, url, user="", password=None, timeout=DEFAULT_TIMEOUT_MILLIS, sample_interval=DEFAULT_SAMPLE_INTERVAL):
        """
        :param url: The base URL of the cluster without a trailing slash.
        :param user: The user for basic authentication. An empty string disables authentication.
        :param password: The password for basic authentication.
        :param timeout: The timeout for each request in milliseconds.
        :param sample_interval: The interval between two polling cycles in seconds.
        """
        self.url = url
        self.user = user
        self.password = password
        self.timeout = timeout
        self.sample_interval = sample_interval

    @property
    def timeout_seconds(self):
        return self.timeout / 1000

    @classmethod
    def from_params(cls, params, host=None):
        """
        Creates a validated configuration.

        :param params: A dict with the monitor parameters.
        :param host: An optional host name which is used if ``host`` is not contained in ``params``.
        :return: A ``MonitorConfig``.
        """
        use_full_url = opts.to_bool(params.get("use-full-url", False))
        protocol = params.get("protocol")
        if use_full_url:
            url = params.get("url")
            if not url:
                raise exceptions.SystemSetupError("Parameter <url> must not be empty")
        else:
            port = params.get("port")
            host = params.get("host", host)
            if not protocol or port is None or not host:
                raise exceptions.SystemSetupError("Parameters <protocol>, <port> and <host> must not be empty")
            url = "{}://{}:{}".format(protocol, host, _number(params, "port", int))
        url = url.rstrip("/")

        # an empty user is passed as is to not fail in the HTTP client
        user = params.get("user") or ""
        password = params.get("password")

        timeout = _number(params, "timeout", int, DEFAULT_TIMEOUT_MILLIS)
        if timeout < 0 or timeout > MAX_TIMEOUT_MILLIS:
            raise exceptions.SystemSetupError("Timeout needs to be in range [0,{}] but was [{}].".format(MAX_TIMEOUT_MILLIS, timeout))

        sample_interval = _number(params, "sample-interval", float, DEFAULT_SAMPLE_INTERVAL)
        if sample_interval <= 0:
            raise exceptions.SystemSetupError(
                "The parameter 'sample-interval' must be greater than zero but was {}.".format(sample_interval))

        return cls(url, user=user, password=password, timeout=timeout, sample_interval=sample_interval)

    def __repr__(self):
        return "MonitorConfig(url={}, user={}, timeout={}, sample_interval={})".format(
            self.url, self.user, self.timeout, self.sample_interval)


def _number(params, key, convert, default=None):
    value = params.get(key)
    if value is None:
        return default
    try:
        return convert(value)
    except (TypeError, ValueError) as e:
        raise exceptions.SystemSetupError("The parameter '{}' must be a number but was [{}].".format(key, value), e)
