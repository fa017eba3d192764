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

CLUSTER_HEALTH = "cluster_health"
NODES_INFO = "nodes_info"
CLUSTER_STATS = "cluster_stats"
NODES_STATS = "nodes_stats"


class EsClientFactory:
    """
    Abstracts how the Elasticsearch client is created.
    """

    def __init__(self, cfg):
        self.cfg = cfg
        self.logger = logging.getLogger(__name__)

    def create(self):
        # pylint: disable=import-outside-toplevel
        import elasticsearch

        client_options = {
            # a timeout of 0 disables the timeout
            "request_timeout": self.cfg.timeout_seconds if self.cfg.timeout > 0 else None
        }
        if self.cfg.user:
            self.logger.debug("Using basic authentication with user [%s].", self.cfg.user)
            client_options["basic_auth"] = (self.cfg.user, self.cfg.password or "")
        self.logger.debug("Creating client for [%s] with timeout [%s] s.", self.cfg.url, self.cfg.timeout_seconds)
        return elasticsearch.Elasticsearch(hosts=[self.cfg.url], **client_options)


def _body(name, response):
    body = response.body if hasattr(response, "body") else response
    if not isinstance(body, dict):
        msg = "Expected a JSON object as response for {} but got [{}].".format(name, type(body).__name__)
        logging.getLogger(__name__).warning(msg)
        raise exceptions.CollectionError(msg)
    return body


def fetch_documents(client):
    """
    Retrieves the responses of all diagnostic APIs that are read in one polling cycle.

    :param client: An Elasticsearch client.
    :return: A dict with one parsed response per API.
    """
    logger = logging.getLogger(__name__)
    documents = {}
    logger.debug("Retrieving cluster health.")
    documents[CLUSTER_HEALTH] = _body(CLUSTER_HEALTH, client.cluster.health())
    logger.debug("Retrieving nodes info.")
    documents[NODES_INFO] = _body(NODES_INFO, client.nodes.info())
    logger.debug("Retrieving cluster stats.")
    documents[CLUSTER_STATS] = _body(CLUSTER_STATS, client.cluster.stats())
    logger.debug("Retrieving nodes stats.")
    documents[NODES_STATS] = _body(NODES_STATS, client.nodes.stats())
    return documents
