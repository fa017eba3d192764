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

"""
Collectors turn one parsed response of the cluster's diagnostic APIs into measures.

Every collector is tolerant against missing fields and missing sections: a measure whose source field is absent is
left untouched (and will not be published) instead of being set to zero.
"""

import collections
import logging
import math

from esmonitor import catalog
from esmonitor.measures import Measure

UNKNOWN_NODE = "unknown-node"

logger = logging.getLogger(__name__)


class CollectorResult:
    """
    The measures gathered from one API response, in the order they should be published.
    """

    def __init__(self, source):
        self.source = source
        self.measures = collections.OrderedDict()

    def add(self, name, measure):
        self.measures[name] = measure
        return measure

    def items(self):
        return self.measures.items()

    def __getitem__(self, name):
        return self.measures[name]

    def __contains__(self, name):
        return name in self.measures

    def __len__(self):
        return len(self.measures)

    def __repr__(self):
        return "CollectorResult({}, {})".format(self.source, dict(self.measures))


class NodeInfoResult(CollectorResult):
    def __init__(self, source):
        super().__init__(source)
        # node id -> node name, only valid for the current cycle
        self.node_names = {}


def extract_value(doc, path, fallback=None):
    value = doc
    for k in path:
        if not isinstance(value, dict) or k not in value:
            return fallback
        value = value[k]
    return value


def section(doc, *path):
    value = extract_value(doc, path)
    return value if isinstance(value, dict) else None


def as_double(value):
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value)
        except ValueError:
            logger.debug("Ignoring non-numeric value [%s].", value)
            return None
    else:
        return None
    return result if math.isfinite(result) else None


def as_long(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    double_value = as_double(value)
    return None if double_value is None else int(double_value)


def set_value(measure, parent, key, reader=as_double):
    value = reader(parent.get(key))
    if value is not None:
        measure.set_value(value)


def add_breakdown(measure, parent, key, breakdown_key=None, reader=as_double):
    value = reader(parent.get(key))
    if value is not None:
        measure.add_breakdown(breakdown_key or key, value)


def accumulate(measure, node_name, parent, key):
    """
    Adds a per-node value to the cluster total and to the node's breakdown entry.
    """
    value = as_long(parent.get(key))
    if value is not None:
        measure.add_value(value)
        measure.add_breakdown(node_name, value)


def node_name_of(node):
    name = node.get("name")
    if name is None:
        return UNKNOWN_NODE
    return str(name)


def nodes_of(doc):
    nodes = section(doc, "nodes")
    if nodes is None:
        return []
    return [(node_id, node) for node_id, node in nodes.items() if isinstance(node, dict)]


def collect_cluster_health(doc):
    """
    Reads the cluster wide counters of ``GET /_cluster/health``.

    :param doc: The parsed response.
    :return: A ``CollectorResult`` with one scalar measure per shard or node count.
    """
    result = CollectorResult("cluster health")
    set_value(result.add(catalog.NODE_COUNT, Measure()), doc, "number_of_nodes", as_long)
    set_value(result.add(catalog.DATA_NODE_COUNT, Measure()), doc, "number_of_data_nodes", as_long)
    set_value(result.add(catalog.ACTIVE_PRIMARY_SHARDS, Measure()), doc, "active_primary_shards", as_long)
    set_value(result.add(catalog.ACTIVE_SHARDS, Measure()), doc, "active_shards", as_long)
    set_value(result.add(catalog.ACTIVE_SHARDS_PERCENT, Measure()), doc, "active_shards_percent_as_number")
    set_value(result.add(catalog.RELOCATING_SHARDS, Measure()), doc, "relocating_shards", as_long)
    set_value(result.add(catalog.INITIALIZING_SHARDS, Measure()), doc, "initializing_shards", as_long)
    set_value(result.add(catalog.UNASSIGNED_SHARDS, Measure()), doc, "unassigned_shards", as_long)
    set_value(result.add(catalog.DELAYED_UNASSIGNED_SHARDS, Measure()), doc, "delayed_unassigned_shards", as_long)
    # number_of_pending_tasks, number_of_in_flight_fetch and task_max_waiting_in_queue_millis are not part of the catalog
    return result


def _sample(result, rate_measure, count_name, rate_name, value, timestamp):
    if value is None:
        result.add(count_name, Measure())
        result.add(rate_name, Measure())
    else:
        rate_measure.sample(value, timestamp)
        result.add(count_name, rate_measure.base_measure)
        result.add(rate_name, rate_measure.derived_measure)


def collect_cluster_stats(doc, document_count, deleted_count, timestamp):
    """
    Reads the index and node aggregates of ``GET /_cluster/stats``.

    :param doc: The parsed response.
    :param document_count: The ``RateMeasure`` tracking the total number of documents.
    :param deleted_count: The ``RateMeasure`` tracking the total number of deleted documents.
    :param timestamp: The point in time the response was retrieved in seconds since the epoch.
    :return: A ``CollectorResult``.
    """
    result = CollectorResult("cluster stats")
    index_count = result.add(catalog.INDEX_COUNT, Measure())
    shards_per_state = result.add(catalog.SHARD_COUNT, Measure(catalog.STATE))

    indices = section(doc, "indices") or {}
    set_value(index_count, indices, "count")

    shards = section(indices, "shards")
    if shards is not None:
        set_value(shards_per_state, shards, "total")
        add_breakdown(shards_per_state, shards, "primaries", "primary")
        add_breakdown(shards_per_state, shards, "replication", "replicationFactor")

    docs = section(indices, "docs") or {}
    _sample(result, document_count, catalog.DOCUMENT_COUNT, catalog.DOCUMENT_COUNT_PER_SECOND,
            as_double(docs.get("count")), timestamp)
    _sample(result, deleted_count, catalog.DELETED_COUNT, catalog.DELETED_COUNT_PER_SECOND,
            as_double(docs.get("deleted")), timestamp)

    field_data_size = result.add(catalog.FIELD_DATA_SIZE, Measure())
    field_data_evictions = result.add(catalog.FIELD_DATA_EVICTIONS, Measure())
    fielddata = section(indices, "fielddata")
    if fielddata is not None:
        set_value(field_data_size, fielddata, "memory_size_in_bytes")
        set_value(field_data_evictions, fielddata, "evictions")

    query_cache_per_state = result.add(catalog.QUERY_CACHE_SIZE, Measure(catalog.STATE))
    query_cache = section(indices, "query_cache")
    if query_cache is not None:
        set_value(query_cache_per_state, query_cache, "memory_size_in_bytes")
        for key in ["total_count", "hit_count", "miss_count", "cache_size", "cache_count", "evictions"]:
            add_breakdown(query_cache_per_state, query_cache, key)

    completion_size = result.add(catalog.COMPLETION_SIZE, Measure())
    completion = section(indices, "completion")
    if completion is not None:
        set_value(completion_size, completion, "size_in_bytes")

    segment_count = result.add(catalog.SEGMENT_COUNT, Measure())
    segment_size_per_state = result.add(catalog.SEGMENT_SIZE, Measure(catalog.STATE))
    segments = section(indices, "segments")
    if segments is not None:
        set_value(segment_count, segments, "count")
        for key in ["count", "memory_in_bytes", "terms_memory_in_bytes", "stored_fields_memory_in_bytes",
                    "term_vectors_memory_in_bytes", "norms_memory_in_bytes", "doc_values_memory_in_bytes",
                    "index_writer_memory_in_bytes", "index_writer_max_memory_in_bytes", "version_map_memory_in_bytes",
                    "fixed_bit_set_memory_in_bytes"]:
            add_breakdown(segment_size_per_state, segments, key)

    file_desc_per_stat = result.add(catalog.FILE_DESCRIPTOR_COUNT, Measure(catalog.STAT))
    file_system_per_stat = result.add(catalog.FILE_SYSTEM_SIZE, Measure(catalog.STAT))
    percolate_per_state = result.add(catalog.PERCOLATE_COUNT, Measure(catalog.STATE))

    percolate = section(indices, "percolate")
    if percolate is not None:
        set_value(percolate_per_state, percolate, "current")
        # memory_size is a human readable string and therefore not included
        for key in ["total", "time_in_millis", "current", "memory_size_in_bytes", "queries"]:
            add_breakdown(percolate_per_state, percolate, key)

    file_desc = section(doc, "nodes", "process", "open_file_descriptors")
    if file_desc is not None:
        set_value(file_desc_per_stat, file_desc, "max")
        for key in ["min", "max", "avg"]:
            add_breakdown(file_desc_per_stat, file_desc, key)

    fs = section(doc, "nodes", "fs")
    if fs is not None:
        set_value(file_system_per_stat, fs, "free_in_bytes")
        for key in ["total_in_bytes", "free_in_bytes", "available_in_bytes"]:
            add_breakdown(file_system_per_stat, fs, key)
    else:
        logger.debug("No file system stats in cluster stats.")

    return result


def collect_node_info(doc):
    """
    Sums up the JVM memory settings of ``GET /_nodes`` over all nodes, with a per-node breakdown keyed by node name.

    :param doc: The parsed response.
    :return: A ``NodeInfoResult`` which also maps node ids to node names.
    """
    result = NodeInfoResult("nodes info")
    init_heap = result.add(catalog.MEM_INIT_HEAP, Measure(catalog.NODE))
    max_heap = result.add(catalog.MEM_MAX_HEAP, Measure(catalog.NODE))
    init_non_heap = result.add(catalog.MEM_INIT_NON_HEAP, Measure(catalog.NODE))
    max_non_heap = result.add(catalog.MEM_MAX_NON_HEAP, Measure(catalog.NODE))
    max_direct = result.add(catalog.MEM_MAX_DIRECT, Measure(catalog.NODE))

    for node_id, node in nodes_of(doc):
        node_name = node_name_of(node)
        result.node_names[node_id] = node_name

        mem = section(node, "jvm", "mem")
        if mem is not None:
            accumulate(init_heap, node_name, mem, "heap_init_in_bytes")
            accumulate(max_heap, node_name, mem, "heap_max_in_bytes")
            accumulate(init_non_heap, node_name, mem, "non_heap_init_in_bytes")
            accumulate(max_non_heap, node_name, mem, "non_heap_max_in_bytes")
            accumulate(max_direct, node_name, mem, "direct_max_in_bytes")
    return result


# (metric name, section below "indices", field)
NODE_INDICES_STATS = [
    (catalog.STORE_SIZE, "store", "size_in_bytes"),
    (catalog.STORE_THROTTLE_TIME, "store", "throttle_time_in_millis"),
    (catalog.INDEXING_THROTTLE_TIME, "indexing", "throttle_time_in_millis"),
    (catalog.INDEXING_CURRENT, "indexing", "index_current"),
    (catalog.DELETE_CURRENT, "indexing", "delete_current"),
    (catalog.QUERY_CURRENT, "search", "query_current"),
    (catalog.FETCH_CURRENT, "search", "fetch_current"),
    (catalog.SCROLL_CURRENT, "search", "scroll_current"),
    (catalog.QUERY_CACHE_SIZE, "query_cache", "memory_size_in_bytes"),
    (catalog.FIELD_DATA_SIZE, "fielddata", "memory_size_in_bytes"),
    (catalog.PERCOLATE_SIZE, "percolate", "memory_size_in_bytes"),
    (catalog.TRANSLOG_SIZE, "translog", "size_in_bytes"),
    (catalog.REQUEST_CACHE_SIZE, "request_cache", "memory_size_in_bytes"),
    (catalog.RECOVERY_THROTTLE_TIME, "recovery", "throttle_time_in_millis"),
    (catalog.RECOVERY_AS_SOURCE, "recovery", "current_as_source"),
    (catalog.RECOVERY_AS_TARGET, "recovery", "current_as_target"),
]


def collect_node_stats(doc):
    """
    Sums up per-node statistics of ``GET /_nodes/stats`` over all nodes, with a per-node breakdown keyed by node name.

    :param doc: The parsed response.
    :return: A ``CollectorResult``.
    """
    result = CollectorResult("nodes stats")
    for name, _, _ in NODE_INDICES_STATS:
        result.add(name, Measure(catalog.NODE))
    file_desc_limit = result.add(catalog.FILE_DESCRIPTOR_LIMIT, Measure(catalog.NODE))

    for _, node in nodes_of(doc):
        node_name = node_name_of(node)

        process = section(node, "process")
        if process is not None:
            accumulate(file_desc_limit, node_name, process, "max_file_descriptors")

        indices = section(node, "indices")
        if indices is None:
            continue
        for name, section_name, field in NODE_INDICES_STATS:
            stats = section(indices, section_name)
            if stats is not None:
                accumulate(result[name], node_name, stats, field)
    return result
