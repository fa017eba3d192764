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

import tabulate

from esmonitor.utils import console

METRIC_GROUP = "Elasticsearch Monitor"

NODE = "Node"
STATE = "State"
STAT = "Stat"

# cluster health
NODE_COUNT = "NodeCount"
DATA_NODE_COUNT = "DataNodeCount"
ACTIVE_PRIMARY_SHARDS = "ActivePrimaryShards"
ACTIVE_SHARDS_PERCENT = "ActiveShardsPercent"
ACTIVE_SHARDS = "ActiveShards"
RELOCATING_SHARDS = "RelocatingShards"
INITIALIZING_SHARDS = "InitializingShards"
UNASSIGNED_SHARDS = "UnassignedShards"
DELAYED_UNASSIGNED_SHARDS = "DelayedUnassignedShards"

# node info
MEM_INIT_HEAP = "InitHeap"
MEM_MAX_HEAP = "MaxHeap"
MEM_INIT_NON_HEAP = "InitNonHeap"
MEM_MAX_NON_HEAP = "MaxNonHeap"
MEM_MAX_DIRECT = "MaxDirect"

# cluster stats
INDEX_COUNT = "IndexCount"
SHARD_COUNT = "ShardCount"
DOCUMENT_COUNT = "DocCount"
DELETED_COUNT = "DeletedCount"
DOCUMENT_COUNT_PER_SECOND = "DocCountPerSecond"
DELETED_COUNT_PER_SECOND = "DeletedCountPerSecond"
FIELD_DATA_EVICTIONS = "FieldDataEvictions"
COMPLETION_SIZE = "CompletionSize"
SEGMENT_COUNT = "SegmentCount"
SEGMENT_SIZE = "SegmentSize"
FILE_DESCRIPTOR_COUNT = "FileDescriptorCount"
FILE_SYSTEM_SIZE = "FileSystemSize"
PERCOLATE_COUNT = "PercolateCount"

# node stats
STORE_SIZE = "StoreSize"
STORE_THROTTLE_TIME = "StoreThrottleTime"
INDEXING_THROTTLE_TIME = "IndexingThrottleTime"
INDEXING_CURRENT = "IndexingCurrent"
DELETE_CURRENT = "DeleteCurrent"
QUERY_CURRENT = "QueryCurrent"
FETCH_CURRENT = "FetchCurrent"
SCROLL_CURRENT = "ScrollCurrent"
PERCOLATE_SIZE = "PercolateSize"
TRANSLOG_SIZE = "TranslogSize"
REQUEST_CACHE_SIZE = "RequestCacheSize"
RECOVERY_THROTTLE_TIME = "RecoveryThrottleTime"
RECOVERY_AS_SOURCE = "RecoveryAsSource"
RECOVERY_AS_TARGET = "RecoveryAsTarget"
FILE_DESCRIPTOR_LIMIT = "FileDescriptorLimit"

# reported by both cluster stats and node stats
QUERY_CACHE_SIZE = "QueryCacheSize"
FIELD_DATA_SIZE = "FieldDataSize"

MetricDefinition = collections.namedtuple("MetricDefinition", ["name", "unit", "breakdown", "description"])

METRICS = [
    MetricDefinition(NODE_COUNT, "count", None, "Number of nodes in the cluster"),
    MetricDefinition(DATA_NODE_COUNT, "count", None, "Number of data nodes in the cluster"),
    MetricDefinition(ACTIVE_PRIMARY_SHARDS, "count", None, "Active primary shards"),
    MetricDefinition(ACTIVE_SHARDS_PERCENT, "percent", None, "Percentage of active shards"),
    MetricDefinition(ACTIVE_SHARDS, "count", None, "Active shards including replicas"),
    MetricDefinition(RELOCATING_SHARDS, "count", None, "Shards being relocated"),
    MetricDefinition(INITIALIZING_SHARDS, "count", None, "Shards being initialized"),
    MetricDefinition(UNASSIGNED_SHARDS, "count", None, "Unassigned shards"),
    MetricDefinition(DELAYED_UNASSIGNED_SHARDS, "count", None, "Unassigned shards with delayed allocation"),
    MetricDefinition(MEM_INIT_HEAP, "byte", NODE, "Initial JVM heap"),
    MetricDefinition(MEM_MAX_HEAP, "byte", NODE, "Maximum JVM heap"),
    MetricDefinition(MEM_INIT_NON_HEAP, "byte", NODE, "Initial JVM non-heap memory"),
    MetricDefinition(MEM_MAX_NON_HEAP, "byte", NODE, "Maximum JVM non-heap memory"),
    MetricDefinition(MEM_MAX_DIRECT, "byte", NODE, "Maximum JVM direct memory"),
    MetricDefinition(INDEX_COUNT, "count", None, "Number of indices"),
    MetricDefinition(SHARD_COUNT, "count", STATE, "Total shards, primaries and replication factor"),
    MetricDefinition(DOCUMENT_COUNT, "count", None, "Number of documents"),
    MetricDefinition(DELETED_COUNT, "count", None, "Number of deleted documents"),
    MetricDefinition(DOCUMENT_COUNT_PER_SECOND, "1/s", None, "Change of the document count per second"),
    MetricDefinition(DELETED_COUNT_PER_SECOND, "1/s", None, "Change of the deleted document count per second"),
    MetricDefinition(INDEXING_THROTTLE_TIME, "ms", NODE, "Time indexing was throttled"),
    MetricDefinition(INDEXING_CURRENT, "count", NODE, "Currently running index operations"),
    MetricDefinition(DELETE_CURRENT, "count", NODE, "Currently running delete operations"),
    MetricDefinition(QUERY_CURRENT, "count", NODE, "Currently running queries"),
    MetricDefinition(FETCH_CURRENT, "count", NODE, "Currently running fetches"),
    MetricDefinition(SCROLL_CURRENT, "count", NODE, "Currently open scrolls"),
    MetricDefinition(PERCOLATE_SIZE, "byte", NODE, "Memory used by percolation"),
    MetricDefinition(TRANSLOG_SIZE, "byte", NODE, "Size of the transaction log"),
    MetricDefinition(REQUEST_CACHE_SIZE, "byte", NODE, "Memory used by the request cache"),
    MetricDefinition(RECOVERY_THROTTLE_TIME, "ms", NODE, "Time recoveries were throttled"),
    MetricDefinition(RECOVERY_AS_SOURCE, "count", NODE, "Ongoing recoveries with the node as source"),
    MetricDefinition(RECOVERY_AS_TARGET, "count", NODE, "Ongoing recoveries with the node as target"),
    MetricDefinition(COMPLETION_SIZE, "byte", None, "Memory used by completion suggesters"),
    MetricDefinition(SEGMENT_COUNT, "count", None, "Number of segments"),
    MetricDefinition(SEGMENT_SIZE, "byte", STATE, "Segment memory by component"),
    MetricDefinition(FILE_DESCRIPTOR_COUNT, "count", STAT, "Open file descriptors (max, min, avg over nodes)"),
    MetricDefinition(FILE_DESCRIPTOR_LIMIT, "count", NODE, "File descriptor limit"),
    MetricDefinition(FILE_SYSTEM_SIZE, "byte", STAT, "File system space (free, total, available)"),
    MetricDefinition(PERCOLATE_COUNT, "count", STATE, "Percolation statistics"),
    MetricDefinition(STORE_SIZE, "byte", NODE, "Size of the index store"),
    MetricDefinition(STORE_THROTTLE_TIME, "ms", NODE, "Time the store was throttled"),
    MetricDefinition(QUERY_CACHE_SIZE, "byte", "{}/{}".format(NODE, STATE), "Memory used by the query cache"),
    MetricDefinition(FIELD_DATA_SIZE, "byte", NODE, "Memory used by field data"),
    MetricDefinition(FIELD_DATA_EVICTIONS, "count", None, "Field data evictions"),
]

ALL_MEASURES = [m.name for m in METRICS]


def list_metrics():
    console.println("Available metrics in group [{}]:\n".format(METRIC_GROUP))
    rows = [[m.name, m.unit, m.breakdown or "", m.description] for m in METRICS]
    console.println(tabulate.tabulate(rows, ["Name", "Unit", "Breakdown", "Description"]))
    console.println("\nMetrics with a breakdown are published as dynamic measures per breakdown key.")
