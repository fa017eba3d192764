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

import json
import os

from esmonitor import exceptions


def csv_to_list(csv):
    if csv is None:
        return None
    if isinstance(csv, list):
        return csv
    elif len(csv.strip()) == 0:
        return []
    else:
        return [e.strip() for e in csv.split(",")]


def to_bool(v):
    if v is None:
        return None
    elif isinstance(v, bool):
        return v
    elif isinstance(v, int):
        return v != 0
    elif v.lower() in ["false", "f", "no", "n", "0"]:
        return False
    elif v.lower() in ["true", "t", "yes", "y", "1"]:
        return True
    else:
        raise ValueError("Could not convert value [%s] to a boolean" % v)


def kv_to_map(kvs):
    def convert(v):
        # string (specified explicitly)
        if v.startswith("'"):
            return v[1:-1]

        # int
        try:
            return int(v)
        except ValueError:
            pass

        # float
        try:
            return float(v)
        except ValueError:
            pass

        # boolean
        try:
            return to_bool(v)
        except ValueError:
            pass

        # treat it as string by default
        return v

    result = {}
    for kv in kvs:
        # a URL contains colons itself, so only split at the first one
        if ":" not in kv:
            raise exceptions.SystemSetupError("Parameter [{}] is not a key:value pair.".format(kv))
        k, v = kv.split(":", 1)
        result[k.strip()] = convert(v.strip())
    return result


def to_dict(arg, default_parser=kv_to_map):
    """
    Parses parameters given either as a path to a JSON file or as a comma-separated list of key:value pairs.
    """
    if os.path.exists(arg) and arg.lower().endswith(".json"):
        with open(os.path.normpath(os.path.expanduser(arg)), mode="rt", encoding="utf-8") as f:
            try:
                return json.load(f)
            except json.JSONDecodeError as e:
                raise exceptions.SystemSetupError("Could not parse parameters in [{}].".format(arg), e)
    elif arg.startswith("{"):
        try:
            return json.loads(arg)
        except json.JSONDecodeError as e:
            raise exceptions.SystemSetupError("Could not parse parameters [{}].".format(arg), e)
    else:
        return default_parser(csv_to_list(arg))
