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


class MonitorError(Exception):
    """
    Base class for all esmonitor exceptions
    """

    def __init__(self, message, cause=None):
        super().__init__(message, cause)
        self.message = message
        self.cause = cause

    def __repr__(self):
        return self.message

    def __str__(self):
        return self.message

    def full_message(self):
        msg = str(self.message)
        nesting = 0
        current_exc = self
        while hasattr(current_exc, "cause") and current_exc.cause:
            nesting += 1
            current_exc = current_exc.cause
            if hasattr(current_exc, "message"):
                msg += "\n%s%s" % ("\t" * nesting, current_exc.message)
            else:
                msg += "\n%s%s" % ("\t" * nesting, str(current_exc))
        return msg


class SystemSetupError(MonitorError):
    """
    Thrown when a user did something wrong, e.g. the monitor configuration is incomplete or out of range.
    """


class CollectionError(MonitorError):
    """
    Thrown when a polling cycle cannot complete, e.g. the cluster is unreachable or responded with an error status.
    """


class PreconditionError(MonitorError):
    """
    Thrown when measures are wired up inconsistently. This is a programming error, not a transient condition.
    """
