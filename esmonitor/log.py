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
import logging.config
import time


def log_config(level="INFO", log_file=None):
    handler = {
        "class": "logging.StreamHandler",
        "formatter": "normal",
        "stream": "ext://sys.stderr",
    }
    if log_file:
        handler = {
            "class": "logging.handlers.WatchedFileHandler",
            "formatter": "normal",
            "filename": log_file,
            "encoding": "UTF-8",
        }
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "normal": {
                "format": "%(asctime)s,%(msecs)d %(processName)s %(name)s %(levelname)s %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
                "()": "esmonitor.log.configure_utc_formatter",
            }
        },
        "handlers": {
            "log_handler": handler,
        },
        "root": {
            "handlers": ["log_handler"],
            "level": level,
        },
        "loggers": {
            "elasticsearch": {
                "handlers": ["log_handler"],
                "level": "WARNING",
                "propagate": False,
            },
            "elastic_transport": {
                "handlers": ["log_handler"],
                "level": "WARNING",
                "propagate": False,
            },
        },
    }


def configure_utc_formatter(*args, **kwargs):
    """
    Logs timestamps in UTC so log files of hosts in different time zones line up.
    """
    formatter = logging.Formatter(fmt=kwargs["format"], datefmt=kwargs["datefmt"])
    formatter.converter = time.gmtime
    return formatter


def configure_logging(level="INFO", log_file=None):
    logging.config.dictConfig(log_config(level, log_file))
    logging.captureWarnings(True)
