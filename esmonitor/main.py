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

import argparse
import logging
import sys

import tabulate

from esmonitor import catalog, exceptions, log, metrics
from esmonitor.monitor import Monitor, Sampler
from esmonitor.utils import console, opts


def positive_number(v):
    value = float(v)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be positive but was {}".format(value))
    return value


def positive_int(v):
    value = int(v)
    if value <= 0:
        raise argparse.ArgumentTypeError("must be positive but was {}".format(value))
    return value


def create_arg_parser():
    parser = argparse.ArgumentParser(prog="esmonitor",
                                     description="Polls the diagnostic APIs of an Elasticsearch cluster and reports measures.")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING).")
    parser.add_argument("--log-file", default=None, help="Write log output to this file instead of stderr.")
    parser.add_argument("--quiet", action="store_true", default=False, help="Suppress as much console output as possible.")

    subparsers = parser.add_subparsers(title="subcommands", dest="subcommand")
    subparsers.add_parser("list-metrics", help="List all metrics that are reported.")

    poll_parser = subparsers.add_parser("poll", help="Poll a cluster and print the reported measures.")
    poll_parser.add_argument(
        "--params",
        required=True,
        help="Monitor parameters as key:value pairs or as a path to a JSON file, e.g. "
             "\"use-full-url:true,url:'http://localhost:9200',timeout:5000\".")
    poll_parser.add_argument("--cycles", type=positive_int, default=None,
                             help="Number of polling cycles to run (default: run until interrupted).")
    poll_parser.add_argument("--interval", type=positive_number, default=None,
                             help="Seconds between two polling cycles (default: the 'sample-interval' parameter).")
    poll_parser.add_argument("--rewrite-scalar", action="store_true", default=False,
                             help="Write base values once more before dynamic measures.")
    return parser


def print_measures(environment):
    rows = [[name, dimension or "", key or "", value] for name, dimension, key, value in environment.values()]
    console.println(tabulate.tabulate(rows, ["Name", "Dimension", "Key", "Value"], floatfmt=".2f"))


def poll(args):
    environment = metrics.InMemoryMetricsEnvironment()
    monitor = Monitor(environment, rewrite_scalar=args.rewrite_scalar)
    cfg = monitor.setup(opts.to_dict(args.params))
    interval = args.interval or cfg.sample_interval

    def on_cycle(published):
        console.info("Published [{}] measures.".format(len(published)))
        print_measures(environment)

    sampler = Sampler(monitor, interval, on_cycle=on_cycle)
    try:
        sampler.run(cycles=args.cycles)
    except KeyboardInterrupt:
        console.info("Stopping.")
    finally:
        monitor.teardown()
    return sampler.failures == 0


def dispatch_sub_command(args):
    logger = logging.getLogger(__name__)
    try:
        if args.subcommand == "list-metrics":
            catalog.list_metrics()
            return True
        elif args.subcommand == "poll":
            return poll(args)
        else:
            console.error("Unknown subcommand [{}]".format(args.subcommand))
            return False
    except exceptions.MonitorError as e:
        logger.exception("Cannot run subcommand [%s].", args.subcommand)
        console.error("Cannot {}. {}".format(args.subcommand, e.full_message()))
        return False


def main():
    parser = create_arg_parser()
    args = parser.parse_args()
    if args.subcommand is None:
        parser.print_help()
        sys.exit(64)

    console.init(quiet=args.quiet)
    log.configure_logging(args.log_level.upper(), args.log_file)
    logger = logging.getLogger(__name__)
    logger.info("OS [%s]", sys.platform)

    success = dispatch_sub_command(args)
    sys.exit(0 if success else 64)


if __name__ == "__main__":
    main()
