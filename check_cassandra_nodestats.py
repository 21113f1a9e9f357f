#!/usr/bin/env python3
#  vim:ts=4:sts=4:sw=4:et
#
#  Author: Hari Sekhon
#  Date: 2026-10-18 11:02:47 +0100 (Sun, 18 Oct 2026)
#
#  https://github.com/harisekhon/nagios-plugins
#
#  License: see accompanying Hari Sekhon LICENSE file
#
#  If you're using my code you're welcome to connect with me on LinkedIn
#  and optionally send me feedback to help steer this or other code I publish
#
#  https://www.linkedin.com/in/harisekhon
#

"""

Nagios / Sensu Plugin to check Cassandra node stats using 'nodetool'

Checks any combination of:

    --gossip    Gossip active status from 'nodetool info'
    --thrift    Thrift active status from 'nodetool info'
    --native    Native Transport active status from 'nodetool info'
    --ndstatus  status of each node in the ring from 'nodetool status'

Each result is output as a line of JSON, eg.

    CheckCassandraNodeStats OK: {"node.172.16.17.1.status":"UN"}

The first CRITICAL result exits immediately, so --ndstatus stops at the first node
found in a state other than Up/Normal (UN) and later nodes are not reported

Requires 'nodetool' in the $PATH, or use --nodetool to give its path

"""

import json
import logging
import os
import re
import subprocess
import sys
import traceback
from optparse import OptionParser
try:
    # pylint: disable=wrong-import-position
    from harisekhon.utils import log, log_option, CriticalError, UnknownError, ERRORS, support_msg
    from harisekhon.utils import validate_host, validate_port, validate_int, InvalidOptionException
except ImportError as _:
    print(traceback.format_exc(), end='')
    sys.exit(4)

__author__ = 'Hari Sekhon'
__title__ = 'Nagios Plugin for Cassandra Node Stats via nodetool'
__version__ = '0.3.1'

CHECK_NAME = 'CheckCassandraNodeStats'

DEFAULT_HOST = 'localhost'
DEFAULT_PORT = '7199'
DEFAULT_CRIT = 15
DEFAULT_TIMEOUT = 30
MAX_TIMEOUT = 3600

# shape only, nodetool prints what it has, octets are not range checked
ipv4_shape_regex = r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}'


def output(status, payload=None):
    if payload is None:
        print('{0} {1}'.format(CHECK_NAME, status))
        return
    if isinstance(payload, dict):
        payload = json.dumps(payload, separators=(',', ':'))
    print('{0} {1}: {2}'.format(CHECK_NAME, status, payload))


def end(status, payload=None):
    """Prints the final result line and exits with the Nagios exit code for the status"""
    output(status, payload)
    sys.exit(ERRORS[status])


class CheckCassandraNodeStats:

    def __init__(self):
        self.host = DEFAULT_HOST
        self.port = DEFAULT_PORT
        # declared but not used by any check
        self.crit = DEFAULT_CRIT
        self.gossip = False
        self.thrift = False
        self.nativetransport = False
        self.ndstatus = False
        self.timeout = DEFAULT_TIMEOUT
        self.nodetool = 'nodetool'
        self.node_skip_regex = re.compile(r'^(?:Datacenter:|================|Status=Up|--|Note:)|State=Normal|^\s*$')
        self.node_up_normal_regex = re.compile(r'^UN\s\s({0})'.format(ipv4_shape_regex))
        self.node_regex = re.compile(r'(\w+)\s\s({0})'.format(ipv4_shape_regex))

    # ======================================= #
    # result reporting
    #
    # report_ok() outputs and carries on,
    # report_critical() / report_unknown() end the run immediately

    @staticmethod
    def report_ok(payload):
        output('OK', payload)

    @staticmethod
    def report_critical(payload):
        end('CRITICAL', payload)

    @staticmethod
    def report_unknown(msg):
        end('UNKNOWN', msg)

    @staticmethod
    def finish():
        end('OK')

    # ======================================= #

    def validate_options(self):
        validate_host(self.host)
        validate_port(self.port)
        self.port = str(self.port)
        validate_int(self.crit, 'crit')
        self.crit = int(self.crit)
        validate_int(self.timeout, 'timeout')
        self.timeout = int(self.timeout)
        if not 1 <= self.timeout <= MAX_TIMEOUT:
            raise UnknownError('timeout must be between 1 and {0} seconds'.format(MAX_TIMEOUT))
        log_option('crit', self.crit)
        log_option('timeout', self.timeout)
        log_option('nodetool', self.nodetool)
        log_option('gossip', self.gossip)
        log_option('thrift', self.thrift)
        log_option('native transport', self.nativetransport)
        log_option('node status', self.ndstatus)

    def nodetool_cmd(self, subcommand):
        """Runs nodetool against the configured host and port and returns its output as a string

        No shell is involved, the host and port are passed through as separate args"""
        cmd = [self.nodetool, '-h', self.host, '-p', self.port, subcommand]
        log.debug('cmd: %s', ' '.join(cmd))
        try:
            proc = subprocess.Popen(cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT)
        except OSError as _:
            raise UnknownError("failed to execute '{0}': {1}".format(self.nodetool, _))
        try:
            (stdout, _) = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.communicate()
            raise UnknownError("'nodetool {0}' timed out after {1} secs".format(subcommand, self.timeout))
        if isinstance(stdout, bytes):
            stdout = stdout.decode('utf-8', 'replace')
        log.debug('stdout: %s', stdout)
        returncode = proc.returncode
        log.debug('returncode: %s', returncode)
        if returncode != 0:
            raise CriticalError('nodetool returncode: {0}, output: {1}'.format(returncode, stdout.strip()))
        return stdout

    def parse_active_status(self, label, name):
        status_regex = re.compile(r'^{0}[^:]*:\s(.+)'.format(re.escape(label)))
        info = self.nodetool_cmd('info')
        for line in info.splitlines():
            match = status_regex.match(line)
            if match:
                status = match.group(1).rstrip()
                attr = {'{0}.{1}_status'.format(self.host, name): status}
                log.info('%s: %s', label, status)
                if status != 'true':
                    self.report_critical(attr)
                self.report_ok(attr)

    def parse_gossip(self):
        self.parse_active_status('Gossip active', 'gossip')

    def parse_thrift(self):
        self.parse_active_status('Thrift active', 'thrift')

    def parse_nativetransport(self):
        self.parse_active_status('Native Transport active', 'nativetransport')

    # $ nodetool status
    # Datacenter: LON5
    # ================
    # Status=Up/Down
    # |/ State=Normal/Leaving/Joining/Moving
    # --  Address      Load       Tokens       Owns    Host ID                               Rack
    # UN  172.16.1.1  1.88 GB    256          ?       5uu5274d-0c1c-46f1-b73c-c28ffdcad10e  A12-5
    # DN  172.16.1.2  2.55 GB    256          ?       4uu6478c-0e29-468c-ad38-f417ccbcf403  A12-5
    # UL  172.16.1.3  3.24 GB    256          ?       fuu0063d-a033-4a78-95e8-40a479d99a6b  A12-5
    # UJ  172.16.1.4  4.92 GB    256          ?       1uuace8e-af9c-4eff-9977-1a34c09c5535  A12-5
    # UN  172.16.1.5  5.22 GB    256          ?       7uu9ee6c-f093-4fa0-874b-3f5bcaa5b952  A12-5

    def parse_ndstatus(self):
        nodestatus = self.nodetool_cmd('status')
        for line in nodestatus.splitlines():
            if self.node_skip_regex.search(line):
                continue
            match = self.node_up_normal_regex.match(line)
            if match:
                address = match.group(1)
                log.info('node %s is Up/Normal', address)
                self.report_ok({'node.{0}.status'.format(address): 'UN'})
                continue
            match = self.node_regex.search(line)
            if not match:
                raise UnknownError("failed to parse node status line '{0}'. {1}".format(line.strip(), support_msg()))
            (ndstatus, address) = match.groups()
            log.info('node %s status %s', address, ndstatus)
            self.report_critical({'node.{0}.status'.format(address): ndstatus})

    def run(self):
        if self.gossip:
            self.parse_gossip()
        if self.thrift:
            self.parse_thrift()
        if self.nativetransport:
            self.parse_nativetransport()
        if self.ndstatus:
            self.parse_ndstatus()
        self.finish()

    def main(self):
        try:
            self.validate_options()
            self.run()
        except CriticalError as _:
            self.report_critical(str(_))
        except (UnknownError, InvalidOptionException) as _:
            self.report_unknown(str(_))
        except Exception as _:  # pylint: disable=broad-except
            log.debug(traceback.format_exc())
            self.report_unknown('Nagios Plugin Exception: {0}: {1}'.format(type(_).__name__, _))


def main(argv=None):
    """Parses command line options and runs the checks"""

    parser = OptionParser(add_help_option=False)

    parser.add_option('-h', '--host', dest='host', default=DEFAULT_HOST,
                      help='Cassandra hostname (default: %default)')
    parser.add_option('-P', '--port', dest='port', default=DEFAULT_PORT,
                      help='Cassandra JMX port (default: %default)')
    parser.add_option('-c', '--crit', dest='crit', default=DEFAULT_CRIT,
                      help='Critical level for event, currently unused by all checks (default: %default)')
    parser.add_option('-g', '--gossip', action='store_true', dest='gossip', default=False,
                      help='Check Gossip protocol status')
    parser.add_option('-t', '--thrift', action='store_true', dest='thrift', default=False,
                      help='Check Thrift protocol status')
    parser.add_option('-n', '--native', action='store_true', dest='nativetransport', default=False,
                      help='Check Native Transport protocol status')
    parser.add_option('-d', '--ndstatus', action='store_true', dest='ndstatus', default=False,
                      help='Check status of each node in the ring, stops at the first node not Up/Normal')
    parser.add_option('-T', '--timeout', dest='timeout', default=DEFAULT_TIMEOUT,
                      help='Timeout in secs for each nodetool call (default: %default)')
    parser.add_option('-N', '--nodetool', dest='nodetool', default='nodetool',
                      help='Path to nodetool (default: %default from $PATH)')
    parser.add_option('-v', '--verbose', action='count', dest='verbose', default=0,
                      help='Verbose mode (-v => INFO, -vv => DEBUG), logged to stderr')
    parser.add_option('-V', '--version', action='store_true', dest='version',
                      help='Print version number and exit')
    parser.add_option('--help', action='help', help='Show this help message and exit')

    (options, args) = parser.parse_args(argv)

    if args:
        parser.print_help()
        sys.exit(ERRORS['UNKNOWN'])

    if options.version:
        print('%s - Version %s\nAuthor: %s\n' % (__title__, __version__, __author__))
        sys.exit(ERRORS['OK'])

    if options.verbose > 1 or os.environ.get('DEBUG'):
        log.setLevel(logging.DEBUG)
    elif options.verbose == 1:
        log.setLevel(logging.INFO)
    else:
        log.setLevel(logging.WARNING)
    if not log.handlers:
        logging.basicConfig()

    check = CheckCassandraNodeStats()
    check.host = options.host
    check.port = options.port
    check.crit = options.crit
    check.gossip = options.gossip
    check.thrift = options.thrift
    check.nativetransport = options.nativetransport
    check.ndstatus = options.ndstatus
    check.timeout = options.timeout
    check.nodetool = options.nodetool
    try:
        check.main()
    except KeyboardInterrupt:
        print('Caught Control-C...')
        sys.exit(ERRORS['CRITICAL'])


if __name__ == '__main__':
    main()
