"""
Shared fixtures for the check_cassandra_nodestats tests.

nodetool is never really executed, subprocess.Popen is replaced by a fake that
replays canned output per nodetool subcommand and records the argv it was given.
"""
import pathlib
import subprocess
import sys
from types import SimpleNamespace

import pytest

# plugins live at the repo root, not in an installed package
PROJECT_ROOT = pathlib.Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from check_cassandra_nodestats import CHECK_NAME, CheckCassandraNodeStats  # noqa: E402


NODETOOL_INFO = """\
ID                     : 5uu5274d-0c1c-46f1-b73c-c28ffdcad10e
Gossip active          : true
Thrift active          : true
Native Transport active: true
Load                   : 1.88 GB
Generation No          : 1518080735
Uptime (seconds)       : 172543
Heap Memory (MB)       : 1243.21 / 3970.00
Data Center            : LON5
Rack                   : A12-5
Exceptions             : 0
"""

NODETOOL_STATUS = """\
Datacenter: LON5
================
Status=Up/Down
|/ State=Normal/Leaving/Joining/Moving
--  Address      Load       Tokens       Owns    Host ID                               Rack
UN  172.16.1.1  1.88 GB    256          ?       5uu5274d-0c1c-46f1-b73c-c28ffdcad10e  A12-5
UN  172.16.1.5  5.22 GB    256          ?       7uu9ee6c-f093-4fa0-874b-3f5bcaa5b952  A12-5
"""


@pytest.fixture
def nodetool_info_output():
    return NODETOOL_INFO


@pytest.fixture
def nodetool_status_output():
    return NODETOOL_STATUS


@pytest.fixture
def nodetool(monkeypatch):
    """Fake nodetool: set .outputs[subcommand] = text or (text, returncode), inspect .calls"""
    fake = SimpleNamespace(outputs={}, calls=[], timeout_on=None)

    class FakePopen:

        def __init__(self, cmd, stdout=None, stderr=None):
            fake.calls.append(cmd)
            self.cmd = cmd
            self.returncode = None
            self.killed = False

        def communicate(self, timeout=None):
            if self.cmd[-1] == fake.timeout_on and not self.killed:
                raise subprocess.TimeoutExpired(self.cmd, timeout)
            result = fake.outputs[self.cmd[-1]]
            if isinstance(result, tuple):
                (text, self.returncode) = result
            else:
                (text, self.returncode) = (result, 0)
            return (text.encode('utf-8'), None)

        def kill(self):
            self.killed = True

    monkeypatch.setattr(subprocess, 'Popen', FakePopen)
    return fake


@pytest.fixture
def run_check(capsys):
    """Runs the check with the given attributes set, returns (exit code, result lines)"""

    def _run(**settings):
        check = CheckCassandraNodeStats()
        for key, value in settings.items():
            setattr(check, key, value)
        with pytest.raises(SystemExit) as excinfo:
            check.main()
        lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith(CHECK_NAME)]
        return (excinfo.value.code, lines)

    return _run
