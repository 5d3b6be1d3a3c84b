from datetime import datetime
from types import SimpleNamespace

import pytest
from zk.exception import ZKNetworkError

from src.timeclock.timeclock.core.exceptions import DeviceError
from src.timeclock.timeclock.ingestion import device as device_module
from src.timeclock.timeclock.ingestion.device import DeviceConfig, ZKTecoDevice, build_device


class _FakeConn:
    def __init__(self, records):
        self.records = records
        self.time = None
        self.closed = False

    def get_attendance(self):
        return self.records

    def set_time(self, value):
        self.time = value

    def disconnect(self):
        self.closed = True


class _FakeZK:
    instances = []

    def __init__(self, ip, **kwargs):
        self.ip = ip
        self.kwargs = kwargs
        self.conn = _FakeConn(
            [
                SimpleNamespace(user_id=107, timestamp=datetime(2025, 3, 4, 9), status=1, punch=0),
                SimpleNamespace(user_id="108", timestamp=datetime(2025, 3, 4, 9, 5), status=15, punch=1),
            ]
        )
        self.fail = False
        _FakeZK.instances.append(self)

    def connect(self):
        if self.fail:
            raise ZKNetworkError("can't reach device (ping 10.0.0.5)")
        return self.conn


@pytest.fixture
def fake_zk(monkeypatch):
    _FakeZK.instances = []
    monkeypatch.setattr(device_module, "ZK", _FakeZK)
    return _FakeZK


def test_reads_log_with_positional_serials(fake_zk):
    device = ZKTecoDevice(DeviceConfig(ip="10.0.0.5", device_id="front-door"))

    device.connect()
    entries = device.get_attendance()
    device.disconnect()

    assert [(e.serial, e.biometric_id, e.verify_type, e.punch_state) for e in entries] == [
        (1, "107", 1, 0),
        (2, "108", 15, 1),
    ]
    assert fake_zk.instances[0].conn.closed
    assert fake_zk.instances[0].kwargs["port"] == 4370


def test_connection_failure_is_device_error(fake_zk):
    device = ZKTecoDevice(DeviceConfig(ip="10.0.0.5"))
    fake_zk.instances[0].fail = True

    with pytest.raises(DeviceError):
        device.connect()
    with pytest.raises(DeviceError):
        device.get_attendance()


def test_set_time(fake_zk):
    device = ZKTecoDevice(DeviceConfig(ip="10.0.0.5"))
    device.connect()

    device.set_time(datetime(2025, 3, 4, 8))

    assert fake_zk.instances[0].conn.time == datetime(2025, 3, 4, 8)


def test_build_device_from_settings(fake_zk):
    assert build_device(None) is None
    assert build_device({"ip": ""}) is None

    device = build_device({"ip": "10.0.0.5", "port": "4371", "password": "123"})

    assert device.device_id == "10.0.0.5"
    assert fake_zk.instances[0].kwargs["password"] == 123
    assert fake_zk.instances[0].kwargs["port"] == 4371
