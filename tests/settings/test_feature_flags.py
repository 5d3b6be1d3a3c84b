from src.timeclock.timeclock.core.enums import Role, SettingKey
from src.timeclock.timeclock.settings.service import FeatureFlags
from tests.fakes import FakeSettingsRepo, build_fake_container


def test_flags_default_to_enabled():
    flags = FeatureFlags(FakeSettingsRepo())

    assert flags.manual_attendance_enabled()
    assert flags.auto_mark_absent_enabled()


def test_unrecognised_value_falls_back_to_default():
    flags = FeatureFlags(FakeSettingsRepo({"manualAttendanceEnabled": "maybe"}))

    assert flags.is_enabled(SettingKey.MANUAL_ATTENDANCE_ENABLED)
    assert not flags.is_enabled(SettingKey.MANUAL_ATTENDANCE_ENABLED, default=False)


def test_set_enabled_round_trips_through_storage():
    repo = FakeSettingsRepo()
    flags = FeatureFlags(repo)

    flags.set_enabled(SettingKey.MANUAL_ATTENDANCE_ENABLED, False, updated_by=1)

    assert repo.values == {"manualAttendanceEnabled": "false"}
    assert not flags.manual_attendance_enabled()


def test_flag_endpoints(make_client):
    c = build_fake_container()
    admin = make_client(c, role=Role.ADMIN)

    resp = admin.put("/api/settings/flags/manualAttendanceEnabled", json={"enabled": False})
    assert resp.status_code == 200
    assert admin.get("/api/settings/flags").get_json()["data"]["manualAttendanceEnabled"] is False

    assert admin.put("/api/settings/flags/nope", json={"enabled": True}).status_code == 404
    assert admin.put("/api/settings/flags/manualAttendanceEnabled", json={"enabled": "yes"}).status_code == 400

    staff = make_client(c, role=Role.STAFF)
    assert staff.get("/api/settings/flags").status_code == 403


def test_only_flags_that_gate_a_feature_are_exposed(make_client):
    admin = make_client(build_fake_container(), role=Role.ADMIN)

    listed = admin.get("/api/settings/flags").get_json()["data"]

    assert set(listed) == {"manualAttendanceEnabled", "autoMarkAbsentEnabled"}
    assert admin.put("/api/settings/flags/importAttendanceEnabled", json={"enabled": True}).status_code == 404
