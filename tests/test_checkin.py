import unittest
import uuid
from datetime import datetime

from checkin_service.extensions import db
from checkin_service.models import Guest
from checkin_service.services.guest_service import create_guest
from checkin_service.services.scan_service import check_in_guest
from tests.base import CheckinTestCase


class TestScanCheckIn(CheckinTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.admin_token()
        self.staff = self.staff_token(self.admin)
        self.headers = self.auth_header(self.staff)

    def scan(self, token):
        return self.client.post("/checkin/scan", json={"scan_token": token}, headers=self.headers)

    def test_end_to_end_scan(self):
        alice = self.add_guest(self.admin, "Alice", "priority")
        self.assertEqual(alice["guest_type"], "vip")

        resp = self.scan(alice["qr_code"])
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertFalse(body["already_checked_in"])
        self.assertEqual(body["message"], "Alice checked in successfully")
        self.assertTrue(body["data"]["checked_in"])
        checked_in_at = body["data"]["checked_in_at"]
        self.assertIsNotNone(checked_in_at)

        resp = self.scan(alice["qr_code"])
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertTrue(body["already_checked_in"])
        self.assertEqual(body["message"], "Alice has already been checked in")
        self.assertEqual(body["data"]["checked_in_at"], checked_in_at)

        resp = self.client.get(f"/guests/{alice['id']}", headers=self.headers)
        self.assertEqual(resp.get_json()["data"]["checked_in_at"], checked_in_at)

    def test_scan_trims_manual_entry(self):
        guest = self.add_guest(self.admin)
        resp = self.scan(f"  {guest['qr_code']}\n")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.get_json()["data"]["checked_in"])

    def test_unknown_token(self):
        resp = self.scan("GUEST-0-doesnotexist")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.get_json()["message"], "Guest not found")

    def test_missing_token(self):
        resp = self.scan("   ")
        self.assertEqual(resp.status_code, 400)

    def test_manual_check_in_keeps_first_timestamp(self):
        guest = self.add_guest(self.admin)
        url = f"/guests/{guest['id']}/check-in"

        first = self.client.post(url, headers=self.headers).get_json()
        second = self.client.post(url, headers=self.headers).get_json()

        self.assertFalse(first["already_checked_in"])
        self.assertTrue(second["already_checked_in"])
        self.assertEqual(first["data"]["checked_in_at"], second["data"]["checked_in_at"])
        self.assertEqual(Guest.query.filter_by(checked_in=True).count(), 1)

    def test_unapproved_staff_cannot_scan(self):
        guest = self.add_guest(self.admin)
        self.register("pending@example.com")
        token = self.login("pending@example.com")["access_token"]
        resp = self.client.post("/checkin/scan", json={"scan_token": guest["qr_code"]},
                                headers=self.auth_header(token))
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(db.session.get(Guest, uuid.UUID(guest["id"])).checked_in)


class TestConditionalCheckIn(CheckinTestCase):
    def test_stale_guest_keeps_first_check_in(self):
        guest = create_guest("Alice")
        self.assertFalse(guest.checked_in)

        # Another door checks the guest in behind this session's back
        first_seen = datetime(2026, 5, 1, 18, 30)
        Guest.query.filter_by(id=guest.id).update(
            {"checked_in": True, "checked_in_at": first_seen},
            synchronize_session=False,
        )
        self.assertFalse(guest.checked_in)

        result, newly_checked_in = check_in_guest(guest)
        self.assertIs(result, guest)
        self.assertFalse(newly_checked_in)
        self.assertTrue(guest.checked_in)
        self.assertEqual(guest.checked_in_at.replace(tzinfo=None), first_seen)


if __name__ == '__main__':
    unittest.main()
