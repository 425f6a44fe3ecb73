import unittest

from tests.base import CheckinTestCase


class TestHealth(CheckinTestCase):
    def test_health_reports_database(self):
        resp = self.client.get("/health")
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertEqual(body["service"], "checkin-service")
        self.assertEqual(body["status"], "healthy")
        self.assertIn("timestamp", body)


if __name__ == '__main__':
    unittest.main()
