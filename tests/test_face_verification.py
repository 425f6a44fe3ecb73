import unittest
from unittest.mock import patch

import requests

from checkin_service.models import FaceReference
from checkin_service.services.face_service import parse_verdict, register_face
from tests.base import CheckinTestCase, gateway_json, gateway_reply, make_image

GATEWAY_POST = "checkin_service.services.face_service.requests.post"


class TestVerdictParsing(unittest.TestCase):
    def test_match(self):
        self.assertTrue(parse_verdict("MATCH"))
        self.assertTrue(parse_verdict("  match\n"))

    def test_no_match_wins_regardless_of_case(self):
        self.assertFalse(parse_verdict("NO_MATCH"))
        self.assertFalse(parse_verdict("no_match"))
        self.assertFalse(parse_verdict("No_Match."))

    def test_spelled_out_negative_is_not_a_match(self):
        self.assertFalse(parse_verdict("NO MATCH"))
        self.assertFalse(parse_verdict("no-match"))

    def test_empty_reply_is_not_a_match(self):
        self.assertFalse(parse_verdict(""))
        self.assertFalse(parse_verdict(None))
        self.assertFalse(parse_verdict("I cannot tell"))


class TestVerifyFaceFunction(CheckinTestCase):
    def call(self, action, user_id="user-1", image=None):
        return self.client.post("/functions/verify-face", json={
            "capturedImage": image or make_image(),
            "userId": user_id,
            "action": action,
        })

    def test_register_stores_reference(self):
        resp = self.call("register")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {"success": True, "message": "Face registered successfully"})
        self.assertEqual(FaceReference.query.filter_by(user_id="user-1").count(), 1)

    def test_second_registration_overwrites(self):
        self.call("register", image=make_image(b"first"))
        self.call("register", image=make_image(b"second"))

        references = FaceReference.query.filter_by(user_id="user-1").all()
        self.assertEqual(len(references), 1)
        self.assertEqual(references[0].face_image_data, make_image(b"second"))

    def test_verify_without_registration_never_calls_model(self):
        with patch(GATEWAY_POST) as post:
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 200)
        body = resp.get_json()
        self.assertFalse(body["success"])
        self.assertIn("No registered face found", body["message"])
        post.assert_not_called()

    def test_verify_without_registration_ignores_image(self):
        resp = self.call("verify", image="not-an-image")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["message"],
                         "No registered face found. Please register your face first.")

    def test_malformed_gateway_body_is_a_failed_verdict(self):
        self.call("register")
        bodies = [
            ["unexpected"],
            {"choices": "MATCH"},
            {"choices": []},
            {"choices": [{"message": "MATCH"}]},
            {"choices": [{"message": {"content": ["MATCH"]}}]},
        ]
        for body in bodies:
            with patch(GATEWAY_POST, return_value=gateway_json(body)):
                resp = self.call("verify")
            self.assertEqual(resp.status_code, 200, body)
            self.assertEqual(resp.get_json(), {
                "success": False,
                "message": "Face verification failed. Please try again.",
            })

    def test_verify_match(self):
        self.call("register")
        with patch(GATEWAY_POST, return_value=gateway_reply("MATCH")) as post:
            resp = self.call("verify")
        self.assertEqual(resp.get_json(), {"success": True, "message": "Face verified successfully"})

        post.assert_called_once()
        payload = post.call_args.kwargs["json"]
        self.assertEqual(payload["model"], "google/gemini-2.5-flash")
        self.assertEqual(payload["max_tokens"], 10)
        self.assertEqual(post.call_args.kwargs["headers"]["Authorization"], "Bearer test-gateway-key")
        image_urls = [part["image_url"]["url"] for part in payload["messages"][1]["content"]
                      if part["type"] == "image_url"]
        self.assertEqual(image_urls, [make_image(), make_image()])

    def test_verify_no_match(self):
        self.call("register")
        with patch(GATEWAY_POST, return_value=gateway_reply("no_match")):
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json(), {
            "success": False,
            "message": "Face verification failed. Please try again.",
        })

    def test_rate_limit_is_reported_not_retried(self):
        self.call("register")
        with patch(GATEWAY_POST, return_value=gateway_reply("", status_code=429)) as post:
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 429)
        self.assertEqual(resp.get_json()["message"], "Rate limit exceeded. Please try again later.")
        self.assertEqual(post.call_count, 1)

    def test_quota_exceeded(self):
        self.call("register")
        with patch(GATEWAY_POST, return_value=gateway_reply("", status_code=402)):
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 402)
        self.assertFalse(resp.get_json()["success"])

    def test_other_gateway_error_is_500(self):
        self.call("register")
        with patch(GATEWAY_POST, return_value=gateway_reply("", status_code=500)):
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json()["message"], "AI verification failed")

    def test_gateway_unreachable(self):
        self.call("register")
        with patch(GATEWAY_POST, side_effect=requests.ConnectionError("down")):
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 503)

    def test_unexpected_failure_is_generic_500(self):
        self.call("register")
        with patch(GATEWAY_POST, side_effect=RuntimeError("boom")):
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.get_json(), {"success": False, "message": "Face verification failed"})

    def test_missing_gateway_key_is_configuration_error(self):
        self.call("register")
        self.app.config["AI_GATEWAY_API_KEY"] = None
        with patch(GATEWAY_POST) as post:
            resp = self.call("verify")
        self.assertEqual(resp.status_code, 500)
        self.assertIn("AI_GATEWAY_API_KEY", resp.get_json()["message"])
        post.assert_not_called()

    def test_invalid_action(self):
        resp = self.call("delete")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json(), {"success": False, "message": "Invalid action"})

    def test_invalid_image(self):
        resp = self.call("register", image="not-an-image")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(FaceReference.query.count(), 0)

    def test_cors_headers_and_preflight(self):
        resp = self.client.options("/functions/verify-face")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")

        resp = self.call("delete")
        self.assertEqual(resp.headers["Access-Control-Allow-Origin"], "*")
        self.assertIn("content-type", resp.headers["Access-Control-Allow-Headers"])


class TestFaceRegistration(CheckinTestCase):
    def test_registration_racing_another_insert_overwrites(self):
        register_face("user-1", make_image(b"first"))
        existing = FaceReference.query.filter_by(user_id="user-1").one()

        # The first lookup misses, as if the other request had not committed yet
        with patch("checkin_service.services.face_service.get_reference",
                   side_effect=[None, existing]):
            result = register_face("user-1", make_image(b"second"))

        self.assertTrue(result["success"])
        references = FaceReference.query.filter_by(user_id="user-1").all()
        self.assertEqual(len(references), 1)
        self.assertEqual(references[0].face_image_data, make_image(b"second"))


if __name__ == '__main__':
    unittest.main()
