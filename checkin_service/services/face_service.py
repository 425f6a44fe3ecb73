"""
Face Service: verification function
register: store (upsert) the reference image for a user
verify:   compare the stored reference with a fresh capture through the
          model gateway and turn its free-text reply into a verdict

The verdict is read out of free text, not a score. A model that phrases its
answer differently produces a false negative; every raw reply is logged so
these cases can be found.
"""

import base64
import binascii
import logging
import re
import requests
from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from checkin_service.extensions import db
from checkin_service.models.face_reference import FaceReference
from checkin_service.exceptions import (
    ConfigurationError,
    DataAccessError,
    ExternalServiceError,
    QuotaExceededError,
    RateLimitedError,
    ServiceUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

ACTIONS = ("register", "verify")

SYSTEM_PROMPT = (
    'You are a face verification system. Compare two face images and determine if they '
    'show the same person. Respond with only "MATCH" if the faces belong to the same '
    'person, or "NO_MATCH" if they are different people. Consider facial features, '
    'structure, and unique characteristics. Be strict in your verification.'
)

MSG_REGISTERED = "Face registered successfully"
MSG_NO_REFERENCE = "No registered face found. Please register your face first."
MSG_VERIFIED = "Face verified successfully"
MSG_REJECTED = "Face verification failed. Please try again."

# "NO MATCH" / "NO-MATCH" read as NO_MATCH
_NEGATIVE_VARIANTS = re.compile(r"NO[\s\-]+MATCH")


def parse_verdict(reply):
    """True when the reply contains MATCH and not NO_MATCH (case-insensitive)."""
    if not reply:
        return False
    text = _NEGATIVE_VARIANTS.sub("NO_MATCH", reply.strip().upper())
    return "MATCH" in text and "NO_MATCH" not in text


def validate_image(image_data):
    """Accept a base64 data URL (what the capture client sends) or an http(s) URL."""
    if not isinstance(image_data, str) or not image_data.strip():
        raise ValidationError("Missing capturedImage")

    if image_data.startswith(("http://", "https://")):
        return image_data

    if not image_data.startswith("data:image/") or ";base64," not in image_data:
        raise ValidationError("capturedImage must be a base64 image data URL")

    payload = image_data.split(",", 1)[1]
    try:
        base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError("capturedImage is not valid base64")
    return image_data


def get_reference(user_id):
    return FaceReference.query.filter_by(user_id=str(user_id)).first()


def has_reference(user_id):
    return get_reference(user_id) is not None


def register_face(user_id, captured_image):
    """Store or overwrite the reference image for user_id."""
    captured_image = validate_image(captured_image)
    reference = get_reference(user_id)
    created = reference is None
    try:
        if reference:
            reference.face_image_data = captured_image
        else:
            db.session.add(FaceReference(user_id=str(user_id), face_image_data=captured_image))
        db.session.commit()
    except IntegrityError:
        # A concurrent registration inserted the row first; overwrite it
        db.session.rollback()
        reference = get_reference(user_id)
        if reference is None:
            raise DataAccessError("Failed to store face reference")
        reference.face_image_data = captured_image
        created = False
        _commit_reference(user_id)
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Face registration error for %s: %s", user_id, e)
        raise DataAccessError("Failed to store face reference")

    logger.info("Face reference %s for user %s", "created" if created else "updated", user_id)
    return {"success": True, "message": MSG_REGISTERED}


def _commit_reference(user_id):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("Face registration error for %s: %s", user_id, e)
        raise DataAccessError("Failed to store face reference")


def _reply_text(result):
    """Pull choices[0].message.content out of a chat-completions body, or ''."""
    if not isinstance(result, dict):
        return ""
    choices = result.get("choices")
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        return ""
    message = choices[0].get("message")
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content.strip() if isinstance(content, str) else ""


def request_comparison(reference_image, captured_image):
    """
    One chat-completions call to the model gateway; returns the reply text.
    Not retried: rate limiting and quota errors go straight back to the caller.
    """
    config = current_app.config
    api_key = config.get("AI_GATEWAY_API_KEY")
    if not api_key:
        raise ConfigurationError("AI_GATEWAY_API_KEY not configured")

    payload = {
        "model": config["AI_MODEL"],
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": "Are these two images of the same person? First image (registered):"},
                    {"type": "image_url", "image_url": {"url": reference_image}},
                    {"type": "text", "text": "Second image (current attempt):"},
                    {"type": "image_url", "image_url": {"url": captured_image}},
                ],
            },
        ],
        "max_tokens": 10,
    }

    try:
        response = requests.post(
            config["AI_GATEWAY_URL"],
            json=payload,
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=config["AI_GATEWAY_TIMEOUT"],
        )
    except (requests.ConnectionError, requests.Timeout) as e:
        logger.error("Model gateway unreachable: %s", e)
        raise ServiceUnavailableError()
    except requests.RequestException as e:
        logger.error("Model gateway request failed: %s", e)
        raise ExternalServiceError("AI verification failed")

    if response.status_code == 429:
        logger.warning("Model gateway rate limited the request")
        raise RateLimitedError()
    if response.status_code == 402:
        logger.warning("Model gateway quota exhausted")
        raise QuotaExceededError()
    if not response.ok:
        logger.error("Model gateway returned %s", response.status_code)
        raise ExternalServiceError("AI verification failed")

    try:
        result = response.json()
    except ValueError:
        raise ExternalServiceError("AI verification failed")

    reply = _reply_text(result)
    if not reply:
        logger.warning("Model gateway reply had no text content: %r", result)
    return reply


def verify_face(user_id, captured_image):
    reference = get_reference(user_id)
    if not reference:
        logger.info("Face verification for %s without a registered face", user_id)
        return {"success": False, "message": MSG_NO_REFERENCE}

    captured_image = validate_image(captured_image)
    reply = request_comparison(reference.face_image_data, captured_image)
    is_match = parse_verdict(reply)
    logger.info("Face verification result for %s: %r -> %s", user_id, reply, is_match)

    return {
        "success": is_match,
        "message": MSG_VERIFIED if is_match else MSG_REJECTED,
    }


def run_face_action(captured_image, user_id, action):
    """Entry point shared by the public function endpoint and the admin login step."""
    if action not in ACTIONS:
        raise ValidationError("Invalid action")
    if not user_id:
        raise ValidationError("Missing userId")

    if action == "register":
        return register_face(user_id, captured_image)
    return verify_face(user_id, captured_image)
