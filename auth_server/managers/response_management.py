# auth_server/managers/response_management.py
from flask import jsonify
from http import HTTPStatus
import json


class ResponseManager:
    """Unified JSON responses across the API."""

    # ---------------------- CORE BUILDER ----------------------
    @staticmethod
    def _build(
        success: bool, status: HTTPStatus, message=None, error=None, data=None
    ) -> tuple:
        payload = {
            "success": success,
            "message": message,
            "error": error,
            "data": data,
            "status": int(status),
        }

        return jsonify(payload), status

    # ---------------------- PARSE RESPONSES ----------------------

    @staticmethod
    def validate(response: tuple) -> bool:
        """Return True if response is a valid ResponseManager tuple."""
        return (
            isinstance(response, tuple)
            and len(response) == 2
            and hasattr(response[0], "get_data")
        )

    @staticmethod
    def _parse(response: tuple):
        """
        Parse a Flask response tuple returned by ResponseManager (jsonify, status).

        Returns:
            dict {
                "success": bool,
                "message": str | None,
                "error": str | None,
                "data": any | None,
                "status": int
            }
        """

        if not ResponseManager.validate(response):
            raise ValueError("Expected ResponseManager response format")

        resp, status = response
        try:
            payload = json.loads(resp.get_data(as_text=True))
        except ValueError as e:
            raise ValueError(f"Invalid JSON in ResponseManager response: {e}")

        return {
            "success": payload.get("success", False),
            "message": payload.get("message"),
            "error": payload.get("error"),
            "data": payload.get("data"),
            "status": status,
        }

    # ---------------------- GETTERS ----------------------

    @staticmethod
    def get_data(response: tuple):
        return ResponseManager._parse(response).get("data")

    # ---------------------- STATUS HELPERS ----------------------

    @staticmethod
    def is_success(response: tuple) -> bool:
        return ResponseManager._parse(response).get("success") is True

    # ---------------------- SUCCESS RESPONSES ----------------------

    @staticmethod
    def success(data=None, message="OK", status: HTTPStatus = HTTPStatus.OK):
        """Return a standardized success JSON response."""
        return ResponseManager._build(
            success=True, status=status, message=message, data=data
        )

    @staticmethod
    def created(data=None, message="Created"):
        """Return a standardized 201 Created response."""
        return ResponseManager.success(
            status=HTTPStatus.CREATED, message=message, data=data
        )

    # ---------------------- ERROR RESPONSES ----------------------
    @staticmethod
    def error(error="Error", message=None, status: HTTPStatus = HTTPStatus.BAD_REQUEST):
        """Return a standardized error JSON response."""
        return ResponseManager._build(
            success=False, status=status, message=message, error=error, data=None
        )

    @staticmethod
    def bad_request(error="Invalid request", message=None):
        return ResponseManager.error(
            error=error, message=message, status=HTTPStatus.BAD_REQUEST
        )

    @staticmethod
    def unauthorized(error="Unauthorized", message=None):
        return ResponseManager.error(
            error=error, message=message, status=HTTPStatus.UNAUTHORIZED
        )

    @staticmethod
    def conflict(error="Conflict", message=None):
        return ResponseManager.error(
            error=error, message=message, status=HTTPStatus.CONFLICT
        )

    @staticmethod
    def payload_too_large(error="Payload too large", message=None):
        return ResponseManager.error(
            error=error, message=message, status=HTTPStatus.REQUEST_ENTITY_TOO_LARGE
        )

    @staticmethod
    def internal(error="Internal server error", message=None):
        return ResponseManager.error(
            error=error, message=message, status=HTTPStatus.INTERNAL_SERVER_ERROR
        )

    @staticmethod
    def service_unavailable(error="Service unavailable", message=None):
        return ResponseManager.error(
            error=error, message=message, status=HTTPStatus.SERVICE_UNAVAILABLE
        )
