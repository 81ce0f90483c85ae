# auth_server/managers/json_management.py
from flask import g, request


class JSONBodyParser:
    """
    Global JSON body-parsing middleware.

    Runs before every route and leaves the parsed body on g.json_body:
      - JSON content type with a body -> parsed value (malformed -> 400)
      - anything else -> {}
    Bodies over MAX_CONTENT_LENGTH are rejected with 413 while reading.
    """

    @classmethod
    def init_app(cls, app):
        app.before_request(cls.parse)

    @staticmethod
    def parse():
        g.json_body = {}

        if not request.is_json:
            return None

        if not request.get_data(cache=True):
            return None

        # raises BadRequest on malformed JSON
        g.json_body = request.get_json()
        return None

    @staticmethod
    def get_body() -> dict:
        """Return the parsed body when it is a JSON object, else {}."""
        body = g.get("json_body")
        return body if isinstance(body, dict) else {}
