# auth_server/constants/constants_server.py

SERVER_HOST = "0.0.0.0"
SERVER_PORT = 3030

API_USER_PREFIX = "/api/user"

# lifecycle lines, one each per process start
DB_CONNECTED_MESSAGE = "DB connected SUCCESSFULLY !"
RUNNING_MESSAGE = f"Running on {SERVER_PORT}..."


class LoginStatus:
    SUCCESS = "success"
    FAILURE_CREDENTIALS = "failure_credentials"
    FAILURE_MISSING_DATA = "failure_missing_data"

    @classmethod
    def all(cls):
        return [cls.SUCCESS, cls.FAILURE_CREDENTIALS, cls.FAILURE_MISSING_DATA]
