# auth_server/constants/constants_mongodb.py
from bson import ObjectId
from bson.errors import InvalidId


class MongoDBCollection:
    USERS = "users"


class MongoDBFilters:
    @staticmethod
    def by_id(object_id):
        try:
            return {"_id": ObjectId(str(object_id))}
        except InvalidId:
            return None

    class User:
        @staticmethod
        def by_email(email: str):
            return {"email": (email or "").strip().lower()}


class MongoDBIndex:
    USERS_EMAIL_UNIQUE = "email_unique"
