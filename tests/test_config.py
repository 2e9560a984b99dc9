"""Settings are the single source for database and token configuration."""
from jose import jwt

import database
from config import settings
from utils import tokenJWT


class TestSettings:

    def test_database_url_comes_from_settings(self):
        assert settings.DATABASE_URL == "sqlite://"
        assert database.SQLALCHEMY_DATABASE_URL == settings.DATABASE_URL

    def test_tokens_signed_with_settings_keys(self, customer):
        access_token, refresh_token = tokenJWT.tokens_for(customer)

        access = jwt.decode(access_token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        refresh = jwt.decode(refresh_token, settings.REFRESH_SECRET_KEY, algorithms=[settings.ALGORITHM])

        assert access["sub"] == str(customer.id)
        assert access["role"] == "customer"
        assert refresh["sub"] == str(customer.id)
