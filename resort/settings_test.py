# resort/settings_test.py
from .settings import *  # noqa: F401,F403

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"

EMAILJS = {
    "ENABLED": True,
    "API_URL": "https://api.emailjs.com/api/v1.0/email/send",
    "SERVICE_ID": "service_test",
    "PUBLIC_KEY": "public_test",
    "PRIVATE_KEY": "private_test",
    "TIMEOUT": 5,
}

MPESA = {
    "ENVIRONMENT": "sandbox",
    "CONSUMER_KEY": "key",
    "CONSUMER_SECRET": "secret",
    "SHORTCODE": "174379",
    "PASSKEY": "passkey",
    "CALLBACK_URL": "https://example.test/api/payments/mpesa/callback/",
    "TIMEOUT": 5,
}

NOTIFY_ADMIN_ON_BOOKING = False

REST_FRAMEWORK = {
    **REST_FRAMEWORK,  # noqa: F405
    "DEFAULT_THROTTLE_RATES": {"public_booking": "1000/minute", "public_feedback": "1000/minute"},
}

LOGGING = {"version": 1, "disable_existing_loggers": False}
