"""Django settings for the tripcast project."""

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = os.environ.get("DJANGO_DEBUG", "1") == "1"
ALLOWED_HOSTS = os.environ.get("DJANGO_ALLOWED_HOSTS", "localhost,127.0.0.1").split(",")

INSTALLED_APPS = [
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.staticfiles",
    "rest_framework",
    "routeweather",
    "trips",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
]

ROOT_URLCONF = "tripcast.urls"
WSGI_APPLICATION = "tripcast.wsgi.application"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("DATABASE_PATH", BASE_DIR / "db.sqlite3"),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "en-us"
TIME_ZONE = os.environ.get("TIME_ZONE", "UTC")
USE_I18N = True
USE_TZ = True

STATIC_URL = "static/"
MEDIA_URL = "media/"
MEDIA_ROOT = BASE_DIR / "media"

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
}

NOMINATIM_USER_AGENT = os.environ.get("NOMINATIM_USER_AGENT", "tripcast-route-weather")

ROUTE_WEATHER = {
    "OSRM_BASE_URL": os.environ.get(
        "OSRM_BASE_URL", "https://router.project-osrm.org/route/v1"
    ),
    "OSRM_TIMEOUT": 60,
    "OPENWEATHER_API_KEY": os.environ.get("OPENWEATHER_API_KEY", ""),
    "OPENWEATHER_BASE_URL": "https://api.openweathermap.org/data/2.5",
    "WEATHER_TIMEOUT": 10,
    "WEATHER_MAX_RETRIES": 2,
    "WEATHER_RETRY_DELAY": 1,
    "WEATHER_MAX_WORKERS": 8,
    "CURRENT_WEATHER_WINDOW_MINUTES": 15,
    "DEFAULT_INTERVAL_MINUTES": 30,
    "DEFAULT_SPEED_KMH": 80,
    "SPEED_BY_MODE": {
        "driving-car": 80,
        "cycling-regular": 15,
        "foot-walking": 5,
        "driving": 80,
        "cycling": 15,
        "walking": 5,
    },
    "MAX_DEPARTURE_OFFSET_MINUTES": 4320,
    "HISTORY_LIMIT": 20,
}

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {
            "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "simple",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": "WARNING",
    },
    "loggers": {
        "routeweather": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
        "trips": {"handlers": ["console"], "level": LOG_LEVEL, "propagate": False},
    },
}
