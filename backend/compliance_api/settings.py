"""
Django settings for compliance_api project.

Settings are read from environment variables; a .env file next to
manage.py is loaded first when present.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / '.env')

ENVIRONMENT = os.getenv('ENVIRONMENT', 'development')


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-change-this')

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = os.getenv('DEBUG', 'False') == 'True'

if ENVIRONMENT == 'production':
    ALLOWED_HOSTS = [host for host in os.getenv('ALLOWED_HOSTS', '').split(',') if host]
else:
    ALLOWED_HOSTS = ['localhost', '127.0.0.1', 'testserver']


# Application definition

INSTALLED_APPS = [
    'django.contrib.contenttypes',
    'django.contrib.auth',

    'rest_framework',

    'hos_compliance.apps.HosComplianceConfig',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'compliance_api.urls'

WSGI_APPLICATION = 'compliance_api.wsgi.application'


# Database
# The engine persists nothing; the database only backs Django's own apps.

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
    }
}


# Internationalization

LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


# REST Framework settings
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'UNAUTHENTICATED_USER': None,
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    'COERCE_DECIMAL_TO_STRING': False,
}


# HOS engine settings
HOS_ENGINE = {
    'GAP_POLICY': os.getenv('HOS_GAP_POLICY', 'reject'),
    'HOME_TERMINAL_TIMEZONE': os.getenv('HOS_HOME_TERMINAL_TIMEZONE', 'UTC'),
    'SPLIT_SLEEPER': {
        'enabled': os.getenv('HOS_SPLIT_SLEEPER_ENABLED', 'True') == 'True',
        'require_adjacent_periods': True,
        'long_period_first': False,
    },
    'LIMITS': {
        'apply_cycle_restart': os.getenv('HOS_APPLY_CYCLE_RESTART', 'False') == 'True',
    },
}


# Logging Configuration
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} {module} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
        },
        'hos_compliance': {
            'handlers': ['console'],
            'level': os.getenv('HOS_LOG_LEVEL', 'INFO'),
        },
    },
}
