"""Settings-driven registry of command clients.

Mirrors how Django builds cache backends from ``CACHES``::

    REDISCMD = {
        "default": {
            "CONNECTOR": "django_rediscmd.connector.RedisConnector",
            "LOCATION": "redis://localhost:6379/0",
            "OPTIONS": {
                "serializer": "django_rediscmd.serializers.json.JSONSerializer",
                "compressor": "django_rediscmd.compressors.zlib.ZlibCompressor",
                "socket_timeout": 5,
            },
        },
    }

``serializer``, ``compressor``, ``serializer_options`` and
``compressor_options`` configure the client; every other option is passed
to the connector (and from there to the connection pool).
"""

from __future__ import annotations

import logging
from typing import Any

from django.core.exceptions import ImproperlyConfigured
from django.utils.connection import BaseConnectionHandler
from django.utils.module_loading import import_string

from django_rediscmd.client import CommandClient

logger = logging.getLogger(__name__)

DEFAULT_CONNECTOR = "django_rediscmd.connector.RedisConnector"

# Options consumed by the client rather than the connector
_CLIENT_ONLY_OPTIONS = frozenset(
    {
        "serializer",
        "compressor",
        "serializer_options",
        "compressor_options",
    }
)


class InvalidCommandClientError(ImproperlyConfigured):
    pass


class CommandClientHandler(BaseConnectionHandler):
    settings_name = "REDISCMD"
    exception_class = InvalidCommandClientError

    def create_connection(self, alias: str) -> CommandClient:
        params = self.settings[alias].copy()
        connector_path = params.pop("CONNECTOR", DEFAULT_CONNECTOR)
        location = params.pop("LOCATION", "")
        options: dict[str, Any] = dict(params.pop("OPTIONS", {}))
        if not location:
            msg = f"REDISCMD['{alias}'] needs a LOCATION"
            raise InvalidCommandClientError(msg)

        try:
            connector_class = import_string(connector_path) if isinstance(connector_path, str) else connector_path
        except ImportError as e:
            msg = f"Could not find connector '{connector_path}': {e}"
            raise InvalidCommandClientError(msg) from e

        client_options = {k: options.pop(k) for k in _CLIENT_ONLY_OPTIONS if k in options}
        connector = connector_class(location, **options)
        logger.debug("Created command client %r for %s", alias, location)
        return CommandClient(connector, **client_options)

    def close_all(self) -> None:
        for client in self.all(initialized_only=True):
            client.close()


clients = CommandClientHandler()
