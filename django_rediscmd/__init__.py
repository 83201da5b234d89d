VERSION = (1, 0, 0)
__version__ = ".".join(map(str, VERSION))


def get_client(alias="default"):
    """Helper used for obtaining a configured command client."""
    from django_rediscmd.handler import clients

    return clients[alias]
