"""HTTP client factory for talking to the Docker Engine API."""

import httpx

from siteinventory.settings import ConfigurationError, Settings

UNIX_SCHEME = "unix://"


def create_docker_client(settings: Settings) -> httpx.Client:
    """
    Build a Client configured for the local container runtime.

    ``unix://`` hosts are reached through the socket; ``tcp://`` hosts are
    treated as plain HTTP endpoints.
    """
    host = settings.docker_host
    if host.startswith(UNIX_SCHEME):
        socket_path = host[len(UNIX_SCHEME):]
        if not socket_path:
            raise ConfigurationError("DOCKER_HOST does not name a socket path.")
        return httpx.Client(
            transport=httpx.HTTPTransport(uds=socket_path),
            base_url="http://docker",
            timeout=settings.api_timeout,
        )
    if host.startswith("tcp://"):
        host = "http://" + host[len("tcp://"):]
    return httpx.Client(base_url=host, timeout=settings.api_timeout)
