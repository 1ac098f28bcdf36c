"""restbind -- declarative builder for async HTTP API clients.

Describe an API as resources and routes; :func:`create_client` binds an
async callable per route. Each call decodes its route, merges global,
resource and route configuration, runs the before-request hooks, sends the
request through an injectable transport (``httpx`` by default), decodes the
response and runs the after-request hooks.

Typical usage::

    from restbind import ClientOptions, Resource, RouteSpec, create_client

    api = create_client(
        "https://api.example.com",
        {"users": Resource(prefix="/users", routes={"list": "/"})},
        ClientOptions(timeout=10),
    )
    async with api:
        result = await api.users.list()

Modules:
    client: Client factory and the bound client objects.
    routes: Route descriptors and the route decoder.
    layers: Global/resource/request configuration merging.
    request: Request and Result values.
    hooks: Hook base class and the hook runner.
    invoker: URL building, body encoding, cancellation and decoding.
    transport: Transport protocol and the httpx-backed default.
    body: Passthrough body kinds.
    models: Pydantic configuration models.
    config: Options from files and environment variables.
    exceptions: Exception hierarchy.
"""

from restbind.body import FormData
from restbind.client import Client, ResourceClient, create_client, create_client_from_config
from restbind.exceptions import (
    CancellationError,
    ConfigError,
    DecodeError,
    HookError,
    InvalidMethodError,
    RestbindError,
    TransportError,
)
from restbind.hooks import FunctionHook, Hook, hook
from restbind.models import ClientOptions, Resource
from restbind.request import Request, Result
from restbind.routes import Route, RouteSpec, route
from restbind.transport import HttpxTransport

__version__ = "0.1.0"

__all__ = [
    "CancellationError",
    "Client",
    "ClientOptions",
    "ConfigError",
    "DecodeError",
    "FormData",
    "FunctionHook",
    "Hook",
    "HookError",
    "HttpxTransport",
    "InvalidMethodError",
    "Request",
    "Resource",
    "ResourceClient",
    "RestbindError",
    "Result",
    "Route",
    "RouteSpec",
    "TransportError",
    "create_client",
    "create_client_from_config",
    "hook",
    "route",
]
