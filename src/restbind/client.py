"""Client factory -- binds one async callable per configured route.

:func:`create_client` takes a base URL, a mapping of resources and optional
client-wide :class:`~restbind.models.ClientOptions`, and returns a
:class:`Client` whose resources are reachable as attributes (or items), each
exposing its routes as async callables::

    api = create_client(
        "https://api.example.com",
        {
            "users": Resource(
                prefix="/users",
                routes={
                    "get": lambda user_id: f"/{user_id}",
                    "create": lambda name: RouteSpec(route="POST /", body={"name": name}),
                },
            ),
        },
        options=ClientOptions(headers={"Authorization": "Bearer ..."}, timeout=10),
    )

    async with api:
        result = await api.users.get(42)
        print(result.status_code, result.data)

Every call builds its own :class:`~restbind.request.Request`; the client
holds only the immutable configuration captured at construction time, so
concurrent calls share no mutable state.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterator, Mapping, Optional, Union

from pydantic import ValidationError

from restbind.config import coerce_options, resolve_base_url, resolve_options
from restbind.exceptions import ConfigError
from restbind.hooks import HookRunner
from restbind.invoker import apply_default_content_type, invoke
from restbind.layers import Scope, chain_hooks, merge_headers, resolve_timeout
from restbind.models import ClientOptions, Resource
from restbind.request import Request, Result, json_decode, json_encode
from restbind.routes import DecodedRoute, Route, RouteDescriptor, RouteSpec, describe
from restbind.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

RouteCall = Callable[..., Awaitable[Result]]


def build_request(
    base_url: str,
    global_scope: Scope,
    resource_scope: Scope,
    descriptor: RouteDescriptor,
    decoded: DecodedRoute,
) -> Request:
    """Build the initial request for one call.

    Headers merge global -> resource -> descriptor; the timeout is taken
    from the descriptor, then the resource, then the global scope. Other
    descriptor fields replace the defaults when set.
    """
    if isinstance(descriptor, RouteSpec):
        return Request(
            method=decoded.method,
            path=decoded.path,
            base_url=base_url,
            headers=merge_headers(global_scope.headers, resource_scope.headers, descriptor.headers),
            query_parameters=dict(descriptor.query_parameters or {}),
            body=descriptor.body,
            encoder=descriptor.encoder or json_encode,
            decoder=descriptor.decoder or json_decode,
            timeout=resolve_timeout(descriptor.timeout, resource_scope.timeout, global_scope.timeout),
            abort_signal=descriptor.abort_signal,
            hooks=list(descriptor.hooks or []),
        )
    return Request(
        method=decoded.method,
        path=decoded.path,
        base_url=base_url,
        headers=merge_headers(global_scope.headers, resource_scope.headers),
        timeout=resolve_timeout(resource_scope.timeout, global_scope.timeout),
    )


class ResourceClient:
    """The bound routes of one resource.

    Routes are reachable as attributes (``users.get``) or items
    (``users["get"]``); item access also works for names that are not
    valid identifiers.
    """

    def __init__(self, name: str, routes: dict[str, RouteCall]) -> None:
        self._name = name
        self._routes = routes

    @property
    def name(self) -> str:
        return self._name

    @property
    def routes(self) -> list[str]:
        return list(self._routes)

    def __getattr__(self, item: str) -> RouteCall:
        try:
            return self.__dict__["_routes"][item]
        except KeyError:
            raise AttributeError(f"Resource '{self._name}' has no route '{item}'") from None

    def __getitem__(self, item: str) -> RouteCall:
        try:
            return self._routes[item]
        except KeyError:
            raise KeyError(f"Resource '{self._name}' has no route '{item}'") from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._routes)

    def __repr__(self) -> str:
        return f"<ResourceClient {self._name} routes={self.routes}>"


class Client:
    """An API client bound from a resource configuration.

    Must be closed (or used as an async context manager) when it created
    its own transport.

    Args:
        base_url: Scheme and host (plus optional base path) of the API.
        resources: Resource name -> :class:`~restbind.models.Resource` or
            an equivalent dict.
        options: Client-wide defaults.
        transport: Transport to send through. Defaults to a new
            :class:`~restbind.transport.HttpxTransport`, owned and closed
            by this client.

    Raises:
        ConfigError: If a resource fails validation.
    """

    def __init__(
        self,
        base_url: str,
        resources: Mapping[str, Union[Resource, dict[str, Any]]],
        options: Union[ClientOptions, dict[str, Any], None] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self._base_url = base_url
        self._options = coerce_options(options)
        self._global = self._options.scope()
        self._resources: dict[str, ResourceClient] = {}

        # Validate everything before opening a transport that would need closing.
        validated = {name: _coerce_resource(name, definition) for name, definition in resources.items()}

        self._owns_transport = transport is None
        self._transport: Transport = transport if transport is not None else HttpxTransport()

        for resource_name, resource in validated.items():
            scope = resource.scope()
            bound = {
                route_name: self._bind(resource_name, route_name, resource, scope, route_def)
                for route_name, route_def in resource.routes.items()
            }
            self._resources[resource_name] = ResourceClient(resource_name, bound)
        logger.debug(
            "Built client for %s with resources %s", base_url, ", ".join(self._resources)
        )

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self._transport.aclose()  # type: ignore[attr-defined]

    # ------------------------------------------------------------------ #
    # Resource access
    # ------------------------------------------------------------------ #

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def resources(self) -> list[str]:
        return list(self._resources)

    def __getattr__(self, item: str) -> ResourceClient:
        try:
            return self.__dict__["_resources"][item]
        except KeyError:
            raise AttributeError(f"Client has no resource '{item}'") from None

    def __getitem__(self, item: str) -> ResourceClient:
        try:
            return self._resources[item]
        except KeyError:
            raise KeyError(f"Client has no resource '{item}'") from None

    def __repr__(self) -> str:
        return f"<Client {self._base_url} resources={self.resources}>"

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _bind(
        self,
        resource_name: str,
        route_name: str,
        resource: Resource,
        scope: Scope,
        route_def: Route,
    ) -> RouteCall:
        async def call(*args: Any, **kwargs: Any) -> Result:
            return await self._call(f"{resource_name}.{route_name}", resource, scope, route_def, args, kwargs)

        call.__name__ = route_name
        call.__qualname__ = f"{resource_name}.{route_name}"
        return call

    async def _call(
        self,
        label: str,
        resource: Resource,
        scope: Scope,
        route_def: Route,
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
    ) -> Result:
        # 1. Route descriptor
        descriptor = route_def.build(*args, **kwargs)
        decoded = describe(descriptor)
        logger.debug("%s -> %s %s", label, decoded.method, decoded.path)

        # 2. Initial request from the merged layers
        request = build_request(self._base_url, self._global, scope, descriptor, decoded)

        # 3. Before-request hooks: global, resource, then route
        runner = HookRunner(chain_hooks(self._global.hooks, scope.hooks, request.hooks))
        request = await runner.run_before(request)

        # 4. JSON Content-Type default
        request = apply_default_content_type(request)

        # 5. Transport
        result = await invoke(request, self._transport, resource.prefix)

        # 6. After-request hooks, same order
        return await runner.run_after(request, result)


def _coerce_resource(name: str, definition: Union[Resource, dict[str, Any]]) -> Resource:
    if isinstance(definition, Resource):
        return definition
    try:
        return Resource.model_validate(definition)
    except ValidationError as exc:
        raise ConfigError(f"Invalid resource '{name}': {exc}") from exc


def create_client(
    base_url: str,
    resources: Mapping[str, Union[Resource, dict[str, Any]]],
    options: Union[ClientOptions, dict[str, Any], None] = None,
    *,
    transport: Optional[Transport] = None,
) -> Client:
    """Build a :class:`Client` for *resources*. See :class:`Client` for arguments."""
    return Client(base_url, resources, options, transport=transport)


def create_client_from_config(
    resources: Mapping[str, Union[Resource, dict[str, Any]]],
    base_url: Optional[str] = None,
    options: Union[ClientOptions, dict[str, Any], None] = None,
    *,
    config_path: Optional[str] = None,
    transport: Optional[Transport] = None,
) -> Client:
    """Build a client whose defaults are resolved from files and the environment.

    The base URL falls back to ``RESTBIND_BASE_URL``; options are resolved by
    :func:`~restbind.config.resolve_options`.

    Raises:
        ConfigError: If no base URL can be found or a config layer is invalid.
    """
    return Client(
        resolve_base_url(base_url),
        resources,
        resolve_options(options, config_path),
        transport=transport,
    )
