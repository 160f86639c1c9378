"""netstack -- authenticated HTTP requests with retry and single-flight token refresh.

Requests are described as :class:`~netstack.http.OutboundRequest` values or
:class:`~netstack.routes.Route` subclasses and executed by
:class:`~netstack.client.AsyncClient` against an
:class:`~netstack.environment.APIEnvironment`. Failures surface as the typed
errors in :mod:`netstack.exceptions`.

Modules:
    app: Typer application and CLI entry point.
    client: The request executor.
    auth: Single-flight credential refresher and credential store.
    environment: Base URL, transport override and refresh strategy.
    http: Request value, URL helpers, adapter, transport, classifier, decoder.
    connectivity: Reachability observer.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and profile management.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"
