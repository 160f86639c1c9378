"""Built-in CLI sub-commands for netstack.

* :mod:`~netstack.commands.request` -- send one request through the client.
* :mod:`~netstack.commands.profile` -- create, list, show and remove profiles.
* :mod:`~netstack.commands.auth` -- inspect and refresh stored credentials.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered on the root app.
"""
