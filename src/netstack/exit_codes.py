"""Numeric process exit codes for the ``netstack`` command line.

Each constant maps to one branch of the error taxonomy in
:mod:`netstack.exceptions`, so shell wrappers can tell "could not reach the
server" apart from "the server rejected the request" without parsing stderr.

Example::

    $ netstack request GET /objects
    $ echo $?
    6   # EXIT_CONNECTION_ERROR -- no response from the server
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred (also used for configuration problems)."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments."""

EXIT_AUTH_FAILURE = 3
"""The credential could not be refreshed or was rejected."""

EXIT_VALIDATION_FAILED = 4
"""The API rejected the request payload (HTTP 400 / 422)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an HTTP 5xx server error."""

EXIT_CONNECTION_ERROR = 6
"""No HTTP response was received (offline, timeout, DNS failure, connection refused)."""

EXIT_DECODING_ERROR = 7
"""The response body could not be decoded into the requested shape."""

EXIT_UNSUCCESSFUL_REQUEST = 8
"""The API answered with a non-2xx status outside the other categories."""

EXIT_INVALID_URL = 9
"""A request URL could not be parsed or resolved against the base URL."""
