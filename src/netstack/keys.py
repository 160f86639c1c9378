"""Header names and values shared by the adapter, the client, and the environments."""

ACCEPT = "Accept"
APPLICATION_JSON = "application/json"
AUTHORIZATION = "Authorization"
BEARER = "Bearer"
CONTENT_TYPE = "Content-Type"
CONTENT_LENGTH = "Content-Length"
REQUEST_ID = "X-Request-Id"
