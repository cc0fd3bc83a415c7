"""CAS endpoint paths, parameter names and protocol literals."""

# Interactive login
LOGIN_ENDPOINT = "/login"
LOGIN_TICKET_ACTION = "get_auth_params"
LOGIN_TICKET_RESPONSE = "login"
SERVICE_PARAM = "service"

# Service-to-service (batch) login
TRANSIENT_TICKET_ENDPOINT = "/api/v2/batch/ticket"
TRANSIENT_LOGIN_ENDPOINT = "/api/login/cas/transient"
TRANSIENT_TOKEN_TYPE = "CAS_TRANSIENT"
SERVICE_NAME_HEADER = "DS-Service-Name"
SERVICE_SECRET_HEADER = "DS-Service-Secret"
IDENTIFIER_PARAM = "identifier"
TGT_PARAM = "tgt"
AUTHENTICATED_MESSAGE = "authenticated"

# Session proof
CAS_TICKET_COOKIE = "CASTGC"

DEFAULT_TIMEOUT_SECONDS = 30
