# Log events / error codes
UNAUTHORIZED = 'UNAUTHORIZED'
INVALID_JSON_BODY = 'INVALID_JSON_BODY'
INVALID_REQUEST = 'INVALID_REQUEST'
METHOD_NOT_ALLOWED = 'METHOD_NOT_ALLOWED'
DATA_STORE_UNAVAILABLE = 'DATA_STORE_UNAVAILABLE'
BATCH_PROCESSED = 'BATCH_PROCESSED'
LINKS_LISTED = 'LINKS_LISTED'

# Administrative listing bounds
DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 1000
