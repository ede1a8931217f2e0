# Log events / error codes
MISSING_SHORTCODE = 'MISSING_SHORTCODE'
MISSING_DOMAIN = 'MISSING_DOMAIN'
SHORT_URL_NOT_FOUND = 'SHORT_URL_NOT_FOUND'
DATA_STORE_UNAVAILABLE = 'DATA_STORE_UNAVAILABLE'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
PREVIEW_SUCCESS = 'PREVIEW_SUCCESS'
