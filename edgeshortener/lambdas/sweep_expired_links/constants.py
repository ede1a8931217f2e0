# Diagnostic statuses / log events
SUCCESS = 'success'
PARTIAL_FAILURE = 'partial_failure'
ERROR = 'error'
