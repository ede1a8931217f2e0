import json
import logging
from typing import Any

from edgeshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from edgeshortener.container import ServiceContainer, build_container
from edgeshortener.dao.exceptions import DataStoreError
from edgeshortener.exceptions import ValidationError
from edgeshortener.models import UNSET, LinkModel, CreateLinkRequest, UpdateLinkRequest, BatchResult
from edgeshortener.utils import load_config, get_short_url
from edgeshortener.utils.helpers import guarantee_500_response
from edgeshortener.utils.runtime import get_user_id, get_domain
from edgeshortener.utils.validation import validate_batch
from edgeshortener.lambdas.manage_links.constants import (
    UNAUTHORIZED,
    INVALID_JSON_BODY,
    INVALID_REQUEST,
    METHOD_NOT_ALLOWED,
    DATA_STORE_UNAVAILABLE,
    BATCH_PROCESSED,
    LINKS_LISTED,
    DEFAULT_LIST_LIMIT,
    MAX_LIST_LIMIT,
)


logger = logging.getLogger(__name__)

_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Return the process-wide container, building it on first use"""
    global _container
    if _container is None:
        _container = build_container(load_config('manage_links'))
    return _container


def close_container() -> None:
    global _container
    if _container is not None:
        _container.close()
        _container = None


# -------------------------------
# Responses
# -------------------------------


def _error(status: int, base: str, message: str | None, error_code: str | None) -> LambdaResponse:
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': status,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(400, 'Bad Request', message, error_code)


def response_401(message: str | None = None) -> LambdaResponse:
    return _error(401, 'Unauthorized', message, UNAUTHORIZED)


def response_405(method: str | None) -> LambdaResponse:
    return _error(405, 'Method Not Allowed', f'unsupported method {method!r}', METHOD_NOT_ALLOWED)


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    return _error(500, 'Internal Server Error', message, error_code)


def response_200(data: dict[str, Any]) -> LambdaResponse:
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'code': 0, 'message': 'ok', 'data': data}),
    }


# -------------------------------
# Request parsing
# -------------------------------


def encode_attribute(value: Any) -> bytes | None:
    """Store caller metadata (any JSON value) as UTF-8 JSON bytes"""
    if value is None:
        return None
    return json.dumps(value, separators=(',', ':')).encode('utf-8')


def decode_attribute(blob: bytes | None) -> Any:
    if blob is None:
        return None
    try:
        return json.loads(blob)
    except (UnicodeDecodeError, json.JSONDecodeError):
        return None


def parse_create_record(record: Any, domain: str | None, user_id: str) -> CreateLinkRequest:
    """Build a create request; field errors surface later as per-item failures"""
    record = record if isinstance(record, dict) else {}
    return CreateLinkRequest(
        target=record.get('url'),
        domain=record.get('domain') or domain,
        shortcode=record.get('shortCode'),
        expires_at=record['expiresAt'] if 'expiresAt' in record else UNSET,
        owner_id=record.get('userId') or user_id,
        attribute=encode_attribute(record.get('attribute')),
    )


def parse_update_record(record: Any) -> UpdateLinkRequest:
    record = record if isinstance(record, dict) else {}
    fields = {}
    if 'url' in record:
        fields['target'] = record['url']
    if 'userId' in record:
        fields['owner_id'] = record['userId']
    if 'expiresAt' in record:
        fields['expires_at'] = record['expiresAt']
    if 'attribute' in record:
        fields['attribute'] = encode_attribute(record['attribute'])
    return UpdateLinkRequest(hash=record.get('hash'), **fields)


def parse_hash_list(body: dict[str, Any]) -> list[str]:
    hashes = body.get('hashList')
    validate_batch(hashes)
    if not all(isinstance(h, str) and h for h in hashes):
        raise ValidationError('Hash list must contain non-empty strings.')
    return list(hashes)


def parse_list_query(event: LambdaEvent) -> dict[str, Any]:
    params = event.get('queryStringParameters') or {}

    # Active links unless asked otherwise
    is_deleted = params.get('isDeleted', 'false').lower() in ('1', 'true')

    try:
        limit = int(params.get('limit', DEFAULT_LIST_LIMIT))
    except (TypeError, ValueError) as e:
        raise ValidationError('Limit must be an integer.') from e
    if not 1 <= limit <= MAX_LIST_LIMIT:
        raise ValidationError(f'Limit must be between 1 and {MAX_LIST_LIMIT}.')

    return {'is_deleted': is_deleted, 'owner_id': params.get('userId'), 'limit': limit}


def serialize_link(link: LinkModel) -> dict[str, Any]:
    return {
        'hash': link.hash,
        'shortCode': link.shortcode,
        'domain': link.domain,
        'shortUrl': get_short_url(link.domain, link.shortcode),
        'url': link.target,
        'userId': link.owner_id,
        'expiresAt': link.expires_at,
        'attribute': decode_attribute(link.attribute),
        'createdAt': link.created_at,
        'updatedAt': link.updated_at,
        'isDeleted': link.is_deleted,
    }


# -------------------------------
# Handler
# -------------------------------


def _records(body: dict[str, Any]) -> list[Any]:
    records = body.get('records')
    validate_batch(records)
    return records


def _create(event: LambdaEvent, body: dict[str, Any], user_id: str) -> BatchResult:
    domain = get_domain(event)
    requests = [parse_create_record(record, domain, user_id) for record in _records(body)]
    return get_container().mutation.create_links(requests)


def _update(event: LambdaEvent, body: dict[str, Any], user_id: str) -> BatchResult:
    requests = [parse_update_record(record) for record in _records(body)]
    return get_container().mutation.update_links(requests)


def _delete(event: LambdaEvent, body: dict[str, Any], user_id: str) -> BatchResult:
    return get_container().mutation.delete_links(parse_hash_list(body))


BATCH_HANDLERS = {
    'POST': _create,
    'PUT': _update,
    'DELETE': _delete,
}


def _method(event: LambdaEvent) -> str | None:
    method = event.get('httpMethod') or (event.get('requestContext') or {}).get('http', {}).get('method')
    return method.upper() if method else None


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to manage links

    This Lambda handler follows this procedure:
    - Step 1: Extract the verified principal ('sub' claim) from the authorizer context
    - Step 2: Parse the JSON body (or query string, for listings)
    - Step 3: Run the batch operation matching the HTTP method
    - Step 4: Respond with the {successes, failures} partition

    HTTP methods:
        POST:   create links         body: {"records": [{"url", "shortCode"?, "domain"?, "expiresAt"?, "userId"?, "attribute"?}]}
        PUT:    update links         body: {"records": [{"hash", "url"?, "userId"?, "expiresAt"?, "attribute"?}]}
        DELETE: soft-delete links    body: {"hashList": ["<hash>", ...]}
        GET:    list links           query: isDeleted, userId, limit

    HTTP responses:
        200: Batch processed (individual items may still have failed)
            body: {"code": 0, "message": "ok", "data": {"successes": [...], "failures": [...]}}
        400: Invalid JSON body or batch envelope
        401: Missing verified principal
        405: Unsupported HTTP method
        500: Internal server error
    """
    # 1- Extract user id from the authorizer
    user_id = get_user_id(event)
    if not user_id:
        logger.info('Missing principal. Responding with 401.', extra={'event': UNAUTHORIZED})
        return response_401(message="missing 'sub' in JWT claims")

    method = _method(event)
    try:
        # 2- Administrative listing
        if method == 'GET':
            query = parse_list_query(event)
            links = get_container().store.list_links(**query)
            logger.info('Listed links. Responding with 200.', extra={'event': LINKS_LISTED, 'count': len(links)})
            return response_200({'links': [serialize_link(link) for link in links], 'count': len(links)})

        if method not in BATCH_HANDLERS:
            return response_405(method)

        # 3- Parse JSON body
        try:
            body = json.loads(event.get('body') or '{}')
        except json.JSONDecodeError:
            logger.info('Invalid JSON body. Responding with 400.', extra={'event': INVALID_JSON_BODY})
            return response_400(message='invalid JSON body', error_code=INVALID_JSON_BODY)
        if not isinstance(body, dict):
            return response_400(message='JSON body must be an object', error_code=INVALID_REQUEST)

        # 4- Run the batch
        result = BATCH_HANDLERS[method](event, body, user_id)
    except ValidationError as e:
        logger.info('Invalid request. Responding with 400.', extra={'event': INVALID_REQUEST, 'reason': str(e)})
        return response_400(message=str(e), error_code=INVALID_REQUEST)
    except DataStoreError:
        logger.exception('Data store unavailable. Responding with 500.', extra={'event': DATA_STORE_UNAVAILABLE})
        return response_500(message='data store unavailable', error_code=DATA_STORE_UNAVAILABLE)

    logger.info(
        'Batch processed. Responding with 200.',
        extra={'event': BATCH_PROCESSED, 'method': method, 'succeeded': len(result.successes), 'failed': len(result.failures)},
    )
    return response_200(result.to_dict())
