import json
import logging

from edgeshortener.types import LambdaEvent, LambdaContext, LambdaResponse
from edgeshortener.container import ServiceContainer, build_container
from edgeshortener.dao.exceptions import DataStoreError
from edgeshortener.models import RedirectTarget, PreviewDocument
from edgeshortener.utils import load_config, get_short_url
from edgeshortener.utils.helpers import guarantee_500_response
from edgeshortener.utils.runtime import get_header, get_domain
from edgeshortener.lambdas.redirect_url.constants import (
    MISSING_SHORTCODE,
    MISSING_DOMAIN,
    SHORT_URL_NOT_FOUND,
    DATA_STORE_UNAVAILABLE,
    REDIRECT_SUCCESS,
    PREVIEW_SUCCESS,
)


logger = logging.getLogger(__name__)

_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Return the process-wide container, building it on first use"""
    global _container
    if _container is None:
        _container = build_container(load_config('redirect_url'))
    return _container


def close_container() -> None:
    global _container
    if _container is not None:
        _container.close()
        _container = None


def response_500(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Internal Server Error'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 500,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_400(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Bad Request'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 400,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_404(message: str | None = None, error_code: str | None = None) -> LambdaResponse:
    base = 'Not Found'
    body = {'message': base if not message else f'{base} ({message})'}
    if error_code:
        body['errorCode'] = error_code
    return {
        'statusCode': 404,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps(body),
    }


def response_302(*, location: str) -> LambdaResponse:
    return {
        'statusCode': 302,
        'headers': {'Location': location},
        'body': json.dumps({}),  # no body needed for redirects
    }


def response_200_html(*, html: str) -> LambdaResponse:
    return {
        'statusCode': 200,
        'headers': {'Content-Type': 'text/html; charset=utf-8'},
        'body': html,
    }


@guarantee_500_response
def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaResponse:
    """Handle incoming API Gateway requests to redirect URLs

    This Lambda handler follows this procedure to redirect URLs:
    - Step 1: Extract shortcode, domain and user agent from the request
    - Step 2: Resolve the link (edge cache first, then the data store)
    - Step 3: Redirect the client, or serve a preview page to crawlers

    HTTP responses:
        302: Successful redirect
            headers:
                Location: target URL destination
        200: Preview page (link-unfurling crawlers only)
            body: HTML document with Open Graph tags
        400: Bad client request
            message: missing shortcode in path parameters, or missing host
        404: Not found
            message: link doesn't exist, expired or was deleted
        500: Internal server error
            message: data store unavailable, or another internal error

    Args:
        event (LambdaEvent):
            API Gateway event payload containing the shortcode path parameter.
        context (LambdaContext):
            AWS Lambda runtime context object (not used directly).

    Returns:
        LambdaResponse:
            API Gateway-compatible response including statusCode, headers, and body.

    Example:
        >>> event = {'pathParameters': {'shortcode': 'aZ3kP9qx'}, 'requestContext': {'domainName': 's.test'}}
        >>> response = lambda_handler(event, None)
        >>> response['statusCode']
        302
        >>> response['headers']['Location']
        'https://example.com/my-page'
    """
    # 1- Extract shortcode, domain and user agent from request
    shortcode = (event.get('pathParameters') or {}).get('shortcode')
    if not shortcode:
        logger.info(
            'Missing "shortcode" in path. Responding with 400.',
            extra={'event': MISSING_SHORTCODE},
        )
        return response_400(message="missing 'shortcode' in path", error_code=MISSING_SHORTCODE)

    domain = get_domain(event)
    if not domain:
        logger.info('Missing request host. Responding with 400.', extra={'event': MISSING_DOMAIN})
        return response_400(message='missing request host', error_code=MISSING_DOMAIN)

    user_agent = get_header(event, 'User-Agent')
    logger.debug('Client requested short URL %s.', get_short_url(domain, shortcode))

    # 2- Resolve the link
    try:
        outcome = get_container().resolution.resolve(domain, shortcode, user_agent)
    except DataStoreError:
        logger.exception(
            'Data store unavailable. Responding with 500.',
            extra={'shortcode': shortcode, 'domain': domain, 'event': DATA_STORE_UNAVAILABLE},
        )
        return response_500(message='data store unavailable', error_code=DATA_STORE_UNAVAILABLE)

    # 3- Redirect client to target URL (or serve the preview page)
    if isinstance(outcome, RedirectTarget):
        logger.info(
            'Redirecting client to target URL. Responding with 302.',
            extra={'shortcode': shortcode, 'hash': outcome.hash, 'event': REDIRECT_SUCCESS},
        )
        return response_302(location=outcome.location)

    if isinstance(outcome, PreviewDocument):
        logger.info(
            'Serving preview page to crawler. Responding with 200.',
            extra={'shortcode': shortcode, 'hash': outcome.hash, 'userAgent': user_agent, 'event': PREVIEW_SUCCESS},
        )
        return response_200_html(html=outcome.html)

    logger.info(
        'Short URL not found. Responding with 404.',
        extra={'shortcode': shortcode, 'hash': outcome.hash, 'event': SHORT_URL_NOT_FOUND},
    )
    return response_404(message=f"short url {get_short_url(domain, shortcode)} doesn't exist", error_code=SHORT_URL_NOT_FOUND)
