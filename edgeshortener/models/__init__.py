from edgeshortener.models.link_model import LinkModel
from edgeshortener.models.requests import UNSET, CreateLinkRequest, UpdateLinkRequest
from edgeshortener.models.results import (
    OperationResult,
    BatchResult,
    SweepResult,
    RedirectTarget,
    PreviewDocument,
    NotFound,
)


__all__ = [
    'LinkModel',
    'UNSET',
    'CreateLinkRequest',
    'UpdateLinkRequest',
    'OperationResult',
    'BatchResult',
    'SweepResult',
    'RedirectTarget',
    'PreviewDocument',
    'NotFound',
]
