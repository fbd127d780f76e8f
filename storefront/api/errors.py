# storefront/api/errors.py
from fastapi import HTTPException

from storefront.domain.errors import StorefrontError


def to_http_exception(error: StorefrontError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_detail())
