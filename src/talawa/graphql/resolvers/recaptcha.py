"""reCAPTCHA v2 token verification."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import strawberry

from ...config import settings
from ...errors import ErrorCode, Issue, TalawaGraphQLError, report_unexpected_errors, unexpected
from ...logging import get_logger
from ..validation import RecaptchaArguments, parse_arguments, to_raw_arguments

if TYPE_CHECKING:
    from ..mutations.root import MutationRecaptchaInput

logger = get_logger(__name__)


async def verify_recaptcha_token(
    token: str,
    secret_key: str,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> bool:
    """
    Ask the verification service whether a token is valid.

    Raises:
        httpx.HTTPError: If the service cannot be reached or answers with an error status
    """
    async with httpx.AsyncClient(
        timeout=settings.recaptcha_timeout_seconds, transport=transport
    ) as client:
        response = await client.post(
            settings.recaptcha_verify_url,
            data={"secret": secret_key, "response": token},
        )
        response.raise_for_status()
        payload = response.json()

    if payload.get("success") is not True:
        logger.info("reCAPTCHA token rejected", error_codes=payload.get("error-codes"))
        return False
    return True


@report_unexpected_errors
async def resolve_recaptcha(info: strawberry.Info, data: MutationRecaptchaInput) -> bool:
    """Verify a reCAPTCHA token submitted by a client."""
    arguments = parse_arguments(RecaptchaArguments, to_raw_arguments(data), root="data")

    secret_key = settings.recaptcha_secret_key
    if not secret_key:
        raise TalawaGraphQLError(ErrorCode.FORBIDDEN_ACTION)

    try:
        is_valid = await verify_recaptcha_token(arguments.recaptcha_token, secret_key)

        if not is_valid:
            raise TalawaGraphQLError(
                ErrorCode.INVALID_ARGUMENTS,
                issues=[
                    Issue(
                        argument_path=("data", "recaptchaToken"),
                        message="Invalid reCAPTCHA token.",
                    )
                ],
            )

        return True
    except TalawaGraphQLError:
        raise
    except Exception as e:
        logger.error("Unexpected error during reCAPTCHA verification", error=str(e))
        raise unexpected() from e
