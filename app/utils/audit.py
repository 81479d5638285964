"""Audit trail for privileged actions.

Records go to the ``audit`` logger, one line per action, before the
route body runs.  The record therefore captures attempts as well as
successes; the outcome is visible in the access log by request id.
"""

import logging

from fastapi import Request

from app.auth.dependencies import CurrentUser
from app.rate_limit import _get_client_ip

logger = logging.getLogger("audit")


def audit_logged(action: str):
    """Dependency factory that logs privileged actions.

    Usage::

        @router.patch("/{id}/verify", dependencies=[Depends(audit_logged("verify_payment"))])
    """

    async def _log(request: Request, current_user: CurrentUser) -> None:
        logger.info(
            "AUDIT action=%s actor=%s role=%s target=%s ip=%s request_id=%s",
            action,
            current_user.id,
            current_user.role,
            request.path_params.get("payment_id") or request.path_params.get("user_id", "-"),
            _get_client_ip(request),
            getattr(request.state, "request_id", "n/a"),
        )

    return _log
