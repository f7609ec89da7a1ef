"""Delivery of password-reset links.

Email delivery lives outside this service. The notifier is the seam where a
real mailer plugs in; the default one only records that a link was issued.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class ResetNotifier(Protocol):
    async def send_reset_link(self, email: str, reset_url: str) -> None: ...


class LoggingResetNotifier:
    """Logs reset issuance without the link, which carries the secret token."""

    async def send_reset_link(self, email: str, reset_url: str) -> None:
        domain = email.rsplit("@", 1)[-1]
        logger.info(f"password_reset_link_issued: email_domain={domain}")
