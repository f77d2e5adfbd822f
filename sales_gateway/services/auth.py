"""Login against the remote users list"""

import logging
from typing import Optional

from sales_gateway.domain.models import User
from sales_gateway.infrastructure.clients.webhook import WebhookClient

logger = logging.getLogger(__name__)


async def authenticate(client: WebhookClient, username: str, password: str) -> Optional[User]:
    """Username matches case-insensitively, the password exactly"""
    wanted = username.strip().lower()
    for user in await client.fetch_users():
        if user.username.lower() == wanted and user.password == password:
            logger.info("Login succeeded", extra={"username": user.username, "role": user.role})
            return user

    logger.warning("Login failed", extra={"username": username})
    return None
