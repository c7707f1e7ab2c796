from __future__ import annotations

from ..config import MapActionConfig
from ..errors import ApiTokenRequiredError
from ..logging import MapActionLogger

MISSING_TOKEN_HELP = (
    "\n\n===============================\n"
    "Error accessing your API Token.\n"
    "Please make sure the CODESEE_ARCH_DIAG_API_TOKEN is set correctly in your "
    "*repository* secrets (not environment secrets).\n"
    "If you need a new API Token, please go to app.codesee.io/maps and create a new map.\n"
    "This will generate a new token for you.\n"
    "===============================\n\n"
)


def check_api_token(config: MapActionConfig, logger: MapActionLogger) -> None:
    if not config.has_api_token:
        logger.warning(MISSING_TOKEN_HELP)
        raise ApiTokenRequiredError()
