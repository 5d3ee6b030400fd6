"""GCP project discovery from the metadata server or the environment."""

from typing import Optional

import httpx
import structlog

from . import config
from .errors import ProjectIDNotFoundError

logger = structlog.get_logger(__name__)

METADATA_PATH = "/computeMetadata/v1/project/project-id"
METADATA_HEADERS = {"Metadata-Flavor": "Google"}


def metadata_project_id(client: httpx.Client, host: str = config.GCE_METADATA_HOST) -> str:
    response = client.get(f"http://{host}{METADATA_PATH}", headers=METADATA_HEADERS)
    response.raise_for_status()
    return response.text.strip()


def discover_project_id(client: Optional[httpx.Client] = None, fallback: Optional[str] = None) -> str:
    """Resolve the project that receives spans and metrics.

    The metadata server wins when reachable; otherwise ``fallback`` (default
    ``$GCP_PROJECT_ID``) is used. Raises ProjectIDNotFoundError when neither
    yields a value.
    """
    if fallback is None:
        fallback = config.GCP_PROJECT_ID

    owns_client = client is None
    if client is None:
        client = httpx.Client(timeout=2.0)
    try:
        project_id = metadata_project_id(client)
        if project_id:
            logger.info("Resolved project from metadata server", project_id=project_id)
            return project_id
    except httpx.HTTPError as e:
        logger.debug("Metadata server unavailable", error=str(e))
    finally:
        if owns_client:
            client.close()

    if not fallback:
        raise ProjectIDNotFoundError()
    logger.info("Resolved project from environment", project_id=fallback)
    return fallback
