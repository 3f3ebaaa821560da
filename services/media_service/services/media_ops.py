"""Upload URL issuing and public URL resolution."""

from libs.auth.models import CallerIdentity
from libs.auth.policy import Requirement, authorize
from libs.common.logging import get_logger
from services.media_service.storage import StorageService

logger = get_logger(__name__)


def create_upload_url(
    caller: CallerIdentity, *, filename: str, storage: StorageService
) -> dict:
    authorize(caller, Requirement.ANY_AUTHENTICATED)
    path = storage.object_path(caller.user_id, filename)
    upload = storage.create_upload_url(path)
    upload["public_url"] = storage.public_url(path)
    logger.info("Issued upload URL for %s", path)
    return upload


def resolve_url(*, path: str, storage: StorageService) -> str:
    return storage.public_url(path)
