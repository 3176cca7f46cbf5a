"""
GitHub push webhook: best-effort cache invalidation.
"""

import hashlib
import hmac
import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status

from dashboard.api.deps import get_commit_query_service
from dashboard.config import settings
from dashboard.services.commits import CommitQueryService

router = APIRouter(tags=["webhooks"])
logger = logging.getLogger(__name__)


def verify_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Check an X-Hub-Signature-256 header against the shared secret."""
    if not signature or not secret:
        return False
    expected = "sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(signature, expected)


@router.post("/webhook")
async def handle_github_webhook(
    request: Request,
    service: CommitQueryService = Depends(get_commit_query_service),
) -> dict[str, str | int]:
    """
    Handle GitHub webhook deliveries.

    Push events drop the cached payloads of the pushed repository's owner.
    Invalidation is best-effort; stale entries still expire by TTL.
    No session required (verified by signature).
    """
    payload = await request.body()
    signature = request.headers.get("X-Hub-Signature-256")
    if not verify_signature(payload, signature, settings.webhook_secret):
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Invalid signature")

    try:
        event = json.loads(payload)
    except ValueError:
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid JSON payload") from None
    if not isinstance(event, dict):
        raise HTTPException(status.HTTP_400_BAD_REQUEST, "Invalid JSON payload")

    event_type = request.headers.get("X-GitHub-Event", "")
    if event_type != "push" and "ref" not in event:
        logger.debug(f"Ignoring webhook event: {event_type or 'unknown'}")
        return {"status": "ignored"}

    repository = event.get("repository")
    owner = repository.get("owner") if isinstance(repository, dict) else None
    if not isinstance(owner, dict):
        logger.debug("Ignoring push webhook without a repository owner")
        return {"status": "ignored"}
    tenant_id = owner.get("login") or owner.get("name")
    if not tenant_id or not isinstance(tenant_id, str):
        return {"status": "ignored"}

    removed = await service.invalidate(tenant_id)
    logger.info(f"Push webhook for {tenant_id}: invalidated {removed} cache entries")
    return {"status": "invalidated", "removed": removed}
