from fastapi import APIRouter

from dashboard.api.v1 import commits, repos, webhooks

api_router = APIRouter(prefix="/api")

api_router.include_router(commits.router)
api_router.include_router(repos.router)

# GitHub posts to /webhook, outside the /api prefix
webhook_router = APIRouter()
webhook_router.include_router(webhooks.router)
