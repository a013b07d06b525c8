from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from kambafy.core.config import settings
from kambafy.routers import partner_webhooks, webhook_logs, webhook_settings, webhooks

OPENAPI_TAGS = [
    {"name": "Webhooks", "description": "Dispatch events to seller webhooks and send test events."},
    {"name": "Webhook Settings", "description": "Register and manage seller webhook endpoints."},
    {"name": "Webhook Logs", "description": "Query the delivery log of outbound webhooks."},
    {"name": "Partner Webhooks", "description": "Signed payment notifications to partners."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Outbound webhook service. Fans domain events out to seller-registered "
        "endpoints and notifies integration partners about payments."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(webhooks.router, prefix="/v1/webhooks", tags=["Webhooks"])
app.include_router(
    webhook_settings.router,
    prefix="/v1/webhook_settings",
    tags=["Webhook Settings"],
)
app.include_router(webhook_logs.router, prefix="/v1/webhook_logs", tags=["Webhook Logs"])
app.include_router(
    partner_webhooks.router,
    prefix="/v1/partner_webhooks",
    tags=["Partner Webhooks"],
)


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }
