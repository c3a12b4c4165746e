from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.core.logging import setup_logging
from app.core.middleware import StructlogMiddleware
from app.modules.alerts import router as alerts_router
from app.modules.billing import router as billing_router
from app.modules.safety import router as safety_router
from app.modules.vitals import router as vitals_router

setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    ## Clinical Signal Engine API

    This API provides:
    * **Vitals**: Severity classification of readings and trend comparison
    * **Alerts**: Rule evaluation, status transitions and triage ordering
    * **Billing**: Medication adherence and billing code eligibility
    * **Safety**: Safety scanning of AI-generated replies

    Every endpoint is stateless: callers send the values to evaluate and
    persist whatever comes back.
    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
)

# Set all CORS enabled origins
if settings.BACKEND_CORS_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin) for origin in settings.BACKEND_CORS_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.add_middleware(StructlogMiddleware)
register_exception_handlers(app)

app.include_router(
    vitals_router.router, prefix=f"{settings.API_V1_STR}/vitals", tags=["vitals"]
)
app.include_router(
    alerts_router.router, prefix=f"{settings.API_V1_STR}/alerts", tags=["alerts"]
)
app.include_router(
    billing_router.router, prefix=f"{settings.API_V1_STR}/billing", tags=["billing"]
)
app.include_router(
    safety_router.router, prefix=f"{settings.API_V1_STR}/safety", tags=["safety"]
)


@app.get("/health")
def health_check() -> dict[str, str]:
    return {"status": "ok"}
