import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi import _rate_limit_exceeded_handler
import sentry_sdk

from careerloop.api.v1.health import router as health_router
from careerloop.api.v1.ats import router as ats_router
from careerloop.api.v1.loop import router as loop_router
from careerloop.api.v1.resume import router as resume_router
from careerloop.api.v1.jobs import router as jobs_router
from careerloop.core.rate_limit import limiter
from careerloop.core.config import settings
from careerloop.core.lifespan import lifespan

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn)

app = FastAPI(title="CareerLoop API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_origin_regex=(settings.cors_allow_origin_regex or "").strip() or None,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

app.include_router(health_router, prefix="/v1", tags=["Health"])
app.include_router(ats_router, prefix="/v1", tags=["ATS"])
app.include_router(loop_router, prefix="/v1", tags=["Loop"])
app.include_router(resume_router, prefix="/v1", tags=["Resume"])
app.include_router(jobs_router, prefix="/v1", tags=["Jobs"])
