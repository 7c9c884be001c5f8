from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.core.config import get_settings
from app.core.logging import setup_logging
from app.api.validation import router as validation_router
from app.api.calculations import router as calculations_router
from app.api.approvals import router as approvals_router
from app.api.notifications import router as notifications_router

settings = get_settings()
setup_logging(settings.LOG_LEVEL)

app = FastAPI(title="Hotel Pricing Approvals")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
@app.get("/")
def root():
    return {"status": "ok", "message": "Backend running. Visit /docs for API."}


app.include_router(validation_router, prefix="/api", tags=["validation"])
app.include_router(calculations_router, prefix="/api", tags=["calculations"])
app.include_router(approvals_router, prefix="/api", tags=["approvals"])
app.include_router(notifications_router, prefix="/api", tags=["notifications"])
