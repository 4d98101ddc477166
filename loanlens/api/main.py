"""
LoanLens FastAPI main
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loanlens import __version__
from loanlens.api.routes import router
from loanlens.config import settings, configure_logging

configure_logging()

app = FastAPI(
    title="LoanLens",
    description="Education-loan lender recommendation engine",
    version=__version__,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(router, prefix="/api/v1")


@app.get("/")
async def root():
    """Health check"""
    return {
        "name": "LoanLens",
        "status": "running",
        "version": __version__,
        "algorithm_version": settings.ALGORITHM_VERSION,
    }


@app.get("/health")
async def health():
    """Detailed health check"""
    llm_available = False
    if settings.JUSTIFICATION_BACKEND == "llm":
        from loanlens.llm import get_llm_runner

        llm_available = get_llm_runner().is_available

    return {
        "status": "healthy",
        "justification_backend": settings.JUSTIFICATION_BACKEND,
        "llm_available": llm_available,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("loanlens.api.main:app", host="0.0.0.0", port=8000)
