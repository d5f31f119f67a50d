"""
FastAPI application entry point
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resume_parser.app.api.v1 import resumes
from resume_parser.app.core.config import settings
from resume_parser.app.core.logging_config import setup_logging

setup_logging()

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Batch PDF resume extraction API",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(resumes.router, prefix="/api", tags=["resumes"])


@app.get("/")
def read_root():
    """Root endpoint"""
    return {"message": settings.app_name, "version": settings.app_version}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port)
