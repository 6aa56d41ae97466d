"""FastAPI backend for camerainit."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from camerainit import __version__
from backend.routers import camera_init, projects

app = FastAPI(
    title="camerainit Backend",
    description="Initial camera intrinsics for image datasets",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],  # Frontend dev server
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(projects.router)
app.include_router(camera_init.router)


@app.get("/healthz")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
async def get_version() -> dict[str, str]:
    """Get version information."""
    return {"version": __version__}


if __name__ == "__main__":
    import argparse

    import uvicorn

    parser = argparse.ArgumentParser(description="Run camerainit backend server")
    parser.add_argument("--port", type=int, default=8000, help="Port to run server on")
    args = parser.parse_args()

    uvicorn.run("backend.main:app", host="127.0.0.1", port=args.port, reload=True)
