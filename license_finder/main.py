from fastapi import FastAPI

from license_finder import __version__
from license_finder.api.resolution import router as resolution_router

app = FastAPI(
    title="License Finder",
    version=__version__,
)

# API principali
app.include_router(resolution_router, prefix="/api", tags=["Resolution"])


@app.get("/")
def root():
    return {"message": "License Finder Backend is running"}
