"""FastAPI application entry point."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from routes import import_mask, extract_rois, export_bundle

app = FastAPI(title="Mask to ROI API", version="0.1.0")

# CORS for local frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],  # Vite default
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routes
app.include_router(import_mask.router, prefix="/api", tags=["import"])
app.include_router(extract_rois.router, prefix="/api", tags=["rois"])
app.include_router(export_bundle.router, prefix="/api", tags=["export"])


@app.get("/")
async def root():
    return {"message": "Mask to ROI API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}
