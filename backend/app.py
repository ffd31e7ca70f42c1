from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend import config
from backend.routers import generate, templates

app = FastAPI(
    title="PropBuilder API",
    description="Backend API for the PropBuilder object template generator",
    version="0.1.0",
)

# ---------------------------------------------------------------------------
# CORS -- allow the editor front end
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(generate.router)
app.include_router(templates.router)


@app.get("/")
async def root():
    return {"status": "ok", "service": "PropBuilder API"}
