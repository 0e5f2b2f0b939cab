import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from storefront.db import SessionLocal
from storefront.observability import RequestLoggingMiddleware
from storefront.routers import (
    auth,
    catalog,
    catalog_admin,
    checkout,
    config_admin,
    customers,
    employees_admin,
    orders,
    reports,
)
from storefront.services.store_settings import initialize_store_settings

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

app = FastAPI(title="Storefront API")

ALLOWED_ORIGINS = [
    # Dev - Vite
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]


def _parse_env_list(name: str) -> list[str]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


cors_origins = _parse_env_list("CORS_ALLOWED_ORIGINS") or ALLOWED_ORIGINS
trusted_hosts = _parse_env_list("TRUSTED_HOSTS")

if trusted_hosts:
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=trusted_hosts)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["*"], allow_headers=["*"], allow_credentials=True,
)
app.add_middleware(RequestLoggingMiddleware)


@app.on_event("startup")
def init_store_settings():
    db = SessionLocal()
    try:
        initialize_store_settings(db)
    finally:
        db.close()


@app.get("/health")
def health(): return {"ok": True}


app.include_router(catalog.router)
app.include_router(catalog_admin.router)
app.include_router(checkout.router)
app.include_router(orders.router)
app.include_router(auth.router)
app.include_router(customers.router)
app.include_router(employees_admin.router)
app.include_router(config_admin.router)
app.include_router(config_admin.public_router)
app.include_router(reports.router)
