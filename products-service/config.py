import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Chargement des variables d'environnement
load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    service_name: str
    host: str
    port: int
    problem_type_base_url: str
    log_level: str
    log_sink: str
    seed_products: bool
    debug: bool


def load_settings() -> Settings:
    """Read settings from the environment (and a .env file if present)."""
    port = int(os.getenv("PORT", 8001))
    return Settings(
        service_name=os.getenv("SERVICE_NAME", "products-service"),
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        problem_type_base_url=os.getenv(
            "PROBLEM_TYPE_BASE_URL", f"http://localhost:{port}"
        ).rstrip("/"),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_sink=os.getenv("LOG_SINK", "logs.json"),
        seed_products=_as_bool(os.getenv("SEED_PRODUCTS", "true")),
        debug=_as_bool(os.getenv("DEBUG", "false")),
    )


settings = load_settings()

PRODUCT_NOT_FOUND_TYPE = f"{settings.problem_type_base_url}/errors/product-not-found"
VALIDATION_ERROR_TYPE = f"{settings.problem_type_base_url}/errors/validation-error"
