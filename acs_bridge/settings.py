# acs_bridge/settings.py
import os
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # -----------------------------
    # SERVIDOR PRINCIPAL / BRIDGE
    # -----------------------------
    BRIDGE_HOST: str = os.getenv("BRIDGE_HOST", "0.0.0.0")
    BRIDGE_PORT: int = int(os.getenv("BRIDGE_PORT", "8087"))
    ACCESS_LOG: bool = os.getenv("ACCESS_LOG", "true").lower() == "true"

    # -----------------------------
    # CORS / UI
    # -----------------------------
    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "*")

    # -----------------------------
    # GENIEACS NBI
    # -----------------------------
    GENIE_NBI: str = os.getenv("GENIE_NBI", "http://127.0.0.1:7557")
    GENIE_NBI_USERNAME: Optional[str] = os.getenv("GENIE_NBI_USERNAME")
    GENIE_NBI_PASSWORD: Optional[str] = os.getenv("GENIE_NBI_PASSWORD")
    GENIE_TIMEOUT: float = float(os.getenv("GENIE_TIMEOUT", "30"))
    # timeout (ms) repassado ao GenieACS nas tasks setParameterValues
    GENIE_TASK_TIMEOUT_MS: int = int(os.getenv("GENIE_TASK_TIMEOUT_MS", "3000"))

    # -----------------------------
    # STATUS DOS DISPOSITIVOS
    # -----------------------------
    # online se o último inform ocorreu há menos de N segundos
    ONLINE_THRESHOLD_SECONDS: int = int(os.getenv("ONLINE_THRESHOLD_SECONDS", "300"))

    # -----------------------------
    # BANCO (metadados do operador)
    # -----------------------------
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./data/acs_bridge.db")

    # -----------------------------
    # FASTAPI / METADADOS
    # -----------------------------
    APP_TITLE: str = "ACS Bridge"
    APP_VERSION: str = "1.0.0"

    # -----------------------------
    # CONFIGURAÇÃO .ENV
    # -----------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )


# Instância única para importar em outros módulos
settings = Settings()
