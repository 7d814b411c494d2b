"""Application configuration."""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    """Probe server settings.

    The node identity (namespace and member service name) is injected into the
    Pod through environment variables by the operator.

    Priority: Environment variables > .env file > defaults defined here
    """

    # App Configuration
    APP_NAME: str = "scylla-status"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: str = "info"

    # Node identity
    NAMESPACE: str = "default"
    SERVICE_NAME: str = ""

    # Probe Configuration
    PROBE_HOST: str = "0.0.0.0"
    PROBE_PORT: int = 8080
    PROBE_TIMEOUT: float = 60.0  # seconds, shared by every outbound call of one probe
    AWAIT_PATHS: List[str] = []  # markers created by external provisioning steps

    # ScyllaDB REST API (only reachable from within the Pod)
    SCYLLA_API_HOST: str = "localhost"
    SCYLLA_API_PORT: int = 10000

    # Kubernetes Configuration
    KUBECONFIG_PATH: Optional[str] = None  # in-cluster config is used when unset
    KUBE_REQUEST_TIMEOUT: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
