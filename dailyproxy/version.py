# dailyproxy/version.py

SERVICE_NAME = "dailyproxy"
SERVICE_VERSION = "0.1.0"


def version_payload() -> dict:
    """Used by the /version endpoint."""
    return {
        "service": f"{SERVICE_NAME}:{SERVICE_VERSION}",
        "service_version": SERVICE_VERSION,
    }
