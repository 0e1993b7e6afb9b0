"""uvicorn entrypoint for the ResearchHub API.

    uvicorn main:app --reload

Logging is configured and the app built here, at process start, so importing
researchhub.app stays free of side effects and needs no environment.
"""

from researchhub.app import add_request_id_middleware, create_app
from researchhub.config import Environment, get_settings
from researchhub.logging import configure_logging

configure_logging(json_format=get_settings().researchhub_env != Environment.LOCAL)

app = create_app()
# Installed last so it wraps auth and error handling
add_request_id_middleware(app)

__all__ = ["app"]
