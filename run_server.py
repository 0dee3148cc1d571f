import os

import uvicorn

from rainwatch.config import settings
from rainwatch.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="rainwatch")

    port = int(os.getenv("PORT", 5000))
    logger.info(f"Servidor corriendo en http://localhost:{port}")
    uvicorn.run(
        "rainwatch.main:app",
        host="0.0.0.0",
        port=port,
        reload=False,
        log_config=None,
    )
