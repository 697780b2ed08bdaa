"""
Entry Point for Cloud Server Deployment

Starts the FastAPI form relay with uvicorn, binding to the PORT the
hosting platform provides. The service runs in a single process: the
in-memory rate-limit tables live there, so running several workers
needs the Upstash store configured.
"""

import logging
import sys

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)


def run_api_server():
    """Run the FastAPI server in this process."""
    import uvicorn
    from formrelay.core.config import settings

    # Cloud servers set PORT env var - use it if available
    port = settings.server_port
    logger.info(f"Starting FastAPI server on 0.0.0.0:{port}...")

    uvicorn.run(
        "formrelay.main:app",
        host="0.0.0.0",
        port=port,
        log_level=settings.log_level.lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips=settings.forwarded_allow_ips
    )


def main():
    """Main entry point."""
    print("=" * 70)
    print("FORM RELAY API - STARTUP")
    print("=" * 70)

    try:
        run_api_server()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")


if __name__ == "__main__":
    main()
