"""Run the Postman MCP server over stdio.

Example::

    $ POSTMAN_API_KEY=PMAK-... python -m postman_mcp
"""

from __future__ import annotations

import asyncio
import sys

from .config import load_config
from .exceptions import PostmanMCPError
from .logging_config import get_logger, setup_logging
from .server import PostmanMCPServer

logger = get_logger(__name__)


async def _serve() -> None:
    config = load_config()
    setup_logging(
        log_level=config.server.log_level,
        json_format=config.server.log_json,
        log_file=config.server.log_file,
    )

    server = PostmanMCPServer(config)
    await server.initialize()
    logger.info("Postman MCP server running on stdio")
    await server.run_stdio()


def main() -> None:
    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        pass
    except PostmanMCPError as e:
        logger.error(f"Failed to start server: {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()
