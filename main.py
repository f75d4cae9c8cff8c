import logging

import uvicorn

from game_api.core.env import get_env


def main():
    env = get_env()
    logging.basicConfig(
        level=env.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger = logging.getLogger("game_api")
    logger.info(f"Game API server starting on port {env.port}")
    logger.info(f"API Documentation: http://localhost:{env.port}/api-docs")
    logger.info(f"WebSocket endpoint: ws://localhost:{env.port}/ws")
    logger.info(f"Environment: {env.app_env}")

    uvicorn.run("game_api.app:app", host=env.host, port=env.port, log_level=env.log_level.lower())


if __name__ == "__main__":
    main()
