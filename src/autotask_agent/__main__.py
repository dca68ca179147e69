"""Run the HTTP boundary with uvicorn: ``python -m autotask_agent``."""

import logging
import os

from autotask_agent.config import SyncConfig


def main() -> None:
    logging.basicConfig(
        level=os.environ.get("AUTOTASK_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        import uvicorn
    except ImportError:
        raise ImportError(
            "uvicorn is required to serve the API. "
            "Install with: pip install autotask-agent[api]"
        )

    from autotask_agent.api import create_app
    from autotask_agent.bootstrap import build_orchestrator

    config = SyncConfig.from_env()
    app = create_app(lambda: build_orchestrator(config))
    uvicorn.run(app, host=config.host, port=config.port)


if __name__ == "__main__":
    main()
