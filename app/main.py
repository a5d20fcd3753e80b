import uvicorn

from app.api.app import create_app
from app.config.settings import Settings
from app.container import build_container
from app.database.connection import apply_schema, close_pool, init_pool
from app.logging.logger import Log


def main() -> None:
    """Entry point: initialize pool -> sweep interrupted jobs -> build dependencies -> serve."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        if settings.db_apply_schema:
            apply_schema()
        container = build_container(settings)
        swept = container.job_repo.fail_interrupted_jobs()
        if swept:
            Log.warning(f"Marked {swept} interrupted PROCESSING jobs as failed")
        app = create_app(container)
        Log.info(f"Serving on {settings.api_host}:{settings.api_port}")
        uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)
        container.scheduler.join(timeout=settings.openai_timeout_seconds)
    finally:
        close_pool()


if __name__ == "__main__":
    main()
