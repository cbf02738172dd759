import uvicorn

from salon_api.core.config import settings


def main() -> None:
    uvicorn.run(
        "salon_api.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "local",
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
