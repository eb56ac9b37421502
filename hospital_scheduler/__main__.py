"""Run the API server: python -m hospital_scheduler"""
import uvicorn

from hospital_scheduler import config


def main():
    uvicorn.run(
        "hospital_scheduler.api_server:app",
        host=config.HOST,
        port=config.PORT,
        log_level=config.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
