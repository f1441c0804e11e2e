import uvicorn
from dotenv import load_dotenv

from infrastructure.config import Settings

load_dotenv()


def run() -> None:
    settings = Settings.from_env()

    print(f"Starting server at http://{settings.host}:{settings.port} (Reload: {settings.reload})")

    uvicorn.run(
        "backend_fastapi.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    run()
