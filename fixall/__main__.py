import uvicorn

from fixall.core.config import Settings
from fixall.main import create_app


def main():
    settings = Settings.from_env()
    app = create_app(settings)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
