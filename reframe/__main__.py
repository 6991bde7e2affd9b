import uvicorn

from reframe.config import settings


def main() -> None:
    uvicorn.run("reframe.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
