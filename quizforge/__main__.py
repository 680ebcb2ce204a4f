import uvicorn

from .settings import settings


def main():
    uvicorn.run("quizforge.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
