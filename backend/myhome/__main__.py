"""Run the API with uvicorn: `python -m myhome` or the `myhome` script."""

import os

import uvicorn


def main():
    uvicorn.run(
        "myhome.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8080")),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


if __name__ == "__main__":
    main()
