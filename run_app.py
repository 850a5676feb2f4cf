import uvicorn


def main() -> None:
    """Serve the geolocator HTTP facade with uvicorn."""
    uvicorn.run(
        "geolocator.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
