"""Sheet Calc - cell storage and formula calculation service."""

from sheet_calc.api import app, create_app

__all__ = ["app", "create_app"]
__version__ = "0.1.0"


def main() -> None:
    """Run the FastAPI server using uvicorn."""
    import uvicorn

    from sheet_calc.config import settings

    uvicorn.run(
        "sheet_calc.api:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=settings.debug,
    )
