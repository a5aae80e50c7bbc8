"""
FastAPI Production Application

Main entry point for the Laptop Price Catalog API.
"""

from pricewatch.config import get_settings
from pricewatch.serving.api.main import create_api_app

settings = get_settings()

app = create_api_app(settings)


@app.get("/api/v1/info")
async def api_info():
    """API information endpoint."""
    return {
        "name": "Laptop Price Catalog API",
        "version": settings.version,
        "environment": settings.app_env,
        "documentation": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
