from src.correlation.api.routes.callbacks import router as callbacks_router

__all__ = ["callbacks_router"]
