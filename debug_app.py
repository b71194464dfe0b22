# debug_app.py
import os
import uvicorn

# ensure "src" is importable
os.environ.setdefault("PYTHONPATH", os.getcwd())

if __name__ == "__main__":
    uvicorn.run(
        "src.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8000")),
        reload=False,   # single process: pending waiters live in this process's memory
        log_level="debug"
    )
