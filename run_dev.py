# run_dev.py
import os
import sys
import asyncio
import importlib


if sys.platform.startswith("win"):
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())
    except AttributeError:
        pass


if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv(".env")


APP_MODULE = os.getenv("APP_MODULE", "teamap.main:app")


def check_app(spec: str) -> str:
    """Importa `spec` antes de arrancar uvicorn, así el error sale claro."""
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    mod_name, _, obj_name = spec.partition(":")
    if not obj_name:
        raise RuntimeError(f"APP_MODULE inválido: {spec!r} (formato 'paquete.modulo:app')")
    getattr(importlib.import_module(mod_name), obj_name)
    return spec


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def main():
    import uvicorn

    spec = check_app(APP_MODULE)
    port = int(os.getenv("PORT", "8000"))
    reload_flag = _flag("RELOAD", not sys.platform.startswith("win"))

    print(f"🍵 Tea Map API: http://127.0.0.1:{port}  (reload={'ON' if reload_flag else 'OFF'})")

    uvicorn.run(
        spec,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        loop="asyncio",
        reload=reload_flag,
        reload_dirs=["teamap"],
        timeout_keep_alive=30,
        log_level=os.getenv("LOG_LEVEL", "info"),
        lifespan="on",
    )


if __name__ == "__main__":
    main()
