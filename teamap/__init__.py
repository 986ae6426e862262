"""
Inicialización del paquete `teamap`.

En Windows forzamos el Proactor event loop: cuando uvicorn levanta un proceso
hijo con --reload, ese proceso a veces arranca con el selector loop y revienta
con "Fatal write error on socket transport".

Al hacerlo aquí se aplica cada vez que alguien importa `teamap...`
(uvicorn, alembic, tests, etc.).
"""

import sys
import asyncio

if sys.platform.startswith("win"):
    try:
        asyncio.set_event_loop_policy(asyncio.WindowsProactorEventLoopPolicy())
    except AttributeError:
        pass
