import asyncio
import contextlib
import enum
import logging
import signal
import ssl
from typing import Callable, List, Optional

import uvicorn
from fastapi import FastAPI

from src.config import Settings
from src.db import Store
from src.errors import CertificateLoadError, StoreInitError

log = logging.getLogger(__name__)

MIN_TLS_VERSION = ssl.TLSVersion.TLSv1_2


class ServerState(enum.Enum):
    STARTING = "starting"
    STORE_READY = "store_ready"
    LISTENERS_UP = "listeners_up"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class Listener(uvicorn.Server):
    """uvicorn server that leaves signal handling to ContactsServer."""

    @contextlib.contextmanager
    def capture_signals(self):
        yield

    def install_signal_handlers(self):
        pass


def load_tls_context(cert_path, key_path):
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    context.minimum_version = MIN_TLS_VERSION
    try:
        context.load_cert_chain(certfile=cert_path, keyfile=key_path)
    except (OSError, ssl.SSLError) as e:
        raise CertificateLoadError(cert_path, key_path, e) from e
    return context


class TLSConfig(uvicorn.Config):
    # uvicorn builds its own context without a version floor; serve ours instead.
    def load(self):
        super().load()
        self.ssl = load_tls_context(self.ssl_certfile, self.ssl_keyfile)


def build_listener_configs(app: FastAPI, settings: Settings) -> List[uvicorn.Config]:
    # Plaintext always; TLS only if the certificate loads.
    configs = [
        uvicorn.Config(
            app,
            host=settings.host,
            port=settings.http_port,
            server_header=False,
            log_level=settings.log_level.lower(),
        )
    ]

    try:
        load_tls_context(settings.ssl_cert_path, settings.ssl_key_path)
    except CertificateLoadError as e:
        log.warning("tls_disabled reason=%s serving=http_only port=%d", e, settings.http_port)
        return configs

    configs.append(
        TLSConfig(
            app,
            host=settings.host,
            port=settings.https_port,
            ssl_certfile=settings.ssl_cert_path,
            ssl_keyfile=settings.ssl_key_path,
            server_header=False,
            log_level=settings.log_level.lower(),
        )
    )
    return configs


class ContactsServer:
    """
    STARTING -> STORE_READY -> LISTENERS_UP -> SERVING, then SHUTTING_DOWN ->
    STOPPED. A store that will not initialize stops it before any listener
    binds; a missing certificate only drops the TLS listener.
    """

    def __init__(
        self,
        settings: Settings,
        store: Store,
        app: FastAPI,
        listener_factory: Callable[[uvicorn.Config], uvicorn.Server] = Listener,
    ):
        self.settings = settings
        self.store = store
        self.app = app
        self.listener_factory = listener_factory
        self.state = ServerState.STARTING
        self.listeners: List[uvicorn.Server] = []
        self._shutdown = asyncio.Event()

    def _transition(self, state):
        log.info("server_state from=%s to=%s", self.state.value, state.value)
        self.state = state

    def request_shutdown(self):
        self._shutdown.set()

    def _install_signal_handlers(self):
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self.request_shutdown)
            except NotImplementedError:
                # Windows event loops have no add_signal_handler.
                signal.signal(sig, lambda *_: loop.call_soon_threadsafe(self.request_shutdown))

    async def run(self, install_signal_handlers: bool = True) -> None:
        try:
            await self.store.initialize()
        except StoreInitError:
            log.critical("startup_aborted reason=store_init_failed")
            await self.store.dispose()
            self._transition(ServerState.STOPPED)
            raise
        self._transition(ServerState.STORE_READY)

        if install_signal_handlers:
            self._install_signal_handlers()

        self.listeners = [
            self.listener_factory(config)
            for config in build_listener_configs(self.app, self.settings)
        ]
        tasks = [asyncio.create_task(listener.serve()) for listener in self.listeners]
        self._transition(ServerState.LISTENERS_UP)

        shutdown_wait = asyncio.create_task(self._shutdown.wait())
        try:
            await self._wait_started(tasks)
            if not self._shutdown.is_set() and all(listener.started for listener in self.listeners):
                self._transition(ServerState.SERVING)
                log.info(
                    "serving listeners=%s",
                    ",".join(str(listener.config.port) for listener in self.listeners),
                )
            # Stop on a signal, or as soon as any listener ends on its own.
            await asyncio.wait([shutdown_wait, *tasks], return_when=asyncio.FIRST_COMPLETED)
        finally:
            shutdown_wait.cancel()
            await self._stop(tasks)

    async def _wait_started(self, tasks):
        while not all(listener.started for listener in self.listeners):
            if self._shutdown.is_set() or any(t.done() for t in tasks):
                return
            await asyncio.sleep(0.01)

    async def _stop(self, tasks):
        self._transition(ServerState.SHUTTING_DOWN)
        for listener in self.listeners:
            listener.should_exit = True

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for listener, result in zip(self.listeners, results):
            if isinstance(result, BaseException):
                log.error("listener_failed port=%d err=%r", listener.config.port, result)

        await self.store.dispose()
        self._transition(ServerState.STOPPED)
        log.info("clean_shutdown")


def serve(settings: Settings, store: Optional[Store] = None) -> None:
    from src.main import create_app

    store = store or Store(settings.database_url)
    app = create_app(settings, store)
    asyncio.run(ContactsServer(settings, store, app).run())
