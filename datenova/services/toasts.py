"""
Toast notification dispatcher.

A publish/subscribe registry of callbacks that receive short user-facing
messages (success, error, warning, info). Subscribers are called in the order
they subscribed; there is no queue and no persistence.
"""
import threading
import time
import uuid
from typing import Any, Callable, Dict, List, Optional, TypeVar

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_DURATIONS = {
    "success": 4000,
    "error": 6000,
    "warning": 5000,
    "info": 4000,
}

# Common error codes mapped to friendly messages
ERROR_MESSAGES: Dict[str, str] = {
    "PGRST116": "No se encontraron resultados",
    "23505": "Este registro ya existe",
    "23503": "No se puede eliminar porque está relacionado con otros registros",
    "42501": "No tienes permisos para realizar esta acción",
    "42P01": "Error de configuración de base de datos",
    "auth/invalid-email": "Email inválido",
    "auth/user-not-found": "Usuario no encontrado",
    "auth/wrong-password": "Contraseña incorrecta",
    "auth/weak-password": "La contraseña debe tener al menos 6 caracteres",
    "auth/email-already-in-use": "Este email ya está registrado",
    "auth/too-many-requests": "Demasiados intentos. Intenta más tarde",
}

FALLBACK_ERROR_MESSAGE = "Ocurrió un error inesperado"


class Toast(BaseModel):
    id: str
    type: str
    title: str
    message: Optional[str] = None
    duration: int = 4000


def _toast_id() -> str:
    return f"toast-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class ToastDispatcher:
    def __init__(self) -> None:
        self._listeners: List[Callable[[Toast], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, callback: Callable[[Toast], None]) -> Callable[[], None]:
        """Add a listener; returns a function that removes it again."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners = [listener for listener in self._listeners if listener is not callback]

        return unsubscribe

    @property
    def listener_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    def emit(self, toast: Toast) -> Toast:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(toast)
        return toast

    def _show(self, kind: str, title: str, message: Optional[str], duration: Optional[int]) -> Toast:
        return self.emit(Toast(
            id=_toast_id(),
            type=kind,
            title=title,
            message=message,
            duration=duration if duration is not None else DEFAULT_DURATIONS[kind],
        ))

    def show_success(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> Toast:
        return self._show("success", title, message, duration)

    def show_error(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> Toast:
        return self._show("error", title, message, duration)

    def show_warning(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> Toast:
        return self._show("warning", title, message, duration)

    def show_info(self, title: str, message: Optional[str] = None, duration: Optional[int] = None) -> Toast:
        return self._show("info", title, message, duration)

    def handle_remote_error(self, error: Exception, title: str = "Error") -> Toast:
        logger.error("remote_error", error=str(error), code=getattr(error, "code", None))
        return self.show_error(title, friendly_error_message(error))

    def with_error_handling(
        self,
        operation: Callable[[], T],
        success_message: Optional[str] = None,
        error_title: str = "Error",
    ) -> Optional[T]:
        """
        Run `operation`, emitting a success toast (if a message is given) or
        an error toast. Returns None when the operation raised.
        """
        try:
            result = operation()
        except Exception as exc:
            logger.error("operation_failed", title=error_title, error=str(exc))
            self.handle_remote_error(exc, error_title)
            return None
        if success_message:
            self.show_success(success_message)
        return result


def friendly_error_message(error: Any) -> str:
    """Look up a friendly message by error code, falling back to the raw text."""
    code = getattr(error, "code", None)
    if code and code in ERROR_MESSAGES:
        return ERROR_MESSAGES[code]
    message = getattr(error, "message", None) or (str(error) if isinstance(error, Exception) else None)
    return message or FALLBACK_ERROR_MESSAGE


# Created at import time; listeners come and go with the application lifespan
toasts = ToastDispatcher()
