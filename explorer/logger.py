from __future__ import annotations

"""
explorer/logger.py

Logger central del proyecto (fachada sobre `logging`).

API estable
-----------
- debug / info / warning / error
- progress / progressf (siempre visible, sin timestamps)
- debug_ctx(tag, msg) (debug contextual alineado con SILENT/DEBUG)

Política
--------
- SILENT_MODE=True: suprime debug/info/warning (salvo always=True). `error()` siempre emite.
- DEBUG_MODE=True: permite trazas útiles; en SILENT+DEBUG se emiten por `progress`.
- El logging nunca debe romper el flujo.

Salida opcional a fichero
-------------------------
Si `explorer.config_base` ya está importado y LOGGER_FILE_ENABLED=True con un
LOGGER_FILE_PATH resuelto, todo lo que pase por `logging` se duplica a fichero
vía FileHandler en el root logger.

Notas técnicas
--------------
- No importamos `explorer.config_base` directamente (evitamos circular imports).
  Lo leemos desde `sys.modules` si ya está importado.
- Inicialización idempotente.
"""

import logging
import os
import sys
from types import ModuleType, TracebackType
from typing import Final, Mapping, TypedDict

from typing_extensions import TypeAlias, Unpack

# ============================================================================
# TIPOS: kwargs seguros para logging
# ============================================================================

_ExcInfoTuple: TypeAlias = tuple[type[BaseException], BaseException, TracebackType | None]
ExcInfo: TypeAlias = bool | _ExcInfoTuple | BaseException | None


class LogKwargs(TypedDict, total=False):
    """Subconjunto útil de kwargs soportados por logging.Logger.*."""

    exc_info: ExcInfo
    stack_info: bool
    stacklevel: int
    extra: Mapping[str, object] | None


# ============================================================================
# CONFIGURACIÓN GLOBAL
# ============================================================================

LOGGER_NAME: Final[str] = "movie_explorer"

_CONFIG_MODULE: Final[str] = "explorer.config_base"

_LOGGER: logging.Logger | None = None
_CONFIGURED: bool = False

_FILE_HANDLER_TAG: Final[str] = "_movie_explorer_file_handler"

_LEVELS_BY_NAME: Final[dict[str, int]] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
    "FATAL": logging.CRITICAL,
}


# ============================================================================
# UTILIDADES CONFIG / FLAGS (sin importar config_base directamente)
# ============================================================================


def _safe_get_cfg() -> ModuleType | None:
    """Devuelve explorer.config_base si ya ha sido importado."""
    mod = sys.modules.get(_CONFIG_MODULE)
    return mod if isinstance(mod, ModuleType) else None


def _cfg_bool(name: str, default: bool = False) -> bool:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    return bool(getattr(cfg, name, default))


def _cfg_str(name: str, default: str | None = None) -> str | None:
    cfg = _safe_get_cfg()
    if cfg is None:
        return default
    v = getattr(cfg, name, default)
    if v is None:
        return None
    s = str(v).strip()
    return s or default


def is_silent_mode() -> bool:
    """SILENT_MODE global (si config_base está cargado)."""
    return _cfg_bool("SILENT_MODE", False)


def is_debug_mode() -> bool:
    """DEBUG_MODE global (si config_base está cargado)."""
    return _cfg_bool("DEBUG_MODE", False)


# ============================================================================
# RESOLUCIÓN DE LEVEL + EXTERNAL LOGGERS
# ============================================================================


def _resolve_level_from_config() -> int:
    """
    Determina el nivel del logging root.

    Prioridad:
      1) LOG_LEVEL explícito
      2) DEBUG_MODE
      3) INFO
    """
    if _safe_get_cfg() is None:
        return logging.INFO

    lvl = _cfg_str("LOG_LEVEL", None)
    if lvl:
        mapped = _LEVELS_BY_NAME.get(lvl.upper())
        if mapped is not None:
            return mapped

    if is_debug_mode():
        return logging.DEBUG

    return logging.INFO


def _apply_root_level(level: int) -> None:
    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers:
        handler.setLevel(level)


def _configure_external_loggers() -> None:
    """
    Baja el nivel de loggers externos ruidosos aunque el root esté en DEBUG,
    salvo que HTTP_DEBUG=True.
    """
    if _cfg_bool("HTTP_DEBUG", False):
        return

    for name in ("urllib3", "urllib3.connectionpool", "requests"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ============================================================================
# FILE LOGGING (opcional)
# ============================================================================


def _file_logging_path() -> str | None:
    if not _cfg_bool("LOGGER_FILE_ENABLED", False):
        return None
    return _cfg_str("LOGGER_FILE_PATH", None)


def _has_our_file_handler(root: logging.Logger) -> bool:
    return any(getattr(h, _FILE_HANDLER_TAG, False) for h in root.handlers)


def _ensure_file_handler(root: logging.Logger, *, level: int) -> None:
    """
    Añade un FileHandler al root logger si procede y si no existe ya.
    Si no se puede abrir el fichero, se sigue solo con consola.
    """
    path = _file_logging_path()
    if not path or _has_our_file_handler(root):
        return

    try:
        dir_name = os.path.dirname(path)
        if dir_name:
            os.makedirs(dir_name, exist_ok=True)
        fh = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    except OSError:
        return

    fh.setLevel(level)
    fh.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    setattr(fh, _FILE_HANDLER_TAG, True)
    root.addHandler(fh)


# ============================================================================
# INICIALIZACIÓN DEL LOGGER
# ============================================================================


def _ensure_configured() -> logging.Logger:
    """Inicializa logging de forma idempotente y devuelve el logger principal."""
    global _LOGGER, _CONFIGURED

    level = _resolve_level_from_config()
    root = logging.getLogger()

    if _CONFIGURED and _LOGGER is not None:
        _apply_root_level(level)
        _ensure_file_handler(root, level=level)
        return _LOGGER

    if not root.handlers:
        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
    else:
        _apply_root_level(level)

    _configure_external_loggers()
    _ensure_file_handler(root, level=level)

    _LOGGER = logging.getLogger(LOGGER_NAME)
    _CONFIGURED = True
    return _LOGGER


def _should_log(*, always: bool = False) -> bool:
    if always:
        return True
    return not is_silent_mode()


# ============================================================================
# PROGRESO / HEARTBEAT (NO logging)
# ============================================================================


def progress(message: str) -> None:
    """Emite una línea siempre visible (ignora SILENT_MODE)."""
    try:
        sys.stdout.write(f"{message}\n")
        sys.stdout.flush()
    except (OSError, ValueError):
        pass


def progressf(fmt: str, *args: object) -> None:
    """Formato estilo printf para progress."""
    try:
        msg = fmt % args if args else fmt
    except (TypeError, ValueError):
        msg = fmt
    progress(msg)


# ============================================================================
# API PÚBLICA DE LOGGING
# ============================================================================


def debug(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().debug(msg, *args, **kwargs)


def info(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().info(msg, *args, **kwargs)


def warning(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    if not _should_log(always=always):
        return
    _ensure_configured().warning(msg, *args, **kwargs)


def error(msg: str, *args: object, always: bool = False, **kwargs: Unpack[LogKwargs]) -> None:
    """ERROR siempre se emite (ignora SILENT_MODE)."""
    _ensure_configured().error(msg, *args, **kwargs)


# ============================================================================
# DEBUG CONTEXTUAL (tag)
# ============================================================================


def debug_ctx(tag: str, msg: object) -> None:
    """
    Debug contextual con tag.

    - DEBUG_MODE=False -> no-op
    - DEBUG_MODE=True:
        * SILENT_MODE=True  -> progress("[TAG][DEBUG] ...")
        * SILENT_MODE=False -> info("[TAG][DEBUG] ...")
    """
    if not is_debug_mode():
        return

    t = (tag or "DEBUG").strip().upper()
    line = f"[{t}][DEBUG] {msg}"

    if is_silent_mode():
        progress(line)
    else:
        info(line)
