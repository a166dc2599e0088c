"""
Пакет pdfcontrib
================

Расширения для генератора PDF (fpdf2 и совместимые хосты), которых в нём нет:

    - Импорт страниц существующего PDF как шаблонов (form XObject)
    - Кодирование штрихкодов (Code128, Code39, EAN, Codabar, 2 of 5, QR,
      DataMatrix, PDF417) и размещение их на странице растровым изображением

Пример базового использования:
    >>> from fpdf import FPDF
    >>> from pdfcontrib import get_logger
    >>> from pdfcontrib.barcode import BarcodeSession, FPDFBarcodeHost
    >>>
    >>> pdf = FPDF(unit="mm")
    >>> pdf.add_page()
    >>> host = FPDFBarcodeHost(pdf)
    >>> session = BarcodeSession()
    >>> key = session.registry.register_code128(host, "ORDER-42")
    >>> session.placer.place(host, key, x=10, y=10, w=60, h=15)
    >>> assert host.ok, host.error

Управление конфигурацией:
    >>> import os
    >>> os.environ['PDFCONTRIB_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from pdfcontrib import load_config
    >>> config = load_config()
    >>> print(config["barcode_dpi"])
    96

Лицензия: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "pdfcontrib Development Team"
__description__ = "Page import and barcode placement adapters for PDF generators"
__license__ = "MIT"
__python_requires__ = ">=3.11"

# Компоненты семантической версии
VERSION_MAJOR = 0
VERSION_MINOR = 1
VERSION_PATCH = 0

# =============================================================================
# ПРОВЕРКА ВЕРСИИ PYTHON
# =============================================================================

if sys.version_info < (3, 11):
    raise RuntimeError(
        f"pdfcontrib требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

_LOGGER_NAMESPACE = "pdfcontrib"


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком, если задана переменная
      окружения PDFCONTRIB_LOG_DIR
    - Форматом с временной меткой, уровнем, модулем и сообщением

    Уровень логирования задаётся переменной окружения
    PDFCONTRIB_LOG_LEVEL (DEBUG, INFO, WARNING, ERROR, CRITICAL).

    Функция идемпотентна - повторные вызовы не имеют эффекта.
    """
    log_level_str = os.environ.get("PDFCONTRIB_LOG_LEVEL", "INFO").upper()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    log_level = log_level_map.get(log_level_str, logging.INFO)

    root_logger = logging.getLogger(_LOGGER_NAMESPACE)
    if root_logger.handlers:
        return

    root_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Консольный обработчик (stderr) - WARNING и выше
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Файловый обработчик (ротирующий) - все уровни
    log_dir_str = os.environ.get("PDFCONTRIB_LOG_DIR")
    if log_dir_str:
        try:
            log_dir = Path(log_dir_str)
            log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=log_dir / "pdfcontrib.log",
                maxBytes=10 * 1024 * 1024,  # 10 МБ
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(
                f"Не удалось инициализировать файловое логирование: {e}. "
                f"Используется только консоль."
            )

    root_logger.propagate = False


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер для модуля в пространстве имён 'pdfcontrib'.

    Модули пакета уже называются 'pdfcontrib.<...>' и возвращаются как есть;
    для внешних модулей (плагины, скрипты) имя дополняется префиксом.

    Аргументы:
        module_name: Имя модуля, обычно `__name__`.

    Возвращает:
        Экземпляр logging.Logger.

    Пример:
        >>> logger = get_logger(__name__)
        >>> logger.debug("Зарегистрирован штрихкод %s", key)
    """
    if not module_name.startswith(_LOGGER_NAMESPACE):
        if module_name == "__main__":
            full_name = f"{_LOGGER_NAMESPACE}.main"
        else:
            clean_name = module_name.lstrip(".")
            full_name = f"{_LOGGER_NAMESPACE}.{clean_name}"
    else:
        full_name = module_name

    return logging.getLogger(full_name)


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

# Значения конфигурации по умолчанию
_DEFAULT_CONFIG: Dict[str, Any] = {
    "log_level": "INFO",
    "host_dpi": 72,
    "barcode_dpi": 96,
    "raster_format": "PNG",
    "coordinate_precision": 6,
    "default_page_box": "/MediaBox",
    "qr_error_correction": "M",
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить конфигурацию из pdfcontrib.json или использовать значения
    по умолчанию.

    Ключи конфигурации:
        - log_level: str - Уровень логирования
        - host_dpi: int - Разрешение, которое хост-документ подразумевает
          для изображений (72)
        - barcode_dpi: int - Разрешение растра штрихкода (96)
        - raster_format: str - Формат растра без потерь (PNG)
        - coordinate_precision: int - Знаков после точки в ключе размещения
        - default_page_box: str - Граница страницы при импорте шаблона
        - qr_error_correction: str - Уровень коррекции QR по умолчанию (L/M/Q/H)

    Аргументы:
        config_path: Путь к файлу конфигурации. Если None, ищется
                    'pdfcontrib.json' в текущем каталоге.

    Возвращает:
        Словарь со всеми ключами по умолчанию, пользовательские значения
        переопределяют значения по умолчанию.

    Пример:
        >>> config = load_config(Path("build/pdfcontrib.json"))
        >>> config.get("raster_format")
        'PNG'
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path("pdfcontrib.json")

    config = _DEFAULT_CONFIG.copy()

    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                user_config = json.load(f)

            if not isinstance(user_config, dict):
                raise ValueError(
                    f"Файл конфигурации должен содержать JSON-объект, "
                    f"получен {type(user_config).__name__}"
                )

            config.update(user_config)

            logger.info(f"Конфигурация загружена из {config_path}")
            logger.debug(f"Конфигурация: {config}")

        except json.JSONDecodeError as e:
            logger.warning(
                f"Не удалось разобрать {config_path}: Недопустимый JSON "
                f"в строке {e.lineno}, столбце {e.colno}. "
                f"Используется конфигурация по умолчанию."
            )
        except OSError as e:
            logger.warning(
                f"Не удалось прочитать {config_path}: {e}. "
                f"Используется конфигурация по умолчанию."
            )
        except ValueError as e:
            logger.warning(
                f"Недопустимый формат конфигурации: {e}. "
                f"Используется конфигурация по умолчанию."
            )
    else:
        logger.debug(
            f"Файл конфигурации {config_path} не найден. "
            f"Используется конфигурация по умолчанию."
        )

    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Проверить, какие библиотеки кодирования/импорта установлены.

    Проверяемые зависимости:
        - pillow: растр, масштабирование и PNG
        - python-barcode: линейные символики
        - qrcode: QR
        - pdf417gen: PDF417
        - treepoem: DataMatrix, Code39 full ASCII, 2 of 5 (нужен Ghostscript)
        - pypdf: разбор исходного PDF при импорте страниц
        - fpdf2: хост-документ FPDF

    Возвращает:
        Словарь {имя пакета: доступен ли}.
    """
    modules = {
        "pillow": "PIL",
        "python-barcode": "barcode",
        "qrcode": "qrcode",
        "pdf417gen": "pdf417gen",
        "treepoem": "treepoem",
        "pypdf": "pypdf",
        "fpdf2": "fpdf",
    }
    dependencies: Dict[str, bool] = {}
    for name, module in modules.items():
        try:
            __import__(module)
            dependencies[name] = True
        except ImportError:
            dependencies[name] = False
    return dependencies


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУБЛИЧНОГО API
# =============================================================================

__all__ = [
    # Метаданные версии
    "__version__",
    "__author__",
    "__description__",
    "__license__",
    "__python_requires__",
    "VERSION_MAJOR",
    "VERSION_MINOR",
    "VERSION_PATCH",
    # Утилиты
    "get_logger",
    "load_config",
    "check_dependencies",
]

# =============================================================================
# ИНИЦИАЛИЗАЦИЯ ПАКЕТА
# =============================================================================

_setup_logging()

_logger = get_logger(__name__)
_logger.debug(f"pdfcontrib v{__version__} инициализируется (Python {sys.version})")

_deps = check_dependencies()
_missing = [name for name, available in _deps.items() if not available]
if _missing:
    _logger.info(
        f"Отсутствуют опциональные зависимости: {', '.join(_missing)}. "
        f"Установите их командой: pip install {' '.join(_missing)}"
    )
