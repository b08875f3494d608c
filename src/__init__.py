"""
Пакет ZPL to SVG
================

Конвертер этикеток ZPL (Zebra Programming Language) в векторный SVG
с опциональной растеризацией в PNG/JPEG.

Этот пакет предоставляет:
    - Токенизацию подмножества команд ZPL (^A, ^FO, ^FN, ^FD, ^FR, ^FS,
      ^GB, ^BY, ^BC, ^XF)
    - Четырёхпроходный интерпретатор шаблонов с полями ^FN
    - Штрих-коды Code 128 в виде векторных прямоугольников
    - Встраивание шрифтов TrueType/OpenType в SVG (base64 @font-face)
    - Растеризацию через rsvg-convert или cairosvg с цепочкой запасных вариантов

Пример базового использования:
    >>> from src import convert, get_logger
    >>>
    >>> logger = get_logger(__name__)
    >>> svg = convert("^XA^FO50,50^A0N,30,30^FDHello^FS^XZ", 4.0, 6.0, 300)
    >>> logger.info("SVG: %d символов", len(svg))

Растеризация:
    >>> from src import to_png
    >>> to_png(zpl, "label.png", width_inches=4.0, height_inches=6.0, dpi=203)

Управление конфигурацией:
    >>> import os
    >>> os.environ['ZPL_LOG_LEVEL'] = 'DEBUG'
    >>>
    >>> from src import load_config
    >>> config = load_config()
    >>> print(config["dpi"])

Автор: ZPL to SVG Development Team
Версия: 0.1.0
Лицензия: MIT
Python: 3.11+
"""

import json
import logging
import logging.handlers
import os
import shutil
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# =============================================================================
# МЕТАДАННЫЕ ВЕРСИИ
# =============================================================================

__version__ = "0.1.0"
__author__ = "ZPL to SVG Development Team"
__description__ = "ZPL label to SVG converter with PNG/JPEG rasterization"
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
        f"ZPL to SVG требует Python 3.11 или выше. "
        f"Текущая версия: {sys.version_info.major}."
        f"{sys.version_info.minor}.{sys.version_info.micro}"
    )

# =============================================================================
# КОНФИГУРАЦИЯ ЛОГИРОВАНИЯ
# =============================================================================

# Модули пишут в logging.getLogger(__name__), поэтому логгер пакета
# совпадает с именем импортируемого пакета.
LOGGER_NAME = "src"

_LOG_LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _setup_logging() -> None:
    """
    Инициализировать общепакетную конфигурацию логирования.

    Настраивает логгер пакета ``src`` (родитель логгеров всех модулей) с:
    - Консольным обработчиком (stderr) для WARNING и выше
    - Ротирующим файловым обработчиком (logs/zpl_to_svg.log) для всех уровней

    Уровень задаётся переменной окружения ZPL_LOG_LEVEL
    (DEBUG, INFO, WARNING, ERROR, CRITICAL; по умолчанию INFO).

    Функция идемпотентна - повторные вызовы не имеют дополнительного эффекта.
    """
    log_level = _LOG_LEVELS.get(os.environ.get("ZPL_LOG_LEVEL", "INFO").upper(), logging.INFO)

    package_logger = logging.getLogger(LOGGER_NAME)
    if package_logger.handlers:
        return

    package_logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt=("[%(asctime)s] %(levelname)-8s " "[%(name)s.%(funcName)s:%(lineno)d] %(message)s"),
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)
    package_logger.addHandler(console_handler)

    try:
        log_dir = Path("logs")
        log_dir.mkdir(exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "zpl_to_svg.log",
            maxBytes=10 * 1024 * 1024,  # 10 МБ
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        package_logger.addHandler(file_handler)
    except OSError as e:
        package_logger.warning(
            f"Не удалось инициализировать файловое логирование: {e}. "
            f"Используется только консоль."
        )

    package_logger.propagate = False


def set_log_level(level_name: str) -> int:
    """
    Установить уровень логгера пакета и файлового обработчика.

    Консольный обработчик остаётся на WARNING. Неизвестное имя уровня
    означает INFO.

    Возвращает:
        Установленный числовой уровень.
    """
    level = _LOG_LEVELS.get(str(level_name).upper(), logging.INFO)
    package_logger = logging.getLogger(LOGGER_NAME)
    package_logger.setLevel(level)
    for handler in package_logger.handlers:
        if isinstance(handler, logging.handlers.RotatingFileHandler):
            handler.setLevel(level)
    return level


def get_logger(module_name: str) -> logging.Logger:
    """
    Получить логгер пакета для указанного модуля.

    Логгеры именуются как ``src.<module_name>`` и наследуют
    обработчики логгера пакета.

    Аргументы:
        module_name: Обычно ``__name__`` вызывающего модуля.

    Возвращает:
        Экземпляр logging.Logger.

    Пример:
        >>> logger = get_logger(__name__)
        >>> logger.info("Конвертация этикетки")
    """
    if module_name == LOGGER_NAME or module_name.startswith(LOGGER_NAME + "."):
        return logging.getLogger(module_name)
    if module_name == "__main__":
        return logging.getLogger(f"{LOGGER_NAME}.main")
    clean_name = module_name.lstrip(".")
    return logging.getLogger(f"{LOGGER_NAME}.{clean_name}")


# =============================================================================
# УПРАВЛЕНИЕ КОНФИГУРАЦИЕЙ
# =============================================================================

DEFAULT_CONFIG_FILE = "zpl_to_svg.json"

_DEFAULT_CONFIG: Dict[str, Any] = {
    "width_inches": 4.0,
    "height_inches": 6.0,
    "dpi": 300,
    "font_renderer": "noto",
    "fonts_dir": None,
    "rasterizers": ["rsvg-convert", "cairosvg"],
    "jpeg_quality": 90,
    "png_compress_level": 9,
    "log_level": "INFO",
}

_NUMERIC_KEYS: Dict[str, type] = {
    "width_inches": float,
    "height_inches": float,
    "dpi": int,
    "jpeg_quality": int,
    "png_compress_level": int,
}


def _coerce_numbers(config: Dict[str, Any]) -> None:
    """Привести числовые параметры к типу; при ошибке вернуть значение по умолчанию."""
    logger = get_logger(__name__)
    for key, kind in _NUMERIC_KEYS.items():
        value = config.get(key)
        try:
            if isinstance(value, bool):
                raise TypeError("boolean is not a number")
            config[key] = kind(value)
        except (TypeError, ValueError):
            logger.warning(
                f"Недопустимое значение {key}={value!r}. "
                f"Используется {_DEFAULT_CONFIG[key]!r}."
            )
            config[key] = _DEFAULT_CONFIG[key]


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Загрузить конфигурацию из JSON-файла поверх значений по умолчанию.

    Ключи конфигурации:
        - width_inches: float - Ширина этикетки в дюймах
        - height_inches: float - Высота этикетки в дюймах
        - dpi: int - Точек на дюйм
        - font_renderer: str - "noto", "ibm-vga" или путь к .ttf
        - fonts_dir: str | None - Каталог шрифтов (переопределяется ZPL_FONTS_DIR)
        - rasterizers: list[str] - Порядок растеризаторов
        - jpeg_quality: int - Качество JPEG
        - png_compress_level: int - Степень сжатия PNG
        - log_level: str - Уровень логирования

    Аргументы:
        config_path: Путь к файлу конфигурации. Если None, ищется
                    'zpl_to_svg.json' в текущем каталоге.

    Возвращает:
        Словарь со всеми ключами по умолчанию; пользовательские значения
        переопределяют значения по умолчанию.

    Пример:
        >>> config = load_config(Path("labels.json"))
        >>> dpi = config["dpi"]
    """
    logger = get_logger(__name__)

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_FILE)

    config = _DEFAULT_CONFIG.copy()
    config["rasterizers"] = list(_DEFAULT_CONFIG["rasterizers"])

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
        logger.info(
            f"Файл конфигурации {config_path} не найден. "
            f"Используется конфигурация по умолчанию."
        )

    _coerce_numbers(config)

    fonts_dir_env = os.environ.get("ZPL_FONTS_DIR")
    if fonts_dir_env:
        config["fonts_dir"] = fonts_dir_env

    logger.debug(f"Конфигурация: {config}")
    return config


def check_dependencies() -> Dict[str, bool]:
    """
    Проверить, установлены ли обязательные и опциональные зависимости.

    Проверяемые зависимости:
        Обязательные:
        - svgwrite: Сериализация SVG
        - pillow: Экспорт PNG/JPEG

        Опциональные:
        - cairosvg: Растеризация внутри процесса
        - rsvg-convert: Внешняя утилита растеризации
        - python-barcode: Сверка таблицы Code 128 в тестах

    Возвращает:
        Словарь, отображающий имена зависимостей на статус доступности.
    """
    dependencies: Dict[str, bool] = {}

    try:
        import svgwrite  # noqa: F401

        dependencies["svgwrite"] = True
    except ImportError:
        dependencies["svgwrite"] = False

    try:
        import PIL  # noqa: F401

        dependencies["pillow"] = True
    except ImportError:
        dependencies["pillow"] = False

    # cairocffi поднимает OSError, если нет libcairo
    try:
        import cairosvg  # noqa: F401

        dependencies["cairosvg"] = True
    except (ImportError, OSError):
        dependencies["cairosvg"] = False

    dependencies["rsvg-convert"] = shutil.which("rsvg-convert") is not None

    try:
        import barcode  # noqa: F401

        dependencies["python-barcode"] = True
    except ImportError:
        dependencies["python-barcode"] = False

    return dependencies


# =============================================================================
# ПУБЛИЧНЫЕ ИМПОРТЫ
# =============================================================================

# Импорты после утилит: логирование настраивается первым.

from .barcodegen.code128 import Code128Encoder, encode  # noqa: E402
from .fonts.resolver import FontNotFoundError, resolve_font_path  # noqa: E402
from .model.enums import BoxKind, Color  # noqa: E402
from .raster.export import (  # noqa: E402
    export_label,
    svg_to_image,
    svg_to_png_bytes,
    to_image,
    to_jpeg,
    to_png,
)
from .raster.rasterizer import (  # noqa: E402
    RasterizationError,
    RasterizerChain,
    RasterizerUnavailableError,
    select_rasterizer,
)
from .svg.builder import SvgBuilder  # noqa: E402
from .zpl.converter import ZplToSvg, convert, pixel_size  # noqa: E402

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
    "set_log_level",
    "load_config",
    "check_dependencies",
    # Конвертация
    "ZplToSvg",
    "convert",
    "pixel_size",
    "SvgBuilder",
    "Code128Encoder",
    "encode",
    "BoxKind",
    "Color",
    "resolve_font_path",
    # Растеризация
    "select_rasterizer",
    "RasterizerChain",
    "svg_to_png_bytes",
    "svg_to_image",
    "to_image",
    "to_png",
    "to_jpeg",
    "export_label",
    # Исключения
    "FontNotFoundError",
    "RasterizationError",
    "RasterizerUnavailableError",
]

# =============================================================================
# ИНИЦИАЛИЗАЦИЯ ПАКЕТА
# =============================================================================

_setup_logging()

_logger = get_logger(__name__)
_logger.info(f"ZPL to SVG v{__version__} инициализируется...")
_logger.debug(f"Версия Python: {sys.version}")

_config = load_config()
if "ZPL_LOG_LEVEL" not in os.environ:
    set_log_level(_config.get("log_level", "INFO"))

_deps = check_dependencies()
_missing = [name for name, available in _deps.items() if not available]
if _missing:
    _logger.info(f"Отсутствуют опциональные зависимости: {', '.join(_missing)}")

_logger.debug(f"Расположение пакета: {Path(__file__).parent}")
