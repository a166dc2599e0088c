"""
fpdi

Импорт страниц существующих PDF как шаблонов и их размещение в хост-документе.

Public API:
    - PageImporter: импорт страницы в документ, размещение шаблона
    - TemplateImporter: движок на pypdf (объекты, хеши ссылок, form XObject)
    - ImportedTemplate: описание импортированной страницы
"""

from pdfcontrib.fpdi.adapter import PageImporter
from pdfcontrib.fpdi.importer import (
    HASH_LENGTH,
    TEMPLATE_PREFIX,
    ImportedTemplate,
    TemplateImporter,
)

__all__ = [
    "HASH_LENGTH",
    "ImportedTemplate",
    "PageImporter",
    "TEMPLATE_PREFIX",
    "TemplateImporter",
]
