import logging
from pathlib import Path
from typing import Any, Dict, Iterator, Set

from fastapi.responses import StreamingResponse
from jinja2 import (Environment, FileSystemLoader, Template, TemplateError,
                    TemplateNotFound, TemplateSyntaxError, meta, select_autoescape)

from shahala.errors import RenderError
from shahala.schemas import ViewModel


logger = logging.getLogger(__name__)


class TemplateRenderer:
    """
    Отрисовывает HTML шаблоны из папки templates_dir.

    Шаблон ищется по точному имени файла. По умолчанию разобранные
    шаблоны не кешируются (cache_size=0), поэтому правки и удаление
    файлов видны со следующего запроса.
    """

    def __init__(self, templates_dir: Path | str, cache_size: int = 0):
        self.templates_dir = Path(templates_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=select_autoescape(["html"]),
            cache_size=cache_size,
        )

    def load(self, template_name: str) -> Template:
        """
        Загружает шаблон вместе со всеми шаблонами, на которые он ссылается
        (extends / include / import), чтобы ошибки поиска и разбора
        всплыли до начала ответа.
        """

        try:
            template = self.env.get_template(template_name)
            self._load_references(template_name, {template_name})
        except TemplateNotFound as e:
            logger.error("Template not found: %s (in %s)", e.name, self.templates_dir)
            raise RenderError(f"template {e.name!r} not found") from e
        except TemplateSyntaxError as e:
            logger.error("Error parsing template %s: %s", e.name or template_name, e)
            raise RenderError(f"template {e.name or template_name!r}: {e}") from e

        return template

    def _load_references(self, template_name: str, seen: Set[str]) -> None:
        source, filename, _ = self.env.loader.get_source(self.env, template_name)
        ast = self.env.parse(source, template_name, filename)

        for name in meta.find_referenced_templates(ast):
            # None - имя шаблона вычисляется во время выполнения
            if name is None or name in seen:
                continue
            seen.add(name)
            self.env.get_template(name)
            self._load_references(name, seen)

    def render(self, template_name: str, view_model: ViewModel) -> StreamingResponse:
        """
        Отдаёт страницу потоком.

        Ошибки поиска и разбора шаблона поднимаются до отправки
        заголовков. Если шаблон упал в процессе выполнения, уже
        отправленная часть страницы остаётся у клиента.
        """

        return StreamingResponse(
            self.stream(template_name, view_model),
            media_type="text/html; charset=utf-8",
        )

    def stream(self, template_name: str, view_model: ViewModel) -> Iterator[str]:
        template = self.load(template_name)
        context = self._build_context(view_model)

        return self._generate(template_name, template, context)

    def _build_context(self, view_model: ViewModel) -> Dict[str, Any]:
        return {
            "articles": view_model.articles,
            "video_links": view_model.video_links,
        }

    def _generate(self, template_name: str, template: Template,
                  context: Dict[str, Any]) -> Iterator[str]:
        try:
            yield from template.generate(context)
        except TemplateError as e:
            logger.error("Error executing template %s: %s", template_name, e)
            raise RenderError(f"template {template_name!r}: {e}") from e
