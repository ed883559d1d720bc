"""HTML email rendering with Jinja2.

A renderer turns an ``EmailMessage`` into the final HTML body. The Jinja2
renderer locates a *view* (``<ViewName>.html``) for each message:

1. ``body_template`` without angle brackets is used verbatim as the view name.
2. Otherwise the view is named after ``render_options.theme`` with the first
   letter upper-cased and the rest lower-cased (``"minimal"`` -> ``"Minimal"``),
   or ``"Default"`` when no theme is set.

A missing view falls back once to ``"Default"``; if that is missing too,
``TemplateNotFoundError`` is raised.
"""

from __future__ import annotations

from collections.abc import Awaitable, Mapping
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from jinja2 import (
    BaseLoader,
    Environment,
    FileSystemLoader,
    Template,
    TemplateError,
    TemplateNotFound,
    select_autoescape,
)
from markupsafe import Markup

from .content import is_html, substitute_placeholders
from .exceptions import EmailRenderError, TemplateNotFoundError
from .schemas import EmailMessage, EmailRenderOptions

if TYPE_CHECKING:
    from email_sender.core.settings.email import TemplateSettings

logger = logging.getLogger(__name__)

DEFAULT_VIEW = "Default"
VIEW_EXTENSION = ".html"
BUNDLED_TEMPLATE_DIR = Path(__file__).resolve().parent.parent.parent / "templates" / "email"


@runtime_checkable
class HtmlRenderer(Protocol):
    """Protocol for anything that renders an email body to HTML.

    Implementations must not mutate the message. ``render_email`` may return
    the HTML directly or an awaitable resolving to it; senders await it.
    """

    def render_email(self, message: EmailMessage) -> str | Awaitable[str]:
        """Render the final HTML body for ``message``."""
        ...


def is_inline_markup(template: str) -> bool:
    """Check if a body template holds markup rather than a view name."""
    return "<" in template or ">" in template


def resolve_view_name(message: EmailMessage) -> str:
    """Determine the view name used to render ``message``.

    Args:
        message: The email message.

    Returns:
        ``body_template`` when it looks like an identifier, otherwise the
        capitalized theme name (``"Default"`` without a theme).
    """
    template = message.body_template
    if template and not is_inline_markup(template):
        return template

    theme = message.render_options.theme if message.render_options else None
    if not theme:
        theme = DEFAULT_VIEW
    return theme[0].upper() + theme[1:].lower()


class JinjaHtmlRenderer:
    """Jinja2-based renderer with theme views and a ``Default`` fallback.

    Views are looked up in ``settings.template_dir`` first and in the bundled
    templates second, so the bundled ``Default`` view always backs custom
    directories. Passing ``loader`` replaces both.

    Template context:
        message: The ``EmailMessage`` being rendered.
        subject: Message subject.
        content: Inline ``body_template`` markup (placeholders substituted)
            or ``body``; marked safe when it is HTML.
        model: The message model; mapping keys are also exposed directly.
        options: ``EmailRenderOptions`` (defaults when the message has none).

    Example:
        renderer = JinjaHtmlRenderer(get_template_settings())
        html = renderer.render_email(message)
    """

    def __init__(
        self,
        settings: TemplateSettings | None = None,
        *,
        loader: BaseLoader | None = None,
    ) -> None:
        """Initialize template renderer.

        Args:
            settings: Template settings (custom directory, default context).
            loader: Explicit Jinja2 loader; overrides the directory lookup.
        """
        if loader is None:
            search_path = [BUNDLED_TEMPLATE_DIR]
            if settings is not None and settings.template_dir is not None:
                search_path.insert(0, settings.template_dir)
            loader = FileSystemLoader([str(path) for path in search_path])

        self.env = Environment(
            loader=loader,
            autoescape=select_autoescape(["html", "xml"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.default_context: dict[str, Any] = dict(settings.default_context) if settings else {}

        logger.debug(
            "Email template renderer initialized",
            extra={"loader": type(loader).__name__},
        )

    def render_email(self, message: EmailMessage) -> str:
        """Render ``message`` to HTML.

        Raises:
            TemplateNotFoundError: If the resolved view and ``Default`` are both missing.
            EmailRenderError: If the template fails to render.
        """
        view_name = resolve_view_name(message)
        template = self._find_view(view_name)
        try:
            return template.render(self._build_context(message))
        except TemplateError as e:
            raise EmailRenderError(
                f"Failed to render view '{template.name}': {e}",
                view_name=view_name,
                cause=e,
            ) from e

    def template_exists(self, view_name: str) -> bool:
        """Check if a view exists."""
        try:
            self.env.get_template(f"{view_name}{VIEW_EXTENSION}")
        except TemplateNotFound:
            return False
        return True

    def list_views(self) -> list[str]:
        """List available view names (layouts excluded)."""
        views = set()
        for template_path in self.env.list_templates(extensions=[VIEW_EXTENSION.lstrip(".")]):
            if "/" in template_path:
                continue
            views.add(template_path[: -len(VIEW_EXTENSION)])
        return sorted(views)

    def _find_view(self, view_name: str) -> Template:
        try:
            return self.env.get_template(f"{view_name}{VIEW_EXTENSION}")
        except TemplateNotFound as e:
            if view_name == DEFAULT_VIEW:
                raise TemplateNotFoundError(view_name) from e
            logger.info(
                f"View '{view_name}' not found, falling back to '{DEFAULT_VIEW}'",
                extra={"view_name": view_name},
            )

        try:
            return self.env.get_template(f"{DEFAULT_VIEW}{VIEW_EXTENSION}")
        except TemplateNotFound as e:
            raise TemplateNotFoundError(DEFAULT_VIEW, searched=[view_name, DEFAULT_VIEW]) from e

    def _build_context(self, message: EmailMessage) -> dict[str, Any]:
        model = message.model
        context: dict[str, Any] = dict(self.default_context)
        if isinstance(model, Mapping):
            context.update(model)

        content: str
        if message.body_template and is_inline_markup(message.body_template):
            markup = message.body_template
            if model is not None:
                markup = substitute_placeholders(markup, model)
            content = Markup(markup)
        elif is_html(message.body):
            content = Markup(message.body)
        else:
            content = message.body

        context.update(
            message=message,
            subject=message.subject,
            content=content,
            model=model,
            options=message.render_options or EmailRenderOptions(),
        )
        return context


__all__ = [
    "DEFAULT_VIEW",
    "HtmlRenderer",
    "JinjaHtmlRenderer",
    "is_inline_markup",
    "resolve_view_name",
]
