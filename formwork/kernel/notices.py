"""
Formwork Kernel — Error Notices

HTML shown in place of a form whose builder callback failed. Development
shows the exception; production shows a generic message.
"""

from __future__ import annotations

from html import escape as _html_escape

from formwork.config import settings

PRODUCTION_MESSAGE = "This form could not be displayed. Please contact the site administrator."


def render_error_notice(
    exc: BaseException,
    title: str = "Form configuration error",
    context_label: str = "",
    context_value: str = "",
    is_dev: bool | None = None,
) -> str:
    dev = settings.is_dev_environment if is_dev is None else is_dev
    parts = [
        '<div class="formwork-notice formwork-notice--error" role="alert">',
        f'<p class="formwork-notice__title"><strong>{_html_escape(title)}</strong></p>',
    ]
    if dev:
        parts.append(
            f'<p class="formwork-notice__message"><code>{_html_escape(type(exc).__name__)}</code>: '
            f"{_html_escape(str(exc))}</p>"
        )
        if context_label:
            parts.append(
                f'<p class="formwork-notice__context">{_html_escape(context_label)}: '
                f"<code>{_html_escape(context_value)}</code></p>"
            )
    else:
        parts.append(f'<p class="formwork-notice__message">{_html_escape(PRODUCTION_MESSAGE)}</p>')
    parts.append("</div>")
    return "".join(parts)


def render_fallback_page(
    exc: BaseException,
    form_id: str,
    *,
    dev_title: str = "Form build failed",
    prod_title: str = "Form unavailable",
    is_dev: bool | None = None,
) -> str:
    """A whole-page replacement for a form that failed to build."""
    dev = settings.is_dev_environment if is_dev is None else is_dev
    title = dev_title if dev else prod_title
    notice = render_error_notice(exc, title, "Form", form_id, is_dev=dev)
    return f'<div class="formwork-fallback" data-formwork-root="{_html_escape(form_id)}">{notice}</div>'
