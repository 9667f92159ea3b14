"""Built-in email templates.

Each template renders a (subject, text_body, html_body) triple from a data dict.
Values are HTML-escaped in the HTML body only.
"""

from html import escape
from typing import Any, Callable, Dict, NamedTuple

from ...domain.notifications.ports.notifier_port import NotificationTemplate


class RenderedEmail(NamedTuple):
    subject: str
    text_body: str
    html_body: str


def _html_page(paragraphs, link_url=None, link_label=None) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    if link_url:
        body += (
            f'<p><a href="{escape(link_url, quote=True)}" '
            f'style="background:#2563eb;color:#fff;padding:10px 18px;'
            f'border-radius:6px;text-decoration:none">{escape(link_label)}</a></p>'
        )
    return f'<html><body style="font-family:Arial,sans-serif;color:#111">{body}</body></html>'


def _upload_link(data: Dict[str, Any]) -> RenderedEmail:
    name = data["buyer_name"]
    link = data["upload_link"]
    order = data["order_reference"]
    return RenderedEmail(
        subject=f"Upload your files for order {order}",
        text_body=(
            f"Hi {name},\n\n"
            f"Thanks for your order {order}. Please upload your photos or receipts here:\n"
            f"{link}\n"
        ),
        html_body=_html_page(
            [
                f"Hi {escape(name)},",
                f"Thanks for your order {escape(order)}. Please upload your photos or receipts.",
            ],
            link_url=link,
            link_label="Upload files",
        ),
    )


def _reset_requested(data: Dict[str, Any]) -> RenderedEmail:
    name = data["buyer_name"]
    order = data["order_reference"]
    link = data["confirm_link"]
    return RenderedEmail(
        subject=f"Upload reset requested for order {order}",
        text_body=(
            f"{name} ({data['buyer_email']}) asked to replace the files uploaded for order {order}.\n\n"
            f"To delete the uploaded files and let the buyer upload again, open:\n{link}\n\n"
            f"If you do nothing, the request expires after {data['grace_period_days']} days.\n"
        ),
        html_body=_html_page(
            [
                f"{escape(name)} ({escape(data['buyer_email'])}) asked to replace the files "
                f"uploaded for order {escape(order)}.",
                f"If you do nothing, the request expires after {escape(str(data['grace_period_days']))} days.",
            ],
            link_url=link,
            link_label="Confirm reset",
        ),
    )


def _upload_completed(data: Dict[str, Any]) -> RenderedEmail:
    name = data["buyer_name"]
    order = data["order_reference"]
    count = data["file_count"]
    return RenderedEmail(
        subject=f"New files for order {order}",
        text_body=(
            f"{name} uploaded {count} file(s) for order {order} at {data['completed_at']}.\n"
            f"They are in the shared folder {data['folder_name']}.\n"
        ),
        html_body=_html_page(
            [
                f"{escape(name)} uploaded {count} file(s) for order {escape(order)} "
                f"at {escape(data['completed_at'])}.",
                f"They are in the shared folder {escape(data['folder_name'])}.",
            ]
        ),
    )


def _reset_confirmed(data: Dict[str, Any]) -> RenderedEmail:
    name = data["buyer_name"]
    order = data["order_reference"]
    link = data["upload_link"]
    return RenderedEmail(
        subject=f"You can upload new files for order {order}",
        text_body=(
            f"Hi {name},\n\n"
            f"Your previous upload for order {order} was cleared. Upload your new files here:\n"
            f"{link}\n"
        ),
        html_body=_html_page(
            [
                f"Hi {escape(name)},",
                f"Your previous upload for order {escape(order)} was cleared.",
            ],
            link_url=link,
            link_label="Upload new files",
        ),
    )


TEMPLATES: Dict[NotificationTemplate, Callable[[Dict[str, Any]], RenderedEmail]] = {
    NotificationTemplate.UPLOAD_LINK: _upload_link,
    NotificationTemplate.RESET_REQUESTED: _reset_requested,
    NotificationTemplate.UPLOAD_COMPLETED: _upload_completed,
    NotificationTemplate.RESET_CONFIRMED: _reset_confirmed,
}


def render(template: NotificationTemplate, data: Dict[str, Any]) -> RenderedEmail:
    """Render a template.

    Raises:
        KeyError: If the template is unknown or data lacks a required field
    """
    return TEMPLATES[template](data)
