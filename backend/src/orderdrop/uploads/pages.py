"""HTML pages for buyer and seller links

Minimal server-rendered pages: the upload form, the per-state messages, and
the reset confirmation result. Every interpolated value is escaped.
"""

from html import escape

from ..domain.requests.ports.request_store_port import UploadRequestRecord
from ..domain.requests.request_status import RequestEvent, get_allowed_events
from ..domain.uploads.validation import SUPPORTED_MIME_TYPES

_STYLE = (
    "body{font-family:Arial,sans-serif;max-width:560px;margin:40px auto;padding:0 16px;color:#111}"
    ".card{border:1px solid #ddd;border-radius:8px;padding:24px}"
    "button{background:#2563eb;color:#fff;border:0;border-radius:6px;padding:10px 18px;cursor:pointer}"
)


def _page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\">"
        "<meta name=\"viewport\" content=\"width=device-width, initial-scale=1\">"
        f"<title>{escape(title)}</title><style>{_STYLE}</style></head>"
        f"<body><div class=\"card\">{body}</div></body></html>"
    )


def message_page(title: str, message: str) -> str:
    return _page(title, f"<h2>{escape(title)}</h2><p>{escape(message)}</p>")


def invalid_link_page() -> str:
    return message_page("Invalid link", "This link is invalid or has expired.")


def error_page() -> str:
    return message_page("Something went wrong", "An error occurred. Please try again later.")


def upload_form_page(record: UploadRequestRecord, max_files: int) -> str:
    """Render the page for a request according to its status.

    Pending shows the upload form, Completed offers to start over, and
    Completed-Reset-Requested says the request is under review.
    """
    name = escape(record.buyer_name)
    request_id = escape(record.id, quote=True)
    allowed = get_allowed_events(record.status)

    if RequestEvent.RESET_REQUESTED in allowed:
        body = (
            f"<h2>Thanks, {name}</h2>"
            "<p>Your files have been received.</p>"
            "<p>Uploaded the wrong files? You can ask the seller to let you start over.</p>"
            "<form method=\"post\" action=\"/request-restart\">"
            f"<input type=\"hidden\" name=\"id\" value=\"{request_id}\">"
            "<button type=\"submit\">Request restart</button></form>"
        )
        return _page("Upload complete", body)

    if RequestEvent.FILES_SUBMITTED not in allowed:
        return message_page(
            "Under review",
            "Your restart request is being reviewed by the seller. "
            "You will get an email when you can upload again.",
        )

    accept = ",".join(sorted(SUPPORTED_MIME_TYPES))
    body = (
        f"<h2>Hi {name}</h2>"
        f"<p>Upload the photos or receipts for order {escape(record.order_reference)} "
        f"(up to {max_files} files).</p>"
        "<form method=\"post\" action=\"/upload\" enctype=\"multipart/form-data\">"
        f"<input type=\"hidden\" name=\"id\" value=\"{request_id}\">"
        f"<p><input type=\"file\" name=\"files\" multiple accept=\"{accept}\" required></p>"
        "<button type=\"submit\">Upload</button></form>"
    )
    return _page("Upload your files", body)
