"""E-mail delivery of the match digest over SMTP."""
from __future__ import annotations

import html
import re
import smtplib
from dataclasses import dataclass
from datetime import datetime, timezone
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from careerhub.config import get_env
from careerhub.log import get_logger
from careerhub.retry import retry

log = get_logger(__name__)


@dataclass
class SmtpSettings:
    host: str
    port: int
    user: str
    password: str
    from_addr: str
    to_addr: str

    @classmethod
    def from_env(cls, to_email: str | None = None) -> SmtpSettings | None:
        host = get_env("SMTP_HOST")
        user = get_env("SMTP_USER")
        password = get_env("SMTP_PASSWORD")
        to_addr = (to_email or get_env("TO_EMAIL")).strip()
        if not all([host, user, password, to_addr]):
            return None
        try:
            port = int(get_env("SMTP_PORT", "587"))
        except ValueError:
            port = 587
        return cls(host, port, user, password, get_env("FROM_EMAIL", user) or user, to_addr)


_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"(?<!\w)_(.+?)_(?!\w)")


def _inline(text: str) -> str:
    text = html.escape(text, quote=False)
    text = _BOLD.sub(r"<strong>\1</strong>", text)
    return _ITALIC.sub(r"<em>\1</em>", text)


def digest_to_html(md: str) -> str:
    """Render the subset of markdown the digest uses (headings, bullets, table)."""
    out: list[str] = []
    in_table = False
    for raw in md.split("\n"):
        line = raw.strip()
        is_row = line.startswith("|") and line.endswith("|")
        if in_table and not is_row:
            out.append("</table>")
            in_table = False

        if not line:
            continue
        if is_row:
            cells = [c.strip() for c in line.split("|")[1:-1]]
            if all(set(c) <= {"-", ":", " "} for c in cells):
                continue
            tag = "td" if in_table else "th"
            if not in_table:
                out.append('<table style="border-collapse:collapse;font-size:13px;margin:8px 0">')
                in_table = True
            out.append(
                "<tr>"
                + "".join(f'<{tag} style="border:1px solid #ddd;padding:5px 8px">{_inline(c)}</{tag}>' for c in cells)
                + "</tr>"
            )
        elif line.startswith("### "):
            out.append(f'<h3 style="margin:12px 0 4px">{_inline(line[4:])}</h3>')
        elif line.startswith("## "):
            out.append(f'<h2 style="margin:18px 0 6px;border-bottom:1px solid #ddd">{_inline(line[3:])}</h2>')
        elif line.startswith("# "):
            out.append(f'<h1 style="margin:0 0 8px">{_inline(line[2:])}</h1>')
        elif line == "---":
            out.append('<hr style="border:none;border-top:1px solid #e0e0e0;margin:16px 0">')
        elif line.startswith("- "):
            out.append(f'<div style="margin:2px 0 2px 16px">• {_inline(line[2:])}</div>')
        else:
            out.append(f'<p style="margin:4px 0">{_inline(line)}</p>')
    if in_table:
        out.append("</table>")
    return "\n".join(out)


@retry(max_attempts=3, base_delay=3.0, retryable=(smtplib.SMTPException, OSError))
def _smtp_send(smtp: SmtpSettings, msg: MIMEMultipart) -> None:
    with smtplib.SMTP(smtp.host, smtp.port, timeout=30) as server:
        server.starttls()
        server.login(smtp.user, smtp.password)
        server.sendmail(smtp.from_addr, [smtp.to_addr], msg.as_string())


def send_digest_email(
    body: str,
    subject: str | None = None,
    to_email: str | None = None,
) -> tuple[bool, str]:
    smtp = SmtpSettings.from_env(to_email)
    if smtp is None:
        return False, "SMTP not configured (set SMTP_HOST, SMTP_USER, SMTP_PASSWORD, TO_EMAIL in .env)"

    subject = subject or f"New job matches – {datetime.now(timezone.utc).strftime('%Y-%m-%d')}"
    html_body = (
        '<div style="font-family:-apple-system,Segoe UI,Roboto,sans-serif;max-width:760px;margin:0 auto;color:#333">\n'
        f"{digest_to_html(body)}\n"
        '<p style="font-size:11px;color:#999">You are receiving this because job alerts are on.</p>\n'
        "</div>"
    )

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = smtp.from_addr
    msg["To"] = smtp.to_addr
    msg.attach(MIMEText(body, "plain", "utf-8"))
    msg.attach(MIMEText(html_body, "html", "utf-8"))

    try:
        _smtp_send(smtp, msg)
    except (smtplib.SMTPException, OSError) as e:
        log.error("Digest e-mail failed: %s", e)
        return False, str(e)[:150]
    log.info("Digest e-mailed to %s", smtp.to_addr)
    return True, "Email sent"
