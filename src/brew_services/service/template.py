"""Plist template sources and rendering.

Templates come from one of three sources (inline text, a file, or a URL) and
use ``{{name}}`` placeholders filled from a package's attribute mapping. The
rendered plist always carries the service's own label, and never silently runs
a service as root when a non-root identity is available.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import httpx

from brew_services.context import ROOT_USER, ExecutionContext
from brew_services.service.base import TemplateUnavailableError

logger = logging.getLogger(__name__)

PLACEHOLDER_RE = re.compile(r"\{\{([a-z][a-z0-9_]*)\}\}", re.IGNORECASE)
LABEL_RE = re.compile(r"(<key>Label</key>\s*<string>)[^<]*(</string>)")
ROOT_USERNAME_RE = re.compile(
    rf"<key>UserName</key>\s*<string>{ROOT_USER}</string>"
)
USERNAME_RE = re.compile(r"(<key>UserName</key>\s*<string>)[^<]*(</string>)")
USERNAME_KEY_RE = re.compile(r"<key>UserName</key>")
CLOSING_RE = re.compile(r"(</dict>\s*</plist>)")
FIRST_DICT_RE = re.compile(r"<dict>")
URL_RE = re.compile(r"^https?://.+", re.IGNORECASE)


@dataclass(frozen=True)
class InlineTemplate:
    text: str


@dataclass(frozen=True)
class FileTemplate:
    path: Path


@dataclass(frozen=True)
class RemoteTemplate:
    url: str


TemplateSource = InlineTemplate | FileTemplate | RemoteTemplate


def parse_template_argument(value: str) -> TemplateSource:
    """Interpret a user-supplied template argument.

    Raises:
        TemplateUnavailableError: If the value is neither a URL nor a file.
    """
    if URL_RE.match(value):
        return RemoteTemplate(value)
    path = Path(value).expanduser()
    if path.is_file():
        return FileTemplate(path)
    raise TemplateUnavailableError(f"{value} is not a url or existing file")


async def materialize(source: TemplateSource, timeout: float = 30.0) -> str:
    """Turn a template source into text.

    Raises:
        TemplateUnavailableError: If the file cannot be read or the fetch fails.
    """
    match source:
        case InlineTemplate(text=text):
            return text
        case FileTemplate(path=path):
            try:
                return path.read_text()
            except (OSError, UnicodeDecodeError) as e:
                raise TemplateUnavailableError(
                    f"Could not read plist template {path}: {e}"
                ) from e
        case RemoteTemplate(url=url):
            logger.debug("Fetching plist template from %s", url)
            try:
                async with httpx.AsyncClient(
                    timeout=timeout, follow_redirects=True
                ) as client:
                    response = await client.get(url)
                    response.raise_for_status()
                    return response.text
            except httpx.HTTPError as e:
                raise TemplateUnavailableError(
                    f"Could not fetch plist template {url}: {e}"
                ) from e
    raise TemplateUnavailableError(f"Unsupported template source: {source!r}")


def substitute(text: str, attributes: dict[str, str]) -> str:
    """Expand ``{{name}}`` placeholders in a single, non-recursive pass."""

    def replace(match: re.Match[str]) -> str:
        return str(attributes.get(match.group(1), ""))

    return PLACEHOLDER_RE.sub(replace, text)


def force_label(text: str, label: str) -> str:
    """Make the plist Label equal ``label``, whatever the template said."""
    if LABEL_RE.search(text):
        return LABEL_RE.sub(lambda m: f"{m.group(1)}{label}{m.group(2)}", text)
    # No Label key at all: add one as the first dict entry
    return FIRST_DICT_RE.sub(
        lambda m: f"{m.group(0)}\n  <key>Label</key>\n  <string>{label}</string>",
        text,
        count=1,
    )


def reconcile_user(text: str, context: ExecutionContext, startup_user: str) -> str:
    """Adjust UserName so the service does not run as root unintentionally."""
    if context.user != ROOT_USER and ROOT_USERNAME_RE.search(text):
        return USERNAME_RE.sub(
            lambda m: f"{m.group(1)}{startup_user}{m.group(2)}", text
        )
    if (
        context.privileged
        and context.user != ROOT_USER
        and not USERNAME_KEY_RE.search(text)
    ):
        return CLOSING_RE.sub(
            lambda m: f"  <key>UserName</key><string>{startup_user}</string>\n"
            f"{m.group(1)}",
            text,
        )
    return text


class PlistRenderer:
    """Renders plist templates for one execution context."""

    def __init__(self, context: ExecutionContext, fetch_timeout: float = 30.0):
        self.context = context
        self.fetch_timeout = fetch_timeout

    async def render(
        self,
        source: TemplateSource,
        attributes: dict[str, str],
        label: str,
        startup_user: str | None = None,
    ) -> str:
        """Materialize and render a template.

        Args:
            source: Where the template comes from.
            attributes: Placeholder values.
            label: Launchd label forced into the result.
            startup_user: User to run as instead of root; defaults to the
                context user.
        """
        text = await materialize(source, timeout=self.fetch_timeout)
        return self.render_text(text, attributes, label, startup_user)

    def render_text(
        self,
        text: str,
        attributes: dict[str, str],
        label: str,
        startup_user: str | None = None,
    ) -> str:
        data = substitute(text, attributes)
        data = force_label(data, label)
        data = reconcile_user(data, self.context, startup_user or self.context.user)
        logger.debug("Generated plist for %s:\n%s", label, data)
        return data
