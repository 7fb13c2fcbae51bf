"""View models for the non-quiz module types.

Text modules are authored as plain text where every line is a paragraph;
lines are passed through markdown so authors can still use emphasis, lists
and tables. Video modules become an embeddable iframe fragment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from markdown_it import MarkdownIt

from course_player.constants.course_constants import NO_CONTENT_MESSAGE
from course_player.core.models import Module, TextContent, VideoContent

_IFRAME_ALLOW = "accelerometer; autoplay; clipboard-write; encrypted-media; gyroscope; picture-in-picture"


@dataclass(frozen=True, slots=True)
class TextView:
    title: str
    paragraphs: list[str]
    html: str


@dataclass(frozen=True, slots=True)
class VideoView:
    title: str
    video_url: str
    embed_html: str


@dataclass(slots=True)
class ContentRenderer:
    """Turns text and video modules into display-ready fragments."""

    enable_html: bool = False
    _markdown: MarkdownIt = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._markdown = (
            MarkdownIt("commonmark", {"html": self.enable_html})
            .enable("table")
            .enable("strikethrough")
        )

    def render_text(self, module: Module) -> TextView:
        if not isinstance(module.content, TextContent):
            raise TypeError(f"Module {module.id} is not a text module.")
        paragraphs = [line.strip() for line in module.content.body.split("\n") if line.strip()]
        if not paragraphs:
            return TextView(title=module.module_title, paragraphs=[], html=NO_CONTENT_MESSAGE)
        return TextView(
            title=module.module_title,
            paragraphs=paragraphs,
            html=self._markdown.render("\n\n".join(paragraphs)),
        )

    def render_video(self, module: Module) -> VideoView:
        if not isinstance(module.content, VideoContent):
            raise TypeError(f"Module {module.id} is not a video module.")
        url = module.content.video_url
        embed = (
            f'<iframe width="100%" height="400" src="{escape(url, quote=True)}" '
            f'title="{escape(module.module_title, quote=True)}" frameborder="0" '
            f'allow="{_IFRAME_ALLOW}" allowfullscreen></iframe>'
        )
        return VideoView(title=module.module_title, video_url=url, embed_html=embed)


renderer = ContentRenderer()
# Shared instance; MarkdownIt renders are read-only and safe to reuse.
